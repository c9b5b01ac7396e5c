"""In-memory implementations of the provider protocols.

Usage:
    chain = FakeChain(height=100)
    chain.statuses[TX_HASH_1] = ChainTxStatus.FINALIZED
    chain.receipts[TX_HASH_1] = TxReceipt(success=True)
"""

import asyncio

from ampswap.errors import RpcError
from ampswap.models.pool_state import PoolState
from ampswap.models.receipt import TxReceipt
from ampswap.observer.types import ChainTxStatus
from ampswap.pools.snapshot import build_token_pools


class FakeState:
    """StateProvider serving a mutable set of pools.

    Set failing to make every fetch raise RpcError.
    """

    def __init__(self, pools: list[PoolState], height: int = 100) -> None:
        self.pools = {pool.address: pool for pool in pools}
        self.height = height
        self.fetch_count = 0
        self.failing = False

    def set_pool(self, pool: PoolState) -> None:
        self.pools[pool.address] = pool

    async def fetch_pool_states(self) -> dict[str, PoolState]:
        self.fetch_count += 1
        if self.failing:
            raise RpcError("node unreachable")
        return dict(self.pools)

    async def fetch_pool_state(self, address: str) -> PoolState:
        if self.failing:
            raise RpcError("node unreachable")
        return self.pools[address]

    async def fetch_token_pools(self) -> dict[str, list[str]]:
        return {t: list(p) for t, p in build_token_pools(self.pools.values()).items()}

    async def current_block_height(self) -> int:
        return self.height


class FakeChain:
    """ChainStatusProvider with scriptable answers.

    Attributes:
        height: Block height returned by current_block_height
        statuses: Hash -> status (missing hashes are PENDING)
        receipts: Hash -> receipt for finalized transactions
        failing: Hashes whose status query raises
        slow: Hashes whose status query never returns
        height_gate: If set, current_block_height waits on it
    """

    def __init__(self, height: int = 100) -> None:
        self.height = height
        self.statuses: dict[str, ChainTxStatus] = {}
        self.receipts: dict[str, TxReceipt] = {}
        self.failing: set[str] = set()
        self.slow: set[str] = set()
        self.height_gate: asyncio.Event | None = None
        self.fail_height = False
        self.height_calls = 0
        self.status_calls: list[str] = []

    async def current_block_height(self) -> int:
        self.height_calls += 1
        if self.height_gate is not None:
            await self.height_gate.wait()
        if self.fail_height:
            raise ConnectionError("node unreachable")
        return self.height

    async def get_transaction_status(self, tx_hash: str) -> ChainTxStatus:
        self.status_calls.append(tx_hash)
        if tx_hash in self.failing:
            raise ConnectionError(f"status query failed for {tx_hash}")
        if tx_hash in self.slow:
            await asyncio.sleep(3600)
        return self.statuses.get(tx_hash, ChainTxStatus.PENDING)

    async def get_receipt(self, tx_hash: str) -> TxReceipt:
        return self.receipts[tx_hash]


class FakeSender:
    """TransactionSender recording every call and returning fixed hashes."""

    def __init__(self, hashes: list[str]) -> None:
        self._hashes = list(hashes)
        self.sent: list[tuple[str, object]] = []

    async def send(self, contract_address: str, call: object) -> str:
        self.sent.append((contract_address, call))
        return self._hashes.pop(0)
