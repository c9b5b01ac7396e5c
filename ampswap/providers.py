"""Collaborator interfaces the engine depends on.

The quoting engine, router and observer never talk to the network directly.
They go through these protocols, implemented by ampswap.rpc.ZilliqaRpcClient
or by any test double.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ampswap.models.pool_state import PoolState
    from ampswap.models.receipt import TxReceipt
    from ampswap.observer.types import ChainTxStatus


class StateProvider(Protocol):
    """Source of pool states and chain height."""

    async def fetch_pool_states(self) -> dict[str, PoolState]:
        """Fetch every pool registered with the router, keyed by address."""
        ...

    async def fetch_pool_state(self, address: str) -> PoolState:
        """Fetch a single pool."""
        ...

    async def fetch_token_pools(self) -> dict[str, list[str]]:
        """Token address -> addresses of pools holding it."""
        ...

    async def current_block_height(self) -> int: ...


class ChainStatusProvider(Protocol):
    """Source of transaction status for the observer."""

    async def get_transaction_status(self, tx_hash: str) -> ChainTxStatus:
        """Status of a transaction; unknown transactions are PENDING."""
        ...

    async def get_receipt(self, tx_hash: str) -> TxReceipt:
        """Receipt of a finalized transaction."""
        ...

    async def current_block_height(self) -> int: ...


class TransactionSender(Protocol):
    """Signs and submits contract calls. Key handling lives behind this."""

    async def send(self, contract_address: str, call: Any) -> str:
        """Submit a call to contract_address and return the transaction hash."""
        ...


__all__ = ["ChainStatusProvider", "StateProvider", "TransactionSender"]
