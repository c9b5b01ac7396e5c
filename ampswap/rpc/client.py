"""Zilliqa JSON-RPC adapter for pool state and transaction status.

All queries go out as JSON-RPC 2.0 batches over one httpx.AsyncClient.
Results come back keyed by request id; a batch with any failed request
raises RpcError naming each failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ampswap.errors import RpcError
from ampswap.models.pool_state import PoolState
from ampswap.models.receipt import TxReceipt
from ampswap.models.types import normalize_address
from ampswap.observer.types import ChainTxStatus
from ampswap.pools.snapshot import build_token_pools

logger = structlog.get_logger()

# modificationState reported by GetTransactionStatus once a transaction is final
FINALIZED_MODIFICATION_STATE = 2

# Error message fragments meaning the node has not seen the transaction yet
_PENDING_ERROR_MARKERS = ("not found", "not present", "not yet")


def make_request(request_id: str, method: str, params: list[Any]) -> dict[str, Any]:
    """Build one JSON-RPC 2.0 request."""
    return {"id": request_id, "jsonrpc": "2.0", "method": method, "params": params}


def _strip_prefix(address: str) -> str:
    """The node expects addresses and hashes without the 0x prefix."""
    return address[2:] if address.lower().startswith("0x") else address


class ZilliqaRpcClient:
    """StateProvider and ChainStatusProvider backed by a Zilliqa node.

    Args:
        rpc_url: Node JSON-RPC endpoint
        router_address: Router contract listing all pools
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        rpc_url: str,
        router_address: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.router_address = normalize_address(router_address)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> ZilliqaRpcClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send_batch(self, requests: Sequence[dict[str, Any]]) -> dict[str, Any]:
        """Post a JSON-RPC batch.

        Args:
            requests: Requests built with make_request

        Returns:
            Result of each request keyed by request id

        Raises:
            RpcError: On transport failure, a malformed response, or if any
                request in the batch returned an error
        """
        try:
            response = await self._client.post(self.rpc_url, json=list(requests))
            response.raise_for_status()
            results = response.json()
        except httpx.HTTPError as e:
            raise RpcError(f"RPC request to {self.rpc_url} failed: {e}") from e
        except ValueError as e:
            raise RpcError(f"RPC response is not JSON: {e}") from e

        if not isinstance(results, list):
            raise RpcError(f"Expected a batch response, got {type(results).__name__}")

        errors = [
            f"[{r.get('id')}] {r['error'].get('message', '')}" for r in results if r.get("error")
        ]
        if errors:
            raise RpcError("Failed to send batch request: " + ". ".join(errors))

        return {str(r.get("id")): r.get("result") for r in results}

    async def _call(self, method: str, params: list[Any]) -> Any:
        results = await self.send_batch([make_request("1", method, params)])
        return results["1"]

    # --- StateProvider ---

    async def fetch_pool_addresses(self) -> list[str]:
        """Pool addresses registered with the router, in router order."""
        result = await self._call(
            "GetSmartContractSubState",
            [_strip_prefix(self.router_address), "all_pools", []],
        )
        pools = (result or {}).get("all_pools", [])
        return [normalize_address(address) for address in pools]

    async def fetch_pool_states(self) -> dict[str, PoolState]:
        """Fetch and validate the state of every router pool.

        Raises:
            RpcError: If a query fails or a pool state is malformed
        """
        addresses = await self.fetch_pool_addresses()
        if not addresses:
            return {}

        requests = [
            make_request(address, "GetSmartContractState", [_strip_prefix(address)])
            for address in addresses
        ]
        results = await self.send_batch(requests)

        states: dict[str, PoolState] = {}
        for address in addresses:
            states[address] = self._parse_pool_state(address, results.get(address))
        logger.debug("pool_states_fetched", count=len(states))
        return states

    async def fetch_pool_state(self, address: str) -> PoolState:
        address = normalize_address(address)
        result = await self._call("GetSmartContractState", [_strip_prefix(address)])
        return self._parse_pool_state(address, result)

    async def fetch_token_pools(self) -> dict[str, list[str]]:
        states = await self.fetch_pool_states()
        return {token: list(pools) for token, pools in build_token_pools(states.values()).items()}

    async def current_block_height(self) -> int:
        result = await self._call("GetLatestTxBlock", [])
        try:
            return int(result["header"]["BlockNum"])
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"Malformed GetLatestTxBlock result: {result!r}") from e

    @staticmethod
    def _parse_pool_state(address: str, state: Any) -> PoolState:
        if not isinstance(state, dict):
            raise RpcError(f"Missing state for pool {address}")
        try:
            return PoolState.from_contract_state(address, state)
        except ValidationError as e:
            raise RpcError(f"Invalid state for pool {address}: {e}") from e

    # --- ChainStatusProvider ---

    async def get_transaction_status(self, tx_hash: str) -> ChainTxStatus:
        """Finalization status of a transaction; unknown hashes are PENDING."""
        try:
            result = await self._call("GetTransactionStatus", [_strip_prefix(tx_hash)])
        except RpcError as e:
            message = str(e).lower()
            if any(marker in message for marker in _PENDING_ERROR_MARKERS):
                return ChainTxStatus.PENDING
            raise

        state = (result or {}).get("modificationState")
        if state is not None and int(state) >= FINALIZED_MODIFICATION_STATE:
            return ChainTxStatus.FINALIZED
        return ChainTxStatus.PENDING

    async def get_receipt(self, tx_hash: str) -> TxReceipt:
        result = await self._call("GetTransaction", [_strip_prefix(tx_hash)])
        receipt = (result or {}).get("receipt")
        if receipt is None:
            raise RpcError(f"Transaction {tx_hash} has no receipt")
        try:
            return TxReceipt.model_validate(receipt)
        except ValidationError as e:
            raise RpcError(f"Invalid receipt for {tx_hash}: {e}") from e


__all__ = ["FINALIZED_MODIFICATION_STATE", "ZilliqaRpcClient", "make_request"]
