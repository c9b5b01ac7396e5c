"""Registry of submitted transactions polled until they settle.

Each poll cycle:
1. Copies the observed entries under the lock.
2. Queries the chain height and, concurrently, the status of every entry,
   without holding the lock.
3. Removes the entries that reached a terminal status under the lock.
4. Invokes the update callback once per removed entry, outside the lock.

A poll that starts while another is running returns immediately without
querying anything. Query failures never abort a cycle: the affected entry
stays pending and is retried on the next poll.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from ampswap.models.receipt import TxReceipt
from ampswap.observer.types import ChainTxStatus, ObservedTx, OnUpdate, TxStatus
from ampswap.providers import ChainStatusProvider

logger = structlog.get_logger()

T = TypeVar("T")

Transition = tuple[ObservedTx, TxStatus, TxReceipt | None]


class TransactionObserver:
    """Track transactions until confirmed, rejected or expired.

    Args:
        chain: Source of block height, transaction status and receipts
        on_update: Called once for each transaction reaching a terminal status
        query_timeout: Seconds allowed per chain query (None waits forever)
    """

    def __init__(
        self,
        chain: ChainStatusProvider,
        on_update: OnUpdate | None = None,
        query_timeout: float | None = None,
    ) -> None:
        self.chain = chain
        self.on_update = on_update
        self.query_timeout = query_timeout
        self._observed: dict[str, ObservedTx] = {}
        self._lock = asyncio.Lock()
        self._poll_task: asyncio.Task[list[tuple[ObservedTx, TxStatus]]] | None = None
        self._timer_task: asyncio.Task[None] | None = None
        self._closed = False

    async def observe(self, tx: ObservedTx) -> None:
        """Start tracking tx. Observing a known hash replaces its deadline."""
        async with self._lock:
            replaced = tx.hash in self._observed
            self._observed[tx.hash] = tx
        logger.info("tx_observed", tx_hash=tx.hash, deadline=tx.deadline, replaced=replaced)

    async def get_observed(self) -> list[ObservedTx]:
        """Copy of the transactions still being tracked."""
        async with self._lock:
            return list(self._observed.values())

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def poll(self) -> list[tuple[ObservedTx, TxStatus]]:
        """Run one poll cycle.

        Returns:
            The (tx, status) transitions fired by this cycle; empty if another
            cycle was already running or the observer is torn down
        """
        if self._closed or self.is_polling:
            return []
        self._poll_task = asyncio.create_task(self._poll_once())
        # Shielded so a cancelled caller does not abandon a half-finished
        # cycle; teardown waits for it instead.
        return await asyncio.shield(self._poll_task)

    async def notify_block(self, height: int) -> list[tuple[ObservedTx, TxStatus]]:
        """Poll in response to a new block."""
        logger.debug("new_block", height=height)
        return await self.poll()

    def start(self, interval: float) -> None:
        """Poll every interval seconds in a background task.

        Must be called from a running event loop.
        """
        if self._timer_task is not None and not self._timer_task.done():
            raise RuntimeError("Observer timer already running")
        self._closed = False
        self._timer_task = asyncio.create_task(self._run_timer(interval))
        logger.info("observer_started", interval=interval)

    async def teardown(self) -> None:
        """Stop polling and wait for an in-flight cycle to finish.

        No callback fires after this returns.
        """
        self._closed = True
        if self._timer_task is not None:
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
            self._timer_task = None
        if self._poll_task is not None:
            await self._poll_task
            self._poll_task = None
        logger.info("observer_stopped", pending=len(self._observed))

    async def _run_timer(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.poll()

    async def _poll_once(self) -> list[tuple[ObservedTx, TxStatus]]:
        async with self._lock:
            entries = list(self._observed.values())
        if not entries:
            return []

        try:
            height = await self._query(self.chain.current_block_height())
        except Exception as e:
            logger.warning("block_height_query_failed", error=str(e), error_type=type(e).__name__)
            return []

        outcomes = await asyncio.gather(*(self._check(tx, height) for tx in entries))

        transitions: list[Transition] = []
        async with self._lock:
            for outcome in outcomes:
                if outcome is None:
                    continue
                tx = outcome[0]
                # Skip entries re-observed with a new deadline during the cycle
                if self._observed.get(tx.hash) != tx:
                    continue
                del self._observed[tx.hash]
                transitions.append(outcome)

        for tx, status, receipt in transitions:
            logger.info("tx_settled", tx_hash=tx.hash, status=status.value, height=height)
            self._notify(tx, status, receipt)

        return [(tx, status) for tx, status, _ in transitions]

    async def _check(self, tx: ObservedTx, height: int) -> Transition | None:
        """Decide the status of one entry. None means still pending."""
        try:
            chain_status = await self._query(self.chain.get_transaction_status(tx.hash))
            if chain_status is ChainTxStatus.FINALIZED:
                receipt = await self._query(self.chain.get_receipt(tx.hash))
                status = TxStatus.CONFIRMED if receipt.success else TxStatus.REJECTED
                return tx, status, receipt
        except Exception as e:
            logger.warning(
                "tx_status_query_failed",
                tx_hash=tx.hash,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if height > tx.deadline:
            return tx, TxStatus.EXPIRED, None
        return None

    async def _query(self, awaitable: Awaitable[T]) -> T:
        if self.query_timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self.query_timeout)

    def _notify(self, tx: ObservedTx, status: TxStatus, receipt: TxReceipt | None) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update(tx, status, receipt)
        except Exception:
            logger.exception("tx_update_callback_failed", tx_hash=tx.hash, status=status.value)


__all__ = ["TransactionObserver"]
