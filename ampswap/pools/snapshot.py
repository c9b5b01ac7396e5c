"""Versioned, immutable snapshot of known pool states.

A PoolSnapshot is what the quoting engine and router read. It is published
whole by whoever fetches chain state; readers holding an older snapshot keep
using it until they ask for a fresh one. Nothing in the engine mutates it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

import structlog

from ampswap.errors import PoolNotFoundError
from ampswap.models.pool_state import PoolState
from ampswap.models.types import normalize_address

logger = structlog.get_logger()


def build_token_pools(pools: Iterable[PoolState]) -> dict[str, tuple[str, ...]]:
    """Index pools by the tokens they contain.

    Pools are appended in iteration order, so the index (and therefore the
    router's search order) is deterministic for a given snapshot.

    Args:
        pools: Pool states in snapshot order

    Returns:
        Mapping of token address to the addresses of pools holding it
    """
    index: dict[str, list[str]] = {}
    for pool in pools:
        index.setdefault(pool.token0, []).append(pool.address)
        index.setdefault(pool.token1, []).append(pool.address)
    return {token: tuple(addresses) for token, addresses in index.items()}


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool states and token index as of one block height.

    Attributes:
        pools: Pool address -> PoolState (read-only view)
        token_pools: Token address -> pool addresses holding it (read-only)
        block_height: Chain height the state was fetched at
        version: Monotonic counter, incremented on every publish
    """

    pools: Mapping[str, PoolState]
    token_pools: Mapping[str, tuple[str, ...]]
    block_height: int
    version: int = 0

    @classmethod
    def build(
        cls,
        pools: Iterable[PoolState],
        block_height: int,
        version: int = 0,
    ) -> PoolSnapshot:
        """Build a snapshot and its token index from pool states.

        Args:
            pools: Pool states; a later duplicate address replaces an earlier one
            block_height: Chain height the states were fetched at
            version: Snapshot version

        Returns:
            Immutable PoolSnapshot
        """
        by_address: dict[str, PoolState] = {}
        for pool in pools:
            by_address[pool.address] = pool
        return cls(
            pools=MappingProxyType(by_address),
            token_pools=MappingProxyType(build_token_pools(by_address.values())),
            block_height=block_height,
            version=version,
        )

    def __len__(self) -> int:
        return len(self.pools)

    def get_pool(self, address: str) -> PoolState:
        """Get a pool by address.

        Raises:
            PoolNotFoundError: If the pool is not in this snapshot
        """
        pool = self.pools.get(normalize_address(address))
        if pool is None:
            raise PoolNotFoundError(address)
        return pool

    def pools_for_token(self, token: str) -> tuple[str, ...]:
        """Addresses of pools containing token, in index order."""
        return self.token_pools.get(normalize_address(token), ())

    def with_pool(self, pool: PoolState, block_height: int | None = None) -> PoolSnapshot:
        """Return a new snapshot with one pool added or replaced.

        Args:
            pool: Fresh state for a single pool
            block_height: Height of the fresh state (defaults to current)

        Returns:
            New snapshot with version incremented
        """
        updated = dict(self.pools)
        if pool.address not in updated:
            logger.debug("pool_added", pool=pool.address, version=self.version + 1)
        updated[pool.address] = pool
        return PoolSnapshot.build(
            updated.values(),
            block_height=self.block_height if block_height is None else block_height,
            version=self.version + 1,
        )


__all__ = ["PoolSnapshot", "build_token_pools"]
