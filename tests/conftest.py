"""Pytest configuration and fixtures."""

import pytest

from ampswap.models.pool_state import PoolState
from ampswap.pools.snapshot import PoolSnapshot
from tests.helpers import (
    POOL_AB,
    POOL_AC,
    POOL_BC,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    make_pool,
    make_snapshot,
)


@pytest.fixture
def pool_ab() -> PoolState:
    """Unamplified 1M/1M A-B pool with no trade history."""
    return make_pool(POOL_AB, TOKEN_A, TOKEN_B)


@pytest.fixture
def triangle() -> PoolSnapshot:
    """A-B and B-C deep pools plus a shallow direct A-C pool."""
    return make_snapshot(
        make_pool(POOL_AB, TOKEN_A, TOKEN_B, 1_000_000, 1_000_000),
        make_pool(POOL_BC, TOKEN_B, TOKEN_C, 1_000_000, 1_000_000),
        make_pool(POOL_AC, TOKEN_A, TOKEN_C, 10_000, 10_000),
    )
