"""Test helpers module for shared test utilities.

- constants: Token, pool and transaction addresses and common amounts
- factories: PoolState and PoolSnapshot factory functions
- fakes: In-memory implementations of the provider protocols
"""

from tests.helpers.constants import (
    POOL_AB,
    POOL_AB_2,
    POOL_AB_3,
    POOL_AC,
    POOL_BC,
    RESERVE_1M,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    TX_HASH_1,
    TX_HASH_2,
    ZERO_HISTORY_FEE,
)
from tests.helpers.factories import make_contract_state, make_pool, make_snapshot
from tests.helpers.fakes import FakeChain, FakeSender, FakeState

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "POOL_AB",
    "POOL_AB_2",
    "POOL_AB_3",
    "POOL_AC",
    "POOL_BC",
    "ROUTER",
    "TX_HASH_1",
    "TX_HASH_2",
    "RESERVE_1M",
    "ZERO_HISTORY_FEE",
    # Factories
    "make_contract_state",
    "make_pool",
    "make_snapshot",
    # Fakes
    "FakeChain",
    "FakeSender",
    "FakeState",
]
