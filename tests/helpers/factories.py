"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool, make_snapshot

    pool = make_pool(POOL_AB, TOKEN_A, TOKEN_B, 1_000_000, 1_000_000)
"""

from ampswap.constants import UNAMPLIFIED_AMP_BPS
from ampswap.models.pool_state import PoolState
from ampswap.pools.snapshot import PoolSnapshot
from tests.helpers.constants import POOL_AB, RESERVE_1M, TOKEN_A, TOKEN_B


def make_pool(
    address: str = POOL_AB,
    token_a: str = TOKEN_A,
    token_b: str = TOKEN_B,
    reserve_a: int = RESERVE_1M,
    reserve_b: int = RESERVE_1M,
    amp_bps: int = UNAMPLIFIED_AMP_BPS,
    v_reserve_a: int | None = None,
    v_reserve_b: int | None = None,
    short_ema: int = 0,
    long_ema: int = 0,
    current_block_volume: int = 0,
    last_trade_block: int = 0,
) -> PoolState:
    """Create a pool with sensible defaults.

    Tokens may be given in either order; they are sorted into token0/token1
    together with their reserves.

    Args:
        address: Pool address (default: POOL_AB)
        token_a: One token of the pair (default: TOKEN_A)
        token_b: The other token (default: TOKEN_B)
        reserve_a: Reserve of token_a (default: 1,000,000)
        reserve_b: Reserve of token_b (default: 1,000,000)
        amp_bps: Amplification (default: unamplified)
        v_reserve_a: Virtual reserve of token_a (default: reserve_a)
        v_reserve_b: Virtual reserve of token_b (default: reserve_b)

    Returns:
        Validated PoolState
    """
    v_reserve_a = reserve_a if v_reserve_a is None else v_reserve_a
    v_reserve_b = reserve_b if v_reserve_b is None else v_reserve_b
    if int(token_a, 16) > int(token_b, 16):
        token_a, token_b = token_b, token_a
        reserve_a, reserve_b = reserve_b, reserve_a
        v_reserve_a, v_reserve_b = v_reserve_b, v_reserve_a

    return PoolState(
        address=address,
        token0=token_a,
        token1=token_b,
        reserve0=reserve_a,
        reserve1=reserve_b,
        v_reserve0=v_reserve_a,
        v_reserve1=v_reserve_b,
        amp_bps=amp_bps,
        short_ema=short_ema,
        long_ema=long_ema,
        current_block_volume=current_block_volume,
        last_trade_block=last_trade_block,
        total_supply=reserve_a,
    )


def make_contract_state(pool: PoolState) -> dict:
    """Render a pool the way GetSmartContractState returns it."""
    return {
        "_balance": "0",
        "token0": pool.token0,
        "token1": pool.token1,
        "reserve0": str(pool.reserve0),
        "reserve1": str(pool.reserve1),
        "v_reserve0": str(pool.v_reserve0),
        "v_reserve1": str(pool.v_reserve1),
        "amp_bps": str(pool.amp_bps),
        "short_ema": str(pool.short_ema),
        "long_ema": str(pool.long_ema),
        "current_block_volume": str(pool.current_block_volume),
        "last_trade_block": str(pool.last_trade_block),
        "total_supply": str(pool.total_supply),
        "balances": {},
        "allowances": {},
        "k_last": "0",
        "r_factor_in_precision": "0",
    }


def make_snapshot(*pools: PoolState, block_height: int = 100, version: int = 0) -> PoolSnapshot:
    """Build a snapshot from pools in the given order."""
    return PoolSnapshot.build(pools, block_height=block_height, version=version)
