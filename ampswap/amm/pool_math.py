"""Single-pool pricing for amplified constant-product pools.

Pricing uses the virtual reserves of amplified pools (the actual reserves for
unamplified ones) and the pool's dynamic fee at the block being priced. The
fee is taken from the input amount:

    amount_in_with_fee = amount_in * (PRECISION - fee) // PRECISION
    amount_out = amount_in_with_fee * v_out // (amount_in_with_fee + v_in)

and the inverse rounds up twice so the returned input is always enough:

    raw_in = v_in * amount_out // (v_out - amount_out) + 1
    amount_in = ceil(raw_in * PRECISION / (PRECISION - fee))

The pool contract additionally requires the output to stay strictly below
the actual reserve and above zero; quotes that cannot meet this return
INFEASIBLE. Amounts must fit the contract's Uint128 fields; anything larger
raises Uint128Overflow.
"""

from __future__ import annotations

from ampswap.amm.base import INFEASIBLE, Infeasible, Quote, SwapResult, TradeInfo
from ampswap.amm.dynamic_fee import pool_fee
from ampswap.constants import BASIS, PRECISION, Q112
from ampswap.errors import ZeroReserveError
from ampswap.models.pool_state import PoolState
from ampswap.models.types import normalize_address
from ampswap.safe_int import S


def get_trade_info(pool: PoolState, token_in: str) -> TradeInfo:
    """Order a pool's reserves for a trade selling token_in.

    Raises:
        ValueError: If token_in is not in the pool
    """
    token_in = normalize_address(token_in)
    token_out = pool.other_token(token_in)
    if token_in == pool.token0:
        reserve_in, reserve_out = pool.reserve0, pool.reserve1
        v_reserve_in, v_reserve_out = pool.v_reserve0, pool.v_reserve1
    else:
        reserve_in, reserve_out = pool.reserve1, pool.reserve0
        v_reserve_in, v_reserve_out = pool.v_reserve1, pool.v_reserve0

    if not pool.is_amplified:
        v_reserve_in, v_reserve_out = reserve_in, reserve_out

    return TradeInfo(
        token_in=token_in,
        token_out=token_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        v_reserve_in=v_reserve_in,
        v_reserve_out=v_reserve_out,
    )


def get_amount_out(amount_in: int, v_reserve_in: int, v_reserve_out: int, fee_in_precision: int) -> int:
    """Output for an exact input against (virtual) reserves.

    Args:
        amount_in: Input token amount
        v_reserve_in: Reserve of the input token used for pricing
        v_reserve_out: Reserve of the output token used for pricing
        fee_in_precision: Fee scaled by PRECISION

    Returns:
        Output token amount (0 for zero input)
    """
    if amount_in == 0:
        return 0
    amount_in_with_fee = S(amount_in) * (S(PRECISION) - S(fee_in_precision)) // PRECISION
    numerator = amount_in_with_fee * S(v_reserve_out)
    denominator = amount_in_with_fee + S(v_reserve_in)
    if denominator.value == 0:
        return 0
    return (numerator // denominator).value


def get_amount_in(
    amount_out: int, v_reserve_in: int, v_reserve_out: int, fee_in_precision: int
) -> int | Infeasible:
    """Input required for an exact output against (virtual) reserves.

    Returns:
        Required input amount, or INFEASIBLE when amount_out meets or exceeds
        v_reserve_out or the input side holds nothing
    """
    if amount_out >= v_reserve_out or v_reserve_in == 0:
        return INFEASIBLE
    raw_in = S(v_reserve_in) * S(amount_out) // (S(v_reserve_out) - S(amount_out)) + 1
    return (raw_in * PRECISION).ceiling_div(S(PRECISION) - S(fee_in_precision)).value


def compute_output(
    pool: PoolState, token_in: str, amount_in: int, current_block: int
) -> SwapResult | Infeasible:
    """Price an exact-input swap through one pool at current_block.

    Args:
        pool: Pool state (not modified)
        token_in: Token sold into the pool
        amount_in: Exact input amount
        current_block: Block height the dynamic fee is evaluated at

    Returns:
        SwapResult, or INFEASIBLE if the pool is empty, the output rounds to
        zero or the output would drain the actual reserve

    Raises:
        ValueError: If token_in is not in the pool
        Uint128Overflow: If amount_in does not fit a Uint128
    """
    amount_in = S(amount_in).to_uint128()
    info = get_trade_info(pool, token_in)
    if pool.is_empty:
        return INFEASIBLE

    fee = pool_fee(pool, current_block)
    amount_out = get_amount_out(amount_in, info.v_reserve_in, info.v_reserve_out, fee)
    if amount_out == 0 or amount_out >= info.reserve_out:
        return INFEASIBLE

    return SwapResult(
        pool_address=pool.address,
        token_in=info.token_in,
        token_out=info.token_out,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_in_precision=fee,
    )


def compute_input(
    pool: PoolState, token_in: str, amount_out: int, current_block: int
) -> SwapResult | Infeasible:
    """Price an exact-output swap through one pool at current_block.

    Returns:
        SwapResult, or INFEASIBLE if amount_out cannot be taken from the pool

    Raises:
        ValueError: If token_in is not in the pool
        Uint128Overflow: If amount_out or the required input does not fit a
            Uint128
    """
    amount_out = S(amount_out).to_uint128()
    info = get_trade_info(pool, token_in)
    if pool.is_empty or amount_out >= info.reserve_out:
        return INFEASIBLE

    fee = pool_fee(pool, current_block)
    amount_in = get_amount_in(amount_out, info.v_reserve_in, info.v_reserve_out, fee)
    if amount_in is INFEASIBLE:
        return INFEASIBLE

    return SwapResult(
        pool_address=pool.address,
        token_in=info.token_in,
        token_out=info.token_out,
        amount_in=S(amount_in).to_uint128(),
        amount_out=amount_out,
        fee_in_precision=fee,
    )


def epsilon_output(pool: PoolState, token_in: str, amount_in: int) -> int:
    """Fee-free output priced on actual reserves."""
    info = get_trade_info(pool, token_in)
    return get_amount_out(amount_in, info.reserve_in, info.reserve_out, 0)


def epsilon_input(pool: PoolState, token_in: str, amount_out: int) -> int | Infeasible:
    """Fee-free required input priced on actual reserves."""
    info = get_trade_info(pool, token_in)
    return get_amount_in(amount_out, info.reserve_in, info.reserve_out, 0)


def _slippage_bps(worse: int, better: int, reference: int) -> int:
    if reference == 0:
        return 0
    return (S(worse).abs_diff(better) * BASIS // reference).value


def quote_exact_input(
    pool: PoolState, token_in: str, amount_in: int, current_block: int
) -> Quote | Infeasible:
    """Expected output of a single-pool swap and its slippage.

    Slippage is (epsilon - expected) / epsilon in basis points, where epsilon
    is the fee-free output on actual reserves.
    """
    result = compute_output(pool, token_in, amount_in, current_block)
    if result is INFEASIBLE:
        return INFEASIBLE
    epsilon = epsilon_output(pool, token_in, amount_in)
    slippage = _slippage_bps(result.amount_out, epsilon, epsilon) if epsilon > result.amount_out else 0
    return Quote(expected_amount=result.amount_out, epsilon_amount=epsilon, slippage_bps=slippage)


def quote_exact_output(
    pool: PoolState, token_in: str, amount_out: int, current_block: int
) -> Quote | Infeasible:
    """Required input of a single-pool swap and its slippage.

    Slippage is (expected - epsilon) / expected in basis points.
    """
    result = compute_input(pool, token_in, amount_out, current_block)
    if result is INFEASIBLE:
        return INFEASIBLE
    epsilon = epsilon_input(pool, token_in, amount_out)
    if epsilon is INFEASIBLE:
        return INFEASIBLE
    expected = result.amount_in
    slippage = _slippage_bps(expected, epsilon, expected) if expected > epsilon else 0
    return Quote(expected_amount=expected, epsilon_amount=epsilon, slippage_bps=slippage)


def validate_slippage_bps(slippage_bps: int) -> int:
    """Check a slippage tolerance is an integer in [0, BASIS).

    Raises:
        ValueError: If the tolerance is not an int or out of range
    """
    if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int):
        raise ValueError(f"Slippage must be an integer number of bps, got {slippage_bps!r}")
    if slippage_bps < 0 or slippage_bps >= BASIS:
        raise ValueError(f"Slippage must be in [0, {BASIS}) bps, got {slippage_bps}")
    return slippage_bps


def min_amount_out(expected_amount_out: int, max_slippage_bps: int) -> int:
    """Lowest acceptable output: expected * BASIS // (BASIS + slippage)."""
    validate_slippage_bps(max_slippage_bps)
    return (S(expected_amount_out) * BASIS // (S(BASIS) + S(max_slippage_bps))).value


def max_amount_in(expected_amount_in: int, max_slippage_bps: int) -> int:
    """Highest acceptable input: expected * (BASIS + slippage) // BASIS."""
    validate_slippage_bps(max_slippage_bps)
    return (S(expected_amount_in) * (S(BASIS) + S(max_slippage_bps)) // BASIS).value


def quote_liquidity(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of token B matching amount_a at the pool's current ratio.

    Raises:
        ZeroReserveError: If either reserve is zero
    """
    if reserve_a == 0 or reserve_b == 0:
        raise ZeroReserveError(f"Cannot quote against empty reserves {reserve_a}/{reserve_b}")
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value


def optimal_liquidity_amounts(
    pool: PoolState, token_a: str, amount_a_desired: int, amount_b_desired: int
) -> tuple[int, int]:
    """Amounts of token_a and its pair actually deposited by AddLiquidity.

    An empty pool takes both desired amounts and sets the price. Otherwise
    the larger side is cut down to the pool's current ratio.

    Raises:
        ValueError: If token_a is not in the pool
    """
    info = get_trade_info(pool, token_a)
    if pool.is_empty:
        return amount_a_desired, amount_b_desired

    amount_b_optimal = quote_liquidity(amount_a_desired, info.reserve_in, info.reserve_out)
    if amount_b_optimal <= amount_b_desired:
        return amount_a_desired, amount_b_optimal
    amount_a_optimal = quote_liquidity(amount_b_desired, info.reserve_out, info.reserve_in)
    return amount_a_optimal, amount_b_desired


def v_reserve_ratio_bounds(pool: PoolState, allowance_bps: int) -> tuple[int, int]:
    """Accepted range of v_reserve1 / v_reserve0 (UQ112) when adding liquidity.

    The range is the current ratio divided and multiplied by
    (1 + allowance). Unamplified and empty pools do not check the ratio and
    get (0, 0).
    """
    validate_slippage_bps(allowance_bps)
    if pool.is_empty or not pool.is_amplified:
        return 0, 0
    ratio = S(pool.v_reserve1) * Q112 // S(pool.v_reserve0)
    widened = S(BASIS) + S(allowance_bps)
    return (ratio * BASIS // widened).value, (ratio * widened // BASIS).value


def removal_amounts(pool: PoolState, liquidity: int) -> tuple[int, int]:
    """token0 and token1 returned for burning liquidity pool shares.

    Raises:
        ValueError: If liquidity is not positive or exceeds the total supply
        ZeroReserveError: If the pool holds no tokens
    """
    if liquidity <= 0:
        raise ValueError(f"Liquidity must be positive, got {liquidity}")
    if liquidity > pool.total_supply:
        raise ValueError(f"Liquidity {liquidity} exceeds total supply {pool.total_supply}")
    return (
        quote_liquidity(liquidity, pool.total_supply, pool.reserve0),
        quote_liquidity(liquidity, pool.total_supply, pool.reserve1),
    )


__all__ = [
    "compute_input",
    "compute_output",
    "epsilon_input",
    "epsilon_output",
    "get_amount_in",
    "get_amount_out",
    "get_trade_info",
    "max_amount_in",
    "min_amount_out",
    "optimal_liquidity_amounts",
    "quote_exact_input",
    "quote_exact_output",
    "quote_liquidity",
    "removal_amounts",
    "v_reserve_ratio_bounds",
    "validate_slippage_bps",
]
