"""Dynamic swap fee driven by smoothed trade volume.

The pool keeps a short- and a long-window EMA of per-block trade volume. Their
ratio (the r-factor) measures how busy the pool is relative to its norm and is
mapped through a fixed piecewise curve to a fee. Amplified pools then charge a
fraction of that fee.

Everything here is pure integer math over a PoolState and a block height. The
EMAs are advanced to the height being priced at, but the PoolState itself is
never modified.
"""

from __future__ import annotations

from dataclasses import dataclass

from ampswap.constants import (
    AMP_FEE_FLOOR,
    AMP_FEE_TIERS,
    FEE_A,
    FEE_B,
    FEE_C0,
    FEE_C1,
    FEE_C2,
    FEE_F,
    FEE_G,
    FEE_L,
    FEE_R0,
    FEE_U,
    LONG_ALPHA,
    PRECISION,
    SHORT_ALPHA,
)
from ampswap.math.fixed_point import frac, get_ema, mul_in_precision, pow_in_precision
from ampswap.models.pool_state import PoolState
from ampswap.safe_int import S


@dataclass(frozen=True)
class VolumeEmas:
    """Short and long volume EMAs as of a given block."""

    short_ema: int
    long_ema: int

    @property
    def r_factor(self) -> int:
        return calculate_r_factor(self.short_ema, self.long_ema)


def advance_ema(ema: int, alpha: int, block_volume: int, skip_blocks: int) -> int:
    """Advance an EMA across skip_blocks elapsed blocks.

    The first elapsed block folds in the volume traded in the pool's last
    trade block; every further block had zero volume and only decays the
    average by (1 - alpha).

    Args:
        ema: EMA as of the last trade block
        alpha: Smoothing factor, scaled by PRECISION
        block_volume: Volume traded in the last trade block
        skip_blocks: Blocks elapsed since the last trade block

    Returns:
        EMA as of the current block
    """
    if skip_blocks <= 0:
        return ema
    ema = get_ema(ema, alpha, block_volume)
    if skip_blocks > 1:
        decay = pow_in_precision(PRECISION - alpha, skip_blocks - 1)
        ema = mul_in_precision(ema, decay)
    return ema


def advance_emas(pool: PoolState, current_block: int) -> VolumeEmas:
    """Bring a pool's volume EMAs up to current_block.

    A last_trade_block of zero means the pool has never traded; it is treated
    as trading in the current block so no decay is applied.
    """
    last_trade_block = pool.last_trade_block or current_block
    skip_blocks = current_block - last_trade_block
    return VolumeEmas(
        short_ema=advance_ema(pool.short_ema, SHORT_ALPHA, pool.current_block_volume, skip_blocks),
        long_ema=advance_ema(pool.long_ema, LONG_ALPHA, pool.current_block_volume, skip_blocks),
    )


def calculate_r_factor(short_ema: int, long_ema: int) -> int:
    """Ratio short_ema / long_ema scaled by PRECISION (0 if no history)."""
    if long_ema == 0:
        return 0
    return frac(short_ema, PRECISION, long_ema)


def get_fee(r_factor_in_precision: int) -> int:
    """Map an r-factor to the base fee, scaled by PRECISION.

    Three regimes:
    - r >= R0: saturated at C0 (0.6%)
    - 1 <= r < R0: cubic around U, C1 + sign(r-U) * (A*(r-U)^3 + B*|r-U|)
    - r < 1: C2 + sign(r-G) * F*(r-G)^2 / (L + (r-G)^2)

    The last two are divided by 10000 as the contract does.

    Args:
        r_factor_in_precision: Short/long EMA ratio scaled by PRECISION

    Returns:
        Fee scaled by PRECISION (e.g. 0.25% -> 2.5e15)
    """
    r = r_factor_in_precision

    if r >= FEE_R0:
        return FEE_C0

    if r >= PRECISION:
        tmp = S(r).abs_diff(FEE_U).value
        tmp3 = pow_in_precision(tmp, 3)
        cubic = S(mul_in_precision(FEE_A, tmp3)) + S(mul_in_precision(FEE_B, tmp))
        if r > FEE_U:
            return ((S(FEE_C1) + cubic) // 10000).value
        return ((S(FEE_C1) - cubic) // 10000).value

    tmp = S(r).abs_diff(FEE_G).value
    tmp2 = pow_in_precision(tmp, 2)
    bump = frac(FEE_F, tmp2, tmp2 + FEE_L)
    if r > FEE_G:
        return ((S(FEE_C2) + bump) // 10000).value
    return ((S(FEE_C2) - bump) // 10000).value


def get_final_fee(fee_in_precision: int, amp_bps: int) -> int:
    """Scale the base fee down for strongly amplified pools.

    amp_bps <= 20000 pays the full fee, <= 50000 two thirds, <= 200000 one
    third, anything above 4/30.
    """
    for threshold, numerator, denominator in AMP_FEE_TIERS:
        if amp_bps <= threshold:
            if numerator == denominator:
                return fee_in_precision
            return frac(fee_in_precision, numerator, denominator)
    numerator, denominator = AMP_FEE_FLOOR
    return frac(fee_in_precision, numerator, denominator)


def pool_fee(pool: PoolState, current_block: int) -> int:
    """Effective fee of a pool at current_block, scaled by PRECISION."""
    emas = advance_emas(pool, current_block)
    return get_final_fee(get_fee(emas.r_factor), pool.amp_bps)


__all__ = [
    "VolumeEmas",
    "advance_ema",
    "advance_emas",
    "calculate_r_factor",
    "get_fee",
    "get_final_fee",
    "pool_fee",
]
