"""18-decimal fixed-point helpers matching the pool contract.

All values are plain integers scaled by PRECISION (10^18). Division always
floors, as the contract's Uint128/Uint256 arithmetic does, so results are
reproducible bit-for-bit.
"""

from __future__ import annotations

from ampswap.constants import PRECISION
from ampswap.safe_int import S

__all__ = [
    "frac",
    "mul_in_precision",
    "pow_in_precision",
    "get_ema",
]


def frac(x: int, y: int, z: int) -> int:
    """Return x * y // z.

    Raises:
        DivisionByZero: If z is zero
    """
    return (S(x) * S(y) // S(z)).value


def mul_in_precision(x: int, y: int) -> int:
    """Multiply two fixed-point values: x * y // PRECISION."""
    return frac(x, y, PRECISION)


def pow_in_precision(x: int, k: int) -> int:
    """Raise a fixed-point value to a non-negative integer power.

    Exponentiation by squaring, truncating after every multiplication exactly
    like the contract's unsafe_pow_in_precision. k == 0 yields PRECISION (1.0).

    Args:
        x: Base, scaled by PRECISION
        k: Exponent

    Returns:
        x^k scaled by PRECISION
    """
    if k < 0:
        raise ValueError(f"Exponent must be non-negative, got {k}")

    z = x if k % 2 else PRECISION
    k //= 2
    while k:
        x = mul_in_precision(x, x)
        if k % 2:
            z = mul_in_precision(z, x)
        k //= 2
    return z


def get_ema(ema: int, alpha: int, value: int) -> int:
    """Advance an exponential moving average by one observation.

    ema' = ((PRECISION - alpha) * ema + alpha * value) // PRECISION
    """
    a = (S(PRECISION) - S(alpha)) * S(ema)
    b = S(alpha) * S(value)
    return ((a + b) // PRECISION).value
