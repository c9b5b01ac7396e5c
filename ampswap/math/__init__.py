"""Fixed-point primitives used by the quoting engine."""

from ampswap.math.fixed_point import frac, get_ema, mul_in_precision, pow_in_precision

__all__ = ["frac", "get_ema", "mul_in_precision", "pow_in_precision"]
