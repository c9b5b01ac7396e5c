"""Protocol constants for amplified AMM pools.

Centralizes the fixed-point precision, EMA smoothing factors and the frozen
dynamic-fee curve table. Every value here must match the pool contract
bit-for-bit; quotes computed off-chain are compared against on-chain bounds.
"""

# 18-decimal fixed-point unit
PRECISION = 10**18

# Basis points denominator (10000 = 100%)
BASIS = 10000

# amp_bps of a pool without amplification
UNAMPLIFIED_AMP_BPS = BASIS

# Per-block smoothing factors for the short and long volume EMAs
SHORT_ALPHA = 370301795963710
LONG_ALPHA = 185168039996296

# Largest amount a Uint128 contract field can hold
UINT128_MAX = 2**128 - 1

# Default number of blocks a submitted transaction stays valid for
DEFAULT_DEADLINE_BUFFER = 3

# Default slippage tolerance (200 bps = 2%)
DEFAULT_MAX_SLIPPAGE_BPS = 200

# Longest route the router will consider
MAX_HOPS = 3


# =============================================================================
# Dynamic fee curve
# =============================================================================
# Empirically fixed coefficients. Each is computed with integer floor division
# exactly as the contract does; do not re-derive them.

# r_factor at or above which the fee saturates at FEE_C0
FEE_R0 = 1477405064814996100
# Offset of the low-volatility (r < 1) regime
FEE_C2 = 20036905816356657810
# Saturated fee (0.6%)
FEE_C0 = 60 * PRECISION // 10000
# Cubic regime (1 <= r < R0): C1 +/- A*(r-U)^3 +/- B*(r-U)
FEE_A = 20000 * PRECISION // 27
FEE_B = 250 * PRECISION // 9
FEE_C1 = 985 * PRECISION // 27
FEE_U = 120 * PRECISION // 100
# Quadratic regime (r < 1): C2 +/- F*(r-G)^2 / (L + (r-G)^2)
FEE_G = 836 * PRECISION // 1000
FEE_F = 5 * PRECISION
FEE_L = 2 * PRECISION // 10000

# amp_bps thresholds and the fraction (numerator, denominator) of the base fee
# charged above each one
AMP_FEE_TIERS: tuple[tuple[int, int, int], ...] = (
    (20000, 30, 30),
    (50000, 20, 30),
    (200000, 10, 30),
)
AMP_FEE_FLOOR = (4, 30)

# UQ112 scale of the virtual reserve ratio bounds passed to AddLiquidity
Q112 = 2**112
