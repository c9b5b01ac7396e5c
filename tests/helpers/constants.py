"""Shared addresses and amounts for tests.

All addresses are lowercase for consistency with normalize_address().
Token addresses are numerically ordered TOKEN_A < TOKEN_B < TOKEN_C < TOKEN_D,
matching the token0 < token1 ordering pools require.

Usage:
    from tests.helpers import TOKEN_A, TOKEN_B
"""

from ampswap.constants import PRECISION

# =============================================================================
# Tokens
# =============================================================================

TOKEN_A = "0x" + "a1" * 20
TOKEN_B = "0x" + "b2" * 20
TOKEN_C = "0x" + "c3" * 20
TOKEN_D = "0x" + "d4" * 20

# =============================================================================
# Pools and contracts
# =============================================================================

POOL_AB = "0x" + "01" * 20
POOL_BC = "0x" + "02" * 20
POOL_AC = "0x" + "03" * 20
POOL_AB_2 = "0x" + "04" * 20
POOL_AB_3 = "0x" + "05" * 20

ROUTER = "0x" + "ee" * 20

TX_HASH_1 = "0x" + "11" * 32
TX_HASH_2 = "0x" + "22" * 32

# =============================================================================
# Amounts
# =============================================================================

# Reserves of the reference pool used for hand-computed vectors
RESERVE_1M = 1_000_000

# Fee of any pool with no trade history (r_factor = 0), scaled by PRECISION
ZERO_HISTORY_FEE = 1503833623506882

ONE = PRECISION
