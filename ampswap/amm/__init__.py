"""Quoting engine for amplified AMM pools.

dynamic_fee derives the per-block fee from volume EMAs; pool_math prices
single-pool swaps with it.
"""

from .base import INFEASIBLE, Infeasible, Quote, SwapResult, TradeInfo
from .dynamic_fee import advance_emas, calculate_r_factor, get_fee, get_final_fee, pool_fee
from .pool_math import (
    compute_input,
    compute_output,
    epsilon_input,
    epsilon_output,
    get_amount_in,
    get_amount_out,
    get_trade_info,
    max_amount_in,
    min_amount_out,
    optimal_liquidity_amounts,
    quote_exact_input,
    quote_exact_output,
    quote_liquidity,
    removal_amounts,
    v_reserve_ratio_bounds,
    validate_slippage_bps,
)

__all__ = [
    "INFEASIBLE",
    "Infeasible",
    "Quote",
    "SwapResult",
    "TradeInfo",
    "advance_emas",
    "calculate_r_factor",
    "compute_input",
    "compute_output",
    "epsilon_input",
    "epsilon_output",
    "get_amount_in",
    "get_amount_out",
    "get_fee",
    "get_final_fee",
    "get_trade_info",
    "max_amount_in",
    "min_amount_out",
    "optimal_liquidity_amounts",
    "pool_fee",
    "quote_exact_input",
    "quote_exact_output",
    "quote_liquidity",
    "removal_amounts",
    "v_reserve_ratio_bounds",
    "validate_slippage_bps",
]
