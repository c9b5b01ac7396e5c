"""Pydantic models for chain data structures."""

from ampswap.models.pool_state import PoolState
from ampswap.models.quote import ObservedTxModel, QuoteRequest, QuoteResponse, TokenPathModel
from ampswap.models.receipt import TxReceipt
from ampswap.models.types import Address, Uint128, Uint256, is_valid_address, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint128",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    # Chain state
    "PoolState",
    "TxReceipt",
    # Quote service
    "ObservedTxModel",
    "QuoteRequest",
    "QuoteResponse",
    "TokenPathModel",
]
