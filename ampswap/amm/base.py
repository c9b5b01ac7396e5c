"""Result types shared by the quoting engine and the router."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Final, Literal, TypeAlias


class _Infeasible(enum.Enum):
    """Marker for a quote the pool cannot fill."""

    INFEASIBLE = "infeasible"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "INFEASIBLE"


# Returned instead of raising when a requested output meets or exceeds the
# pool's (virtual) liquidity, so routers can skip the candidate cheaply.
INFEASIBLE: Final = _Infeasible.INFEASIBLE

Infeasible: TypeAlias = Literal[_Infeasible.INFEASIBLE]


@dataclass(frozen=True)
class TradeInfo:
    """Reserves of a pool ordered for one trade direction.

    For pools without amplification the virtual reserves equal the actual
    reserves.
    """

    token_in: str
    token_out: str
    reserve_in: int
    reserve_out: int
    v_reserve_in: int
    v_reserve_out: int


@dataclass(frozen=True)
class SwapResult:
    """Result of pricing a swap through a single pool."""

    pool_address: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    # Effective fee charged, scaled by PRECISION
    fee_in_precision: int


@dataclass(frozen=True)
class Quote:
    """Single-pool quote with its zero-slippage reference.

    Attributes:
        expected_amount: Output (exact input) or required input (exact output)
        epsilon_amount: Same quantity priced with actual reserves and no fee
        slippage_bps: Price impact plus fee relative to the epsilon quote
    """

    expected_amount: int
    epsilon_amount: int
    slippage_bps: int

    @property
    def slippage_percent(self) -> Decimal:
        """Slippage as a percentage (200 bps -> 2.00)."""
        return Decimal(self.slippage_bps) / 100


__all__ = ["INFEASIBLE", "Infeasible", "Quote", "SwapResult", "TradeInfo"]
