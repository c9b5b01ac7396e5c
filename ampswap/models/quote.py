"""Request and response bodies of the quote service."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, ConfigDict, Field

from ampswap.constants import BASIS
from ampswap.models.types import Address, Uint128

if TYPE_CHECKING:
    from ampswap.client import RoutedQuote
    from ampswap.observer.types import ObservedTx


class QuoteRequest(BaseModel):
    """Trade to quote. amount is the input (exact input) or output (exact output)."""

    model_config = ConfigDict(populate_by_name=True)

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount: Annotated[Uint128, Field(gt=0, description="Token amount as decimal string")]
    max_slippage_bps: int | None = Field(
        default=None,
        alias="maxSlippageBps",
        ge=0,
        lt=BASIS,
        description="Overrides the configured slippage tolerance",
    )


class TokenPathModel(BaseModel):
    """Token pair of one hop."""

    model_config = ConfigDict(populate_by_name=True)

    token_in: str = Field(alias="in")
    token_out: str = Field(alias="out")


class QuoteResponse(BaseModel):
    """Routed quote. Amounts are decimal strings."""

    model_config = ConfigDict(populate_by_name=True)

    amount_in: str = Field(alias="amountIn")
    amount_out: str = Field(alias="amountOut")
    expected_amount: str = Field(alias="expectedAmount")
    bound: str = Field(description="Minimum output (exact input) or maximum input (exact output)")
    slippage_bps: int = Field(alias="slippageBps")
    slippage_percent: str = Field(alias="slippagePercent")
    pool_path: list[str] = Field(alias="poolPath")
    token_path: list[TokenPathModel] = Field(alias="tokenPath")

    @classmethod
    def from_quote(cls, quote: RoutedQuote) -> QuoteResponse:
        route = quote.route
        return cls(
            amount_in=str(route.amount_in),
            amount_out=str(route.amount_out),
            expected_amount=str(quote.expected_amount),
            bound=str(quote.bound),
            slippage_bps=quote.slippage_bps,
            slippage_percent=f"{Decimal(quote.slippage_bps) / 100:.2f}",
            pool_path=route.pool_path,
            token_path=[TokenPathModel(token_in=p.token_in, token_out=p.token_out) for p in route.token_path],
        )


class ObservedTxModel(BaseModel):
    """A transaction still awaiting a terminal status."""

    hash: str
    deadline: int

    @classmethod
    def from_observed(cls, tx: ObservedTx) -> ObservedTxModel:
        return cls(hash=tx.hash, deadline=tx.deadline)


__all__ = ["ObservedTxModel", "QuoteRequest", "QuoteResponse", "TokenPathModel"]
