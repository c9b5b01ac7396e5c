"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field

from ampswap.amm.base import SwapResult


@dataclass(frozen=True)
class TokenPath:
    """Token pair traded through one hop."""

    token_in: str
    token_out: str

    def to_dict(self) -> dict[str, str]:
        return {"in": self.token_in, "out": self.token_out}


@dataclass(frozen=True)
class RouteResult:
    """Best route found for a trade.

    Attributes:
        amount_in: Input into the first pool
        amount_out: Output of the last pool
        hops: Per-pool pricing, in trade order
    """

    amount_in: int
    amount_out: int
    hops: tuple[SwapResult, ...] = field(default_factory=tuple)

    @property
    def hop_count(self) -> int:
        return len(self.hops)

    @property
    def pool_path(self) -> list[str]:
        """Pool addresses in trade order."""
        return [hop.pool_address for hop in self.hops]

    @property
    def token_path(self) -> list[TokenPath]:
        """Token pair of each hop in trade order."""
        return [TokenPath(hop.token_in, hop.token_out) for hop in self.hops]


__all__ = ["RouteResult", "TokenPath"]
