"""Error types raised by the quoting, routing and observer layers.

Expected outcomes that callers branch on cheaply (an infeasible single-pool
quote) are not exceptions; see ampswap.amm.base.INFEASIBLE. Arithmetic
invariant violations live in ampswap.safe_int.
"""


class AmpswapError(Exception):
    """Base class for ampswap errors."""

    pass


class NoRouteError(AmpswapError):
    """No pool path of up to three hops connects the two tokens.

    Recoverable: the caller may refresh state and retry, or report
    insufficient liquidity.
    """

    def __init__(self, token_in: str, token_out: str) -> None:
        self.token_in = token_in
        self.token_out = token_out
        super().__init__(f"No route from {token_in} to {token_out}")


class PoolNotFoundError(AmpswapError):
    """A computation referenced a pool absent from the current snapshot."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Pool not found: {address}")


class ZeroReserveError(AmpswapError):
    """A ratio was requested against a pool side holding no tokens."""

    pass


class StateNotLoadedError(AmpswapError):
    """Pool state was requested before the first refresh."""

    pass


class RpcError(AmpswapError):
    """The chain node returned an error or an unusable response."""

    pass
