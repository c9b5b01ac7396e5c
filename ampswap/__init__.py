"""ampswap - quoting, routing and transaction tracking for amplified AMM pools."""

from ampswap.client import ContractCall, ContractParam, RoutedQuote, SwapClient
from ampswap.config import ClientConfig
from ampswap.errors import AmpswapError, NoRouteError, PoolNotFoundError, StateNotLoadedError

__version__ = "0.1.0"
__all__ = [
    "AmpswapError",
    "ClientConfig",
    "ContractCall",
    "ContractParam",
    "NoRouteError",
    "PoolNotFoundError",
    "RoutedQuote",
    "StateNotLoadedError",
    "SwapClient",
    "__version__",
]
