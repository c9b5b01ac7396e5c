"""Path routing over pool snapshots."""

from .router import PathRouter
from .types import RouteResult, TokenPath

__all__ = ["PathRouter", "RouteResult", "TokenPath"]
