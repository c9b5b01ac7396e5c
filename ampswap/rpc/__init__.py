"""JSON-RPC adapter implementing the provider protocols."""

from .client import ZilliqaRpcClient, make_request

__all__ = ["ZilliqaRpcClient", "make_request"]
