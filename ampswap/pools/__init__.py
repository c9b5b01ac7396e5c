"""Pool state storage.

Provides PoolSnapshot, the immutable view of all known pools the quoting
engine and router read from.
"""

from .snapshot import PoolSnapshot, build_token_pools

__all__ = ["PoolSnapshot", "build_token_pools"]
