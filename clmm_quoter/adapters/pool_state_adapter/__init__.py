"""Pool state adapter - snapshots live pools over RPC for quoting."""

from .adapter import PoolStateAdapter

__all__ = ["PoolStateAdapter"]
