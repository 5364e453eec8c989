"""
Campus cache package.

A process-local, namespaced TTL cache with request deduplication and
LRU/expiry eviction, plus the registry and admin API that host it.
"""
from .cache import NamespacedCache
from .models import CachePolicy, CacheStats
from .procedures import ProcedureCache, cached
from .registry import CacheRegistry

__version__ = "1.0.0"
__all__ = [
    "CachePolicy",
    "CacheRegistry",
    "CacheStats",
    "NamespacedCache",
    "ProcedureCache",
    "cached",
]
