"""
Cache

Single-entry, file-backed TTL cache of the last aggregation result.
"""

from .persistent_cache import (
    CACHE_FILE_NAME,
    DEFAULT_TTL_SECONDS,
    CacheEntry,
    CacheStatus,
    PersistentCache,
)

__all__ = [
    "CACHE_FILE_NAME",
    "DEFAULT_TTL_SECONDS",
    "CacheEntry",
    "CacheStatus",
    "PersistentCache",
]
