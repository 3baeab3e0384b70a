"""Cache module - Conditional cache and sets.

This module provides the cache interface, sets and entry types.
"""

from etagcache_core.cache.hasher import (
    HASH_ALGORITHM,
    content_hash,
    normalize_hash,
)
from etagcache_core.cache.entry import (
    CacheEntry,
    SaveResult,
    HeadResult,
    RestoreResult,
)
from etagcache_core.cache.cache import (
    Cache,
    CacheConfig,
    CacheStats,
)
from etagcache_core.cache.namespace import (
    CacheSet,
    SetState,
)

__all__ = [
    "HASH_ALGORITHM",
    "content_hash",
    "normalize_hash",
    "CacheEntry",
    "SaveResult",
    "HeadResult",
    "RestoreResult",
    "Cache",
    "CacheConfig",
    "CacheStats",
    "CacheSet",
    "SetState",
]
