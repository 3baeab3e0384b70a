"""EtagCache - Key-Addressed Cache with Optimistic Concurrency.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A content-hashed cache for HTTP services with:
- SHA-1 content hashes doubling as HTTP ETags
- Conditional save and remove guarded by the caller's known hash
- Multiple storage backends (memory, file, Redis, S3)
- Isolated, memoized sub-caches (sets)
- An HTTP handler mapping outcomes to 200/304/404/412 responses

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        EtagCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌──────────────────────────────────────────────┐              │
    │  │   Handler  (HEAD / GET / PUT / DELETE)        │   HTTP       │
    │  │   If-None-Match in, ETag out                  │   LAYER      │
    │  └──────────────────────┬───────────────────────┘              │
    │                         │                                       │
    │  ┌─────────────┐  ┌─────┴───────┐  ┌─────────────┐             │
    │  │   Cache     │  │  CacheSet   │  │   Hasher    │   CACHE     │
    │  │ save/restore│  │  isolation  │  │   SHA-1     │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └─────────────┘             │
    │         │                │                                      │
    │  ┌──────┴────────────────┴───────────────────────┐             │
    │  │              Storage Backends                  │             │
    │  │  ┌────────┐ ┌────────┐ ┌────────┐ ┌────────┐  │   STORAGE   │
    │  │  │ Memory │ │  File  │ │ Redis  │ │   S3   │  │   LAYER     │
    │  │  └────────┘ └────────┘ └────────┘ └────────┘  │             │
    │  └───────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from etagcache_core import create_cache, create_app

    cache = create_cache("mem", {})
    result = await cache.save(b'{"name":"Zul"}', "user:1")
    await cache.save(b'{"name":"Ana"}', "user:1", result.hash)

    # Isolated sub-cache
    users = await cache.set("users")
    await users.save(b"{}", "1")
    await users.destroy()

    # HTTP service
    app = create_app(cache)
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from etagcache_core.errors import (
    ErrorCode,
    CacheError,
    HashMismatchError,
    UpdateFailedError,
    CacheNotFoundError,
    DeleteFailedError,
    SetNotDefinedError,
    SetDestroyedError,
    NestedSetError,
    ConfigurationError,
    MissingArgumentError,
    InvalidArgumentError,
    ImplementationNotFoundError,
)
from etagcache_core.cache.hasher import content_hash
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
from etagcache_core.cache.namespace import CacheSet, SetState
from etagcache_core.store.backend import (
    StorageBackend,
    StorageStats,
    ConditionalOutcome,
)
from etagcache_core.store.memory import MemoryStore
from etagcache_core.store.file import FileStore
from etagcache_core.store.redis import RedisStore, RedisConfig
from etagcache_core.store.s3 import S3Store, S3Config
from etagcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    MsgPackSerializer,
    RawSerializer,
)
from etagcache_core.http.handler import Handler
from etagcache_core.http.app import create_app, create_router
from etagcache_core.factory import create_cache, create_handler

__all__ = [
    # Cache
    "Cache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    "CacheSet",
    "SetState",
    "SaveResult",
    "HeadResult",
    "RestoreResult",
    "content_hash",
    # Errors
    "ErrorCode",
    "CacheError",
    "HashMismatchError",
    "UpdateFailedError",
    "CacheNotFoundError",
    "DeleteFailedError",
    "SetNotDefinedError",
    "SetDestroyedError",
    "NestedSetError",
    "ConfigurationError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "ImplementationNotFoundError",
    # Storage
    "StorageBackend",
    "StorageStats",
    "ConditionalOutcome",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    "S3Store",
    "S3Config",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "RawSerializer",
    # HTTP
    "Handler",
    "create_app",
    "create_router",
    # Factory
    "create_cache",
    "create_handler",
]
