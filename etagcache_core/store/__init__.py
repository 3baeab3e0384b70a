"""Store module - Storage backends for the conditional cache."""

from etagcache_core.store.backend import (
    StorageBackend,
    StorageStats,
    StorageConfig,
    ConditionalOutcome,
    encode_key,
    decode_key,
)
from etagcache_core.store.memory import MemoryStore
from etagcache_core.store.file import FileStore, FileStoreConfig
from etagcache_core.store.redis import RedisStore, RedisHashStore, RedisConfig
from etagcache_core.store.s3 import S3Store, S3Config

__all__ = [
    "StorageBackend",
    "StorageStats",
    "StorageConfig",
    "ConditionalOutcome",
    "encode_key",
    "decode_key",
    "MemoryStore",
    "FileStore",
    "FileStoreConfig",
    "RedisStore",
    "RedisHashStore",
    "RedisConfig",
    "S3Store",
    "S3Config",
]
