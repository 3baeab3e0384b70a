"""EtagCache Storage Backend - Abstract Storage Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote, unquote

from etagcache_core.cache.hasher import content_hash

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name
    """

    name: str = "storage"


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


@dataclass(frozen=True)
class ConditionalOutcome:
    """Outcome of an atomic compare-and-write.

    Attributes:
        applied: Whether the write or delete happened
        current_hash: Hash found in the store when not applied
        found: Whether an entry existed at the key
    """

    applied: bool
    current_hash: Optional[str] = None
    found: bool = True


def encode_key(key: str) -> str:
    """Percent-encode a key for path-like addressing.

    A leading dot is escaped too, so encoded names never collide with
    "." / ".." or the reserved hidden names backends use internally.

    Args:
        key: Cache key

    Returns:
        Encoded key
    """
    if not key:
        raise ValueError("Cache key must be a non-empty string")
    encoded = quote(key, safe="")
    if encoded.startswith("."):
        encoded = "%2E" + encoded[1:]
    return encoded


def decode_key(name: str) -> str:
    """Reverse encode_key."""
    return unquote(name)


class StorageBackend(ABC):
    """Abstract byte storage for the cache.

    Implementations provide different storage media:
    - MemoryStore: In-process dictionary
    - FileStore: One file per key
    - RedisStore: Redis strings, sets as Redis hashes
    - S3Store: Objects in an S3 bucket

    Backends that can check a hash and write in one atomic step set
    conditional_put / conditional_delete and override the compare_and_*
    methods. Backends that can hold sub-namespaces set supports_sets and
    implement scoped().
    """

    conditional_put: bool = False
    conditional_delete: bool = False
    supports_sets: bool = False

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Get body by key.

        Args:
            key: Cache key

        Returns:
            Stored bytes or None
        """

    @abstractmethod
    async def put(self, key: str, body: bytes) -> None:
        """Store body, replacing any existing one.

        Args:
            key: Cache key
            body: Bytes to store
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""

    @abstractmethod
    async def keys(self) -> List[str]:
        """Get all keys."""

    @abstractmethod
    async def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number cleared
        """

    async def stat(self, key: str) -> Optional[str]:
        """Get the current hash without returning the body.

        Args:
            key: Cache key

        Returns:
            Hash or None if absent
        """
        body = await self.get(key)
        if body is None:
            return None
        return content_hash(body)

    async def compare_and_put(
        self,
        key: str,
        body: bytes,
        expected_hash: str,
    ) -> ConditionalOutcome:
        """Atomically write if the stored hash matches.

        An absent key is written unconditionally.

        Args:
            key: Cache key
            body: Bytes to store
            expected_hash: Hash the caller believes is current

        Returns:
            ConditionalOutcome
        """
        raise NotImplementedError(f"{type(self).__name__} has no conditional put")

    async def compare_and_delete(
        self,
        key: str,
        expected_hash: str,
    ) -> ConditionalOutcome:
        """Atomically delete if the stored hash matches.

        Args:
            key: Cache key
            expected_hash: Hash the caller believes is current

        Returns:
            ConditionalOutcome, found=False if the key is absent
        """
        raise NotImplementedError(f"{type(self).__name__} has no conditional delete")

    def scoped(self, name: str) -> "StorageBackend":
        """Create a child backend isolated under name.

        Args:
            name: Set key

        Returns:
            Child backend sharing this backend's connection
        """
        raise NotImplementedError(f"{type(self).__name__} does not support sets")

    async def provision(self) -> None:
        """Create the backing namespace."""

    async def destroy(self) -> None:
        """Remove the backing namespace."""
        await self.clear()

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()

    async def health_check(self) -> bool:
        """Check storage health.

        Returns:
            True if healthy
        """
        try:
            test_key = "__health_check__"
            await self.put(test_key, b"test")
            result = await self.get(test_key)
            await self.delete(test_key)
            return result == b"test"
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False


__all__ = [
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "ConditionalOutcome",
    "encode_key",
    "decode_key",
]
