"""EtagCache Cache - Conditional Cache over a Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from etagcache_core.cache.entry import CacheEntry, HeadResult, RestoreResult, SaveResult
from etagcache_core.cache.hasher import content_hash
from etagcache_core.errors import (
    CacheError,
    CacheNotFoundError,
    DeleteFailedError,
    HashMismatchError,
    InvalidArgumentError,
    MissingArgumentError,
    SetNotDefinedError,
    UpdateFailedError,
)

if TYPE_CHECKING:
    from etagcache_core.cache.namespace import CacheSet
    from etagcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        name: Cache name, used in logs and as the prefix of set names
    """

    name: str = "cache"


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        saves: Successful saves
        restores: Restores that returned a body
        not_modified: Restores where the caller was already current
        heads: Successful head lookups
        removes: Successful removes
        mismatches: Saves or removes rejected on hash
        misses: Lookups of absent keys
        started_at: When cache started
    """

    saves: int = 0
    restores: int = 0
    not_modified: int = 0
    heads: int = 0
    removes: int = 0
    mismatches: int = 0
    misses: int = 0
    started_at: Optional[datetime] = None

    def reset(self) -> None:
        """Reset statistics."""
        self.saves = 0
        self.restores = 0
        self.not_modified = 0
        self.heads = 0
        self.removes = 0
        self.mismatches = 0
        self.misses = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "saves": self.saves,
            "restores": self.restores,
            "not_modified": self.not_modified,
            "heads": self.heads,
            "removes": self.removes,
            "mismatches": self.mismatches,
            "misses": self.misses,
        }


def _to_bytes(body: Union[bytes, str]) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


class Cache:
    """Key-addressed cache with optimistic concurrency control.

    Every stored body is fingerprinted with its SHA-1. Writers pass the
    hash they last saw; a save or remove only proceeds when it still
    matches what is stored, so concurrent writers cannot silently
    overwrite each other.

    When the backend offers an atomic compare-and-write the check and the
    write are one step. Otherwise the cache reads the current hash and
    then writes, and two writers holding the same stale hash can both
    pass the check before either writes.

    Example:
        cache = Cache(MemoryStore())

        result = await cache.save('{"name":"Zul"}', "test")
        await cache.save('{"name":"Odoyle"}', "test", result.hash)

        current = await cache.restore("test")
        users = await cache.set("users")
    """

    def __init__(
        self,
        store: StorageBackend,
        config: Optional[CacheConfig] = None,
    ):
        """Initialize cache.

        Args:
            store: Storage backend, owned by this cache
            config: Cache configuration
        """
        self.config = config or CacheConfig()
        self._store = store
        self._stats = CacheStats(started_at=datetime.now())

        # One in-flight or finished construction per set key
        self._sets: Dict[str, asyncio.Task] = {}

    @property
    def store(self) -> StorageBackend:
        return self._store

    async def save(
        self,
        body: Union[bytes, str],
        key: str,
        expected_hash: Optional[str] = None,
    ) -> SaveResult:
        """Store body at key.

        Without expected_hash the write is unconditional. With it, the
        write only happens if the stored hash matches; an absent key is
        written regardless.

        Args:
            body: Data to store
            key: Cache key
            expected_hash: Hash the caller believes is current

        Returns:
            SaveResult with the new hash

        Raises:
            HashMismatchError: Stored hash differs from expected_hash
            MissingArgumentError: key is empty
            UpdateFailedError: Backend failed
        """
        if not key:
            raise MissingArgumentError("key")

        body = _to_bytes(body)
        new_hash = content_hash(body)

        try:
            if expected_hash and self._store.conditional_put:
                outcome = await self._store.compare_and_put(key, body, expected_hash)
                if not outcome.applied:
                    self._mismatch(key, expected_hash, outcome.current_hash)
            else:
                if expected_hash:
                    current_hash = await self._store.stat(key)
                    if current_hash is not None and current_hash != expected_hash:
                        self._mismatch(key, expected_hash, current_hash)
                await self._store.put(key, body)
        except CacheError:
            raise
        except Exception as e:
            logger.error(f"Cache {self.config.name}: save of {key} failed: {e}")
            raise UpdateFailedError(key, e) from e

        self._stats.saves += 1
        logger.debug(f"Cache {self.config.name}: saved {key} ({new_hash})")
        return SaveResult(hash=new_hash)

    async def restore(
        self,
        key: str,
        if_newer_hash: Optional[str] = None,
    ) -> RestoreResult:
        """Retrieve the body stored at key.

        Args:
            key: Cache key
            if_newer_hash: Hash the caller already holds; when it is
                current the body is omitted

        Returns:
            RestoreResult

        Raises:
            CacheNotFoundError: Nothing stored at key
        """
        if not key:
            self._not_found(key)

        body = await self._store.get(key)
        if body is None:
            self._not_found(key)

        entry = CacheEntry(key=key, body=body)
        current_hash = entry.hash

        if if_newer_hash and if_newer_hash == current_hash:
            self._stats.not_modified += 1
            return RestoreResult(hash=current_hash)

        self._stats.restores += 1
        return RestoreResult(hash=current_hash, body=entry.body)

    async def head(self, key: str) -> HeadResult:
        """Get the current hash for key.

        Raises:
            CacheNotFoundError: Nothing stored at key
        """
        if not key:
            self._not_found(key)

        current_hash = await self._store.stat(key)
        if current_hash is None:
            self._not_found(key)

        self._stats.heads += 1
        return HeadResult(hash=current_hash)

    async def remove(self, key: str, expected_hash: Optional[str] = None) -> None:
        """Delete the entry at key.

        Args:
            key: Cache key
            expected_hash: If given, only delete when it matches

        Raises:
            CacheNotFoundError: Nothing stored at key
            HashMismatchError: Stored hash differs from expected_hash
            DeleteFailedError: Backend failed
        """
        if not key:
            self._not_found(key)

        try:
            if expected_hash and self._store.conditional_delete:
                outcome = await self._store.compare_and_delete(key, expected_hash)
                if not outcome.found:
                    self._not_found(key)
                if not outcome.applied:
                    self._mismatch(key, expected_hash, outcome.current_hash)
            else:
                if expected_hash:
                    current_hash = await self._store.stat(key)
                    if current_hash is None:
                        self._not_found(key)
                    if current_hash != expected_hash:
                        self._mismatch(key, expected_hash, current_hash)

                if not await self._store.delete(key):
                    self._not_found(key)
        except CacheError:
            raise
        except Exception as e:
            logger.error(f"Cache {self.config.name}: remove of {key} failed: {e}")
            raise DeleteFailedError(key, e) from e

        self._stats.removes += 1
        logger.debug(f"Cache {self.config.name}: removed {key}")

    async def keys(self) -> List[str]:
        """Get all stored keys, in no particular order."""
        return await self._store.keys()

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        if not key:
            return False
        return await self._store.exists(key)

    async def clear(self) -> int:
        """Delete every entry.

        Sets live in their own namespaces and are left alone.

        Returns:
            Number of entries cleared
        """
        count = await self._store.clear()
        logger.info(f"Cache {self.config.name}: cleared {count} entries")
        return count

    async def set(self, set_key: str) -> "CacheSet":
        """Get or create the set for set_key.

        Concurrent callers for the same key share one construction.

        Args:
            set_key: Set name

        Returns:
            CacheSet instance

        Raises:
            SetNotDefinedError: Backend cannot hold sets
        """
        if not set_key or not isinstance(set_key, str):
            raise InvalidArgumentError("set_key", "str", type(set_key).__name__)

        if not self._store.supports_sets:
            raise SetNotDefinedError()

        task = self._sets.get(set_key)
        if task is None:
            task = asyncio.ensure_future(self._create_set(set_key))
            self._sets[set_key] = task

        return await asyncio.shield(task)

    async def _create_set(self, set_key: str) -> "CacheSet":
        from etagcache_core.cache.namespace import CacheSet

        try:
            return await CacheSet.create(set_key, self)
        except BaseException:
            # Allow a later call to retry provisioning
            if self._sets.get(set_key) is asyncio.current_task():
                del self._sets[set_key]
            raise

    def _deregister_set(self, set_key: str, instance: "CacheSet") -> None:
        task = self._sets.get(set_key)
        if task is not None and task.done() and not task.cancelled() \
                and task.exception() is None and task.result() is instance:
            del self._sets[set_key]

    @property
    def sets(self) -> List[str]:
        """Names of sets created or being created."""
        return list(self._sets.keys())

    def _not_found(self, key: str) -> None:
        self._stats.misses += 1
        raise CacheNotFoundError(key)

    def _mismatch(self, key: str, expected_hash: str, current_hash: Optional[str]) -> None:
        self._stats.mismatches += 1
        logger.warning(
            f"Cache {self.config.name}: hash mismatch on {key} "
            f"(expected {expected_hash}, current {current_hash})"
        )
        raise HashMismatchError(expected_hash, current_hash or "")

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats.reset()

    async def close(self) -> None:
        """Release the backend connection if it holds one."""
        close = getattr(self._store, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "Cache":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Cache(name={self.config.name!r}, store={self._store!r})"


__all__ = ["Cache", "CacheConfig", "CacheStats"]
