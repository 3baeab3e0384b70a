"""EtagCache Set - Isolated Sub-Cache of a Parent Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, List, Optional, Union

from etagcache_core.cache.cache import Cache, CacheConfig, CacheStats
from etagcache_core.cache.entry import HeadResult, RestoreResult, SaveResult
from etagcache_core.errors import NestedSetError, SetDestroyedError

if TYPE_CHECKING:
    from etagcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


class SetState(Enum):
    """Set lifecycle states.

    INITIALIZING -> READY | FAILED, READY -> DESTROYED.
    """

    INITIALIZING = auto()
    READY = auto()
    FAILED = auto()
    DESTROYED = auto()


class CacheSet:
    """A named sub-cache with its own storage namespace.

    A set has the same save/restore/head/remove/keys/exists/clear
    contract as a Cache, but its entries live apart from the parent's
    (a sub-directory, a Redis hash, an object prefix). It borrows the
    parent's backend connection.

    Sets are obtained through Cache.set(), which memoizes them. A set
    cannot hold further sets. After destroy() every operation raises
    SetDestroyedError and the parent will build a fresh set on the next
    Cache.set() call.

    Example:
        users = await cache.set("users")
        await users.save(b"...", "1")
        await users.destroy()
    """

    def __init__(self, key: str, parent: Cache):
        """Initialize set.

        Use CacheSet.create() to get a provisioned set.

        Args:
            key: Set key
            parent: Parent cache
        """
        self.key = key
        self._parent = parent
        self._store: StorageBackend = parent.store.scoped(key)
        self._cache = Cache(self._store, CacheConfig(name=f"{parent.config.name}:{key}"))
        self.state = SetState.INITIALIZING

    @classmethod
    async def create(cls, key: str, parent: Cache) -> "CacheSet":
        """Build a set and provision its namespace.

        Args:
            key: Set key
            parent: Parent cache

        Returns:
            Ready CacheSet

        Raises:
            Exception: Whatever the backend raised while provisioning
        """
        instance = cls(key, parent)
        await instance._provision()
        return instance

    async def _provision(self) -> None:
        try:
            await self._store.provision()
        except Exception as e:
            self.state = SetState.FAILED
            logger.error(f"Set {self.key} failed to provision: {e}")
            raise

        self.state = SetState.READY
        logger.info(f"Set {self.key} ready on {self._store!r}")

    def _ensure_ready(self) -> None:
        if self.state is SetState.DESTROYED:
            raise SetDestroyedError(self.key)
        if self.state is not SetState.READY:
            raise RuntimeError(f"Set [{self.key}] is not ready ({self.state.name})")

    @property
    def parent(self) -> Cache:
        return self._parent

    @property
    def is_ready(self) -> bool:
        return self.state is SetState.READY

    async def save(
        self,
        body: Union[bytes, str],
        key: str,
        expected_hash: Optional[str] = None,
    ) -> SaveResult:
        self._ensure_ready()
        return await self._cache.save(body, key, expected_hash)

    async def restore(self, key: str, if_newer_hash: Optional[str] = None) -> RestoreResult:
        self._ensure_ready()
        return await self._cache.restore(key, if_newer_hash)

    async def head(self, key: str) -> HeadResult:
        self._ensure_ready()
        return await self._cache.head(key)

    async def remove(self, key: str, expected_hash: Optional[str] = None) -> None:
        self._ensure_ready()
        await self._cache.remove(key, expected_hash)

    async def keys(self) -> List[str]:
        self._ensure_ready()
        return await self._cache.keys()

    async def exists(self, key: str) -> bool:
        self._ensure_ready()
        return await self._cache.exists(key)

    async def clear(self) -> int:
        self._ensure_ready()
        return await self._cache.clear()

    def set(self, *args, **kwargs):
        """Sets cannot be nested.

        Raises:
            NestedSetError: Always
        """
        raise NestedSetError()

    async def destroy(self) -> None:
        """Remove the backing namespace and detach from the parent.

        Raises:
            SetDestroyedError: Set was already destroyed
        """
        self._ensure_ready()
        await self._store.destroy()

        self.state = SetState.DESTROYED
        self._parent._deregister_set(self.key, self)
        logger.info(f"Set {self.key} destroyed")

    def get_stats(self) -> CacheStats:
        """Get statistics of the set."""
        return self._cache.get_stats()

    def __repr__(self) -> str:
        return f"CacheSet(key={self.key!r}, state={self.state.name})"


__all__ = ["CacheSet", "SetState"]
