"""EtagCache Memory Store - In-Memory Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from etagcache_core.cache.hasher import content_hash
from etagcache_core.store.backend import (
    ConditionalOutcome,
    StorageBackend,
    StorageConfig,
)

logger = logging.getLogger(__name__)


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    The simplest storage option, keeping all bodies in a dictionary owned
    by the instance. Two stores never share data.

    Conditional writes are atomic: the compare and the write run without
    yielding to the event loop in between.

    Example:
        store = MemoryStore()
        await store.put("key", b"data")
        body = await store.get("key")
    """

    conditional_put = True
    conditional_delete = True
    supports_sets = True

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize memory store.

        Args:
            config: Storage configuration
        """
        super().__init__(config or StorageConfig(name="memory"))
        self._data: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.reads += 1
        return self._data.get(key)

    async def put(self, key: str, body: bytes) -> None:
        self._data[key] = body
        self._stats.writes += 1

    async def delete(self, key: str) -> bool:
        if key in self._data:
            del self._data[key]
            self._stats.deletes += 1
            return True
        return False

    async def exists(self, key: str) -> bool:
        return key in self._data

    async def keys(self) -> List[str]:
        return list(self._data.keys())

    async def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count

    async def compare_and_put(
        self,
        key: str,
        body: bytes,
        expected_hash: str,
    ) -> ConditionalOutcome:
        self._stats.reads += 1
        current = self._data.get(key)
        if current is not None:
            current_hash = content_hash(current)
            if current_hash != expected_hash:
                return ConditionalOutcome(applied=False, current_hash=current_hash)

        self._data[key] = body
        self._stats.writes += 1
        return ConditionalOutcome(applied=True, found=current is not None)

    async def compare_and_delete(
        self,
        key: str,
        expected_hash: str,
    ) -> ConditionalOutcome:
        self._stats.reads += 1
        current = self._data.get(key)
        if current is None:
            return ConditionalOutcome(applied=False, found=False)

        current_hash = content_hash(current)
        if current_hash != expected_hash:
            return ConditionalOutcome(applied=False, current_hash=current_hash)

        del self._data[key]
        self._stats.deletes += 1
        return ConditionalOutcome(applied=True)

    def scoped(self, name: str) -> "MemoryStore":
        """Create an independent store for a set.

        Args:
            name: Set key

        Returns:
            New MemoryStore
        """
        return MemoryStore(StorageConfig(name=f"{self.config.name}:{name}"))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore(entries={len(self._data)})"


__all__ = ["MemoryStore"]
