"""Tests for concurrent writers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio

import pytest

from etagcache_core.cache.cache import Cache
from etagcache_core.errors import HashMismatchError
from etagcache_core.store.memory import MemoryStore

ZUL = '{"name":"Zul"}'
ZUL_HASH = "4cdbc5ffe38a19ec2fd3c1625f92c14e2e0b4ec0"


class CheckThenWriteStore(MemoryStore):
    """Memory store without atomic compare-and-write.

    stat() yields to the event loop, so two writers can both pass the
    hash check before either writes.
    """

    conditional_put = False
    conditional_delete = False

    async def stat(self, key):
        current = await super().stat(key)
        await asyncio.sleep(0)
        return current


class TestConcurrentSave:
    """Tests for concurrent conditional saves."""

    @pytest.mark.asyncio
    async def test_atomic_backend_rejects_loser(self):
        """Test only one writer with the same hash wins."""
        cache = Cache(MemoryStore())
        await cache.save(ZUL, "test")

        results = await asyncio.gather(
            cache.save("first", "test", ZUL_HASH),
            cache.save("second", "test", ZUL_HASH),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, HashMismatchError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert (await cache.head("test")).hash == winners[0].hash

    @pytest.mark.asyncio
    async def test_check_then_write_race(self):
        """Test both writers pass the check without an atomic write."""
        cache = Cache(CheckThenWriteStore())
        await cache.save(ZUL, "test")

        first, second = await asyncio.gather(
            cache.save("first", "test", ZUL_HASH),
            cache.save("second", "test", ZUL_HASH),
        )

        # Last write wins
        assert (await cache.head("test")).hash == second.hash
        assert first.hash != second.hash

    @pytest.mark.asyncio
    async def test_atomic_remove(self):
        """Test a stale remove loses to a save."""
        cache = Cache(MemoryStore())
        await cache.save(ZUL, "test")
        await cache.save("newer", "test", ZUL_HASH)

        with pytest.raises(HashMismatchError):
            await cache.remove("test", ZUL_HASH)
        assert await cache.exists("test")
