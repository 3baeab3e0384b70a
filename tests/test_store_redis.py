"""Integration tests for the Redis storage backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Requires a running Redis, e.g. REDIS_URL=redis://localhost:6379/9.
"""

import os
import uuid

import pytest
import pytest_asyncio
import redis.asyncio as redis

from etagcache_core.cache.cache import Cache
from etagcache_core.cache.hasher import content_hash
from etagcache_core.errors import CacheNotFoundError, HashMismatchError
from etagcache_core.store.redis import RedisConfig, RedisStore

REDIS_URL = os.environ.get("REDIS_URL")

pytestmark = pytest.mark.skipif(not REDIS_URL, reason="REDIS_URL not set")


@pytest_asyncio.fixture
async def store():
    client = redis.from_url(REDIS_URL)
    store = RedisStore(RedisConfig(prefix=f"test-{uuid.uuid4().hex}:"), client=client)
    yield store
    await store.clear()
    await client.aclose()


class TestRedisStore:
    """Tests for RedisStore."""

    @pytest.mark.asyncio
    async def test_put_get(self, store):
        """Test basic storage."""
        await store.put("user:1", b"hello")

        assert await store.get("user:1") == b"hello"
        assert await store.exists("user:1")
        assert await store.keys() == ["user:1"]

    @pytest.mark.asyncio
    async def test_server_side_hash(self, store):
        """Test server hash matches the local hash."""
        await store.put("a", b"hello")

        assert await store.stat("a") == content_hash(b"hello")
        assert await store.stat("missing") is None

    @pytest.mark.asyncio
    async def test_compare_and_put(self, store):
        """Test atomic conditional write."""
        await store.put("a", b"hello")

        rejected = await store.compare_and_put("a", b"new", "stale")
        assert not rejected.applied
        assert rejected.current_hash == content_hash(b"hello")

        assert (await store.compare_and_put("a", b"new", content_hash(b"hello"))).applied
        assert await store.get("a") == b"new"

    @pytest.mark.asyncio
    async def test_compare_and_delete(self, store):
        """Test atomic conditional delete."""
        await store.put("a", b"hello")

        assert not (await store.compare_and_delete("missing", "x")).found
        assert not (await store.compare_and_delete("a", "stale")).applied
        assert (await store.compare_and_delete("a", content_hash(b"hello"))).applied


class TestRedisCache:
    """Tests for Cache over RedisStore."""

    @pytest.mark.asyncio
    async def test_conditional_flow(self, store):
        """Test save and remove guarded by hash."""
        cache = Cache(store)
        first = await cache.save("one", "k")

        with pytest.raises(HashMismatchError):
            await cache.save("two", "k", "stale")
        await cache.save("two", "k", first.hash)

        with pytest.raises(CacheNotFoundError):
            await cache.remove("missing", first.hash)

    @pytest.mark.asyncio
    async def test_set_in_hash(self, store):
        """Test sets are isolated and destroyed in one step."""
        cache = Cache(store)
        users = await cache.set("users")

        saved = await users.save("child", "a")
        await users.save("other", "a", saved.hash)

        assert await cache.keys() == []
        assert await users.keys() == ["a"]

        await users.destroy()
        assert not await store.client.exists(f"{store.config.prefix}set:users")
