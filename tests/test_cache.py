"""Tests for Cache class.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from etagcache_core.cache.cache import Cache, CacheConfig
from etagcache_core.errors import (
    CacheNotFoundError,
    DeleteFailedError,
    ErrorCode,
    HashMismatchError,
    MissingArgumentError,
    UpdateFailedError,
)
from etagcache_core.store.memory import MemoryStore

ZUL = '{"name":"Zul"}'
ZUL_HASH = "4cdbc5ffe38a19ec2fd3c1625f92c14e2e0b4ec0"
ODOYLE = '{"name":"Odoyle Rules!"}'
ODOYLE_HASH = "8d8dbf068de76b07ecd87c58f228c8dfdce138dd"


class TestCache:
    """Tests for Cache class."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, cache):
        """Test save, conditional save, restore and rejected remove."""
        result = await cache.save(ZUL, "test")
        assert result.etag == ZUL_HASH

        result = await cache.save(ODOYLE, "test", ZUL_HASH)
        assert result.etag == ODOYLE_HASH

        restored = await cache.restore("test")
        assert restored.hash == ODOYLE_HASH
        assert restored.body == ODOYLE.encode()

        with pytest.raises(HashMismatchError) as exc_info:
            await cache.remove("test", "wrong")
        assert str(exc_info.value) == (
            f"Provided Hash [wrong] doesn't match current hash [{ODOYLE_HASH}]"
        )
        assert exc_info.value.code is ErrorCode.HASH_MISMATCH

    @pytest.mark.asyncio
    async def test_unconditional_save_overwrites(self, cache):
        """Test save without hash always writes."""
        await cache.save("one", "key")
        result = await cache.save("two", "key")

        restored = await cache.restore("key")
        assert restored.hash == result.hash
        assert restored.body == b"two"

    @pytest.mark.asyncio
    async def test_save_mismatch_keeps_body(self, cache):
        """Test stale hash is rejected and nothing is written."""
        await cache.save(ZUL, "test")

        with pytest.raises(HashMismatchError) as exc_info:
            await cache.save(ODOYLE, "test", "stale")
        assert exc_info.value.current_hash == ZUL_HASH

        restored = await cache.restore("test")
        assert restored.body == ZUL.encode()

    @pytest.mark.asyncio
    async def test_save_with_hash_creates_missing_key(self, cache):
        """Test hash is not checked when nothing is stored."""
        result = await cache.save(ZUL, "fresh", "anything")

        assert result.hash == ZUL_HASH
        assert (await cache.head("fresh")).hash == ZUL_HASH

    @pytest.mark.asyncio
    async def test_save_bytes(self, cache):
        """Test bytes bodies are stored verbatim."""
        body = b"\x00\xff binary"
        await cache.save(body, "bin")

        assert (await cache.restore("bin")).body == body

    @pytest.mark.asyncio
    async def test_restore_not_modified(self, cache):
        """Test body is omitted when caller holds current hash."""
        await cache.save(ZUL, "test")

        restored = await cache.restore("test", ZUL_HASH)
        assert restored.hash == ZUL_HASH
        assert restored.body is None
        assert restored.not_modified

        restored = await cache.restore("test", "old")
        assert restored.body == ZUL.encode()

    @pytest.mark.asyncio
    async def test_restore_missing(self, cache):
        """Test restore of absent key."""
        with pytest.raises(CacheNotFoundError) as exc_info:
            await cache.restore("missing")
        assert str(exc_info.value) == "Cache for [missing] not found"

    @pytest.mark.asyncio
    async def test_head(self, cache):
        """Test head returns hash only."""
        await cache.save(ZUL, "test")
        assert (await cache.head("test")).etag == ZUL_HASH

        with pytest.raises(CacheNotFoundError):
            await cache.head("missing")

    @pytest.mark.asyncio
    async def test_remove(self, cache):
        """Test unconditional and conditional remove."""
        await cache.save(ZUL, "a")
        await cache.save(ZUL, "b")

        await cache.remove("a")
        await cache.remove("b", ZUL_HASH)

        assert not await cache.exists("a")
        assert not await cache.exists("b")

    @pytest.mark.asyncio
    async def test_remove_missing(self, cache):
        """Test remove of absent key with and without hash."""
        with pytest.raises(CacheNotFoundError):
            await cache.remove("missing")
        with pytest.raises(CacheNotFoundError):
            await cache.remove("missing", ZUL_HASH)

    @pytest.mark.asyncio
    async def test_keys_and_exists(self, cache):
        """Test key listing."""
        assert await cache.keys() == []

        await cache.save("1", "user:1")
        await cache.save("2", "user/2")
        await cache.save("3", ".hidden")

        assert sorted(await cache.keys()) == [".hidden", "user/2", "user:1"]
        assert await cache.exists("user/2")
        assert not await cache.exists("user:3")

    @pytest.mark.asyncio
    async def test_clear(self, cache):
        """Test clear removes every entry."""
        await cache.save("1", "key1")
        await cache.save("2", "key2")

        count = await cache.clear()
        assert count == 2
        assert await cache.keys() == []

    @pytest.mark.asyncio
    async def test_stats(self, memory_cache):
        """Test statistics tracking."""
        await memory_cache.save(ZUL, "test")
        await memory_cache.restore("test")
        await memory_cache.restore("test", ZUL_HASH)
        with pytest.raises(CacheNotFoundError):
            await memory_cache.restore("missing")
        with pytest.raises(HashMismatchError):
            await memory_cache.save(ODOYLE, "test", "stale")

        stats = memory_cache.get_stats()
        assert stats.saves == 1
        assert stats.restores == 1
        assert stats.not_modified == 1
        assert stats.misses == 1
        assert stats.mismatches == 1

        memory_cache.reset_stats()
        assert memory_cache.get_stats().to_dict()["saves"] == 0

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test async context manager."""
        async with Cache(MemoryStore(), CacheConfig(name="ctx")) as cache:
            await cache.save("v", "k")
            assert await cache.exists("k")


class FailingStore(MemoryStore):
    """Memory store whose writes and deletes fail."""

    conditional_put = False
    conditional_delete = False

    async def put(self, key, body):
        raise OSError("disk full")

    async def delete(self, key):
        raise OSError("read-only")


class UnreadableStore(MemoryStore):
    """Memory store whose reads fail."""

    conditional_put = False
    conditional_delete = False

    async def get(self, key):
        raise OSError("io error")


class TestBackendFailures:
    """Tests for backend failure wrapping."""

    @pytest.mark.asyncio
    async def test_update_failed(self):
        """Test write errors become UpdateFailedError."""
        cache = Cache(FailingStore())

        with pytest.raises(UpdateFailedError) as exc_info:
            await cache.save("v", "k")
        assert exc_info.value.code is ErrorCode.UPDATE_FAILED
        assert "Failed to update key [k]" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_delete_failed(self):
        """Test delete errors become DeleteFailedError."""
        cache = Cache(FailingStore())

        with pytest.raises(DeleteFailedError) as exc_info:
            await cache.remove("k")
        assert exc_info.value.code is ErrorCode.DELETE_FAILED

    @pytest.mark.asyncio
    async def test_hash_check_read_failure(self):
        """Test read errors while checking the hash are wrapped."""
        cache = Cache(UnreadableStore())

        with pytest.raises(DeleteFailedError) as exc_info:
            await cache.remove("k", "h")
        assert isinstance(exc_info.value.__cause__, OSError)

        with pytest.raises(UpdateFailedError):
            await cache.save("v", "k", "h")


class TestEmptyKey:
    """Tests for empty keys."""

    @pytest.mark.asyncio
    async def test_lookups_miss(self, cache):
        """Test reads of the empty key report not found on every backend."""
        with pytest.raises(CacheNotFoundError):
            await cache.restore("")
        with pytest.raises(CacheNotFoundError):
            await cache.head("")
        with pytest.raises(CacheNotFoundError):
            await cache.remove("", ZUL_HASH)
        assert not await cache.exists("")

    @pytest.mark.asyncio
    async def test_save_refused(self, cache):
        """Test the empty key cannot be written."""
        with pytest.raises(MissingArgumentError):
            await cache.save(ZUL, "")
        assert await cache.keys() == []
