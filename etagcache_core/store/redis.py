"""EtagCache Redis Store - Redis Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from etagcache_core.store.backend import (
    ConditionalOutcome,
    StorageBackend,
    StorageConfig,
)

logger = logging.getLogger(__name__)


# Conditional scripts hash with redis.sha1hex, the same digest the cache
# uses, so the comparison and the write happen in one atomic step.
#
# compare-and-put returns nil when written, else the current hash.
# compare-and-delete returns {0} when absent, {1, hash} on mismatch,
# {2} when deleted.

_STRING_STAT = """
local current = redis.call('GET', KEYS[1])
if not current then return false end
return redis.sha1hex(current)
"""

_STRING_COMPARE_AND_PUT = """
local current = redis.call('GET', KEYS[1])
if current then
    local h = redis.sha1hex(current)
    if h ~= ARGV[2] then return h end
end
redis.call('SET', KEYS[1], ARGV[1])
return false
"""

_STRING_COMPARE_AND_DELETE = """
local current = redis.call('GET', KEYS[1])
if not current then return {0} end
local h = redis.sha1hex(current)
if h ~= ARGV[1] then return {1, h} end
redis.call('DEL', KEYS[1])
return {2}
"""

_HASH_STAT = """
local current = redis.call('HGET', KEYS[1], ARGV[1])
if not current then return false end
return redis.sha1hex(current)
"""

_HASH_COMPARE_AND_PUT = """
local current = redis.call('HGET', KEYS[1], ARGV[1])
if current then
    local h = redis.sha1hex(current)
    if h ~= ARGV[3] then return h end
end
redis.call('HSET', KEYS[1], ARGV[1], ARGV[2])
return false
"""

_HASH_COMPARE_AND_DELETE = """
local current = redis.call('HGET', KEYS[1], ARGV[1])
if not current then return {0} end
local h = redis.sha1hex(current)
if h ~= ARGV[2] then return {1, h} end
redis.call('HDEL', KEYS[1], ARGV[1])
return {2}
"""


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
        options: Extra keyword arguments for the Redis client
    """

    name: str = "redis"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "etagcache:"
    options: Dict[str, Any] = field(default_factory=dict)


def _decode(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else value


def _delete_outcome(result: List[Any]) -> ConditionalOutcome:
    status = int(result[0])
    if status == 0:
        return ConditionalOutcome(applied=False, found=False)
    if status == 1:
        return ConditionalOutcome(applied=False, current_hash=_decode(result[1]))
    return ConditionalOutcome(applied=True)


class RedisStore(StorageBackend):
    """Redis storage backend.

    Entries are Redis strings under "<prefix>entry:<key>". Sets are Redis
    hashes under "<prefix>set:<set key>", one field per entry, sharing
    this store's client.

    The client is created eagerly but connects lazily, so construction
    performs no I/O.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        await store.put("key", b"data")
        body = await store.get("key")
    """

    conditional_put = True
    conditional_delete = True
    supports_sets = True

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Existing client to use instead of creating one
        """
        super().__init__(config or RedisConfig())
        self.config: RedisConfig = self.config
        self._owns_client = client is None
        self._client = client or self._create_client()

        self._stat_script = self._client.register_script(_STRING_STAT)
        self._put_script = self._client.register_script(_STRING_COMPARE_AND_PUT)
        self._delete_script = self._client.register_script(_STRING_COMPARE_AND_DELETE)

    def _create_client(self) -> redis.Redis:
        kwargs = dict(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            max_connections=self.config.max_connections,
        )
        kwargs.update(self.config.options)
        # Bodies are opaque bytes
        kwargs["decode_responses"] = False
        return redis.Redis(**kwargs)

    @property
    def client(self) -> redis.Redis:
        return self._client

    @property
    def entry_prefix(self) -> str:
        return f"{self.config.prefix}entry:"

    def _make_key(self, key: str) -> str:
        return f"{self.entry_prefix}{key}"

    def _scan_pattern(self) -> str:
        # Escape glob characters in the prefix itself
        escaped = "".join(f"\\{c}" if c in "*?[]\\" else c for c in self.entry_prefix)
        return f"{escaped}*"

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.reads += 1
        return await self._client.get(self._make_key(key))

    async def put(self, key: str, body: bytes) -> None:
        try:
            await self._client.set(self._make_key(key), body)
            self._stats.writes += 1
        except redis.RedisError as e:
            logger.error(f"Redis set error: {e}")
            self._stats.record_error(str(e))
            raise

    async def delete(self, key: str) -> bool:
        try:
            result = await self._client.delete(self._make_key(key))
        except redis.RedisError as e:
            logger.error(f"Redis delete error: {e}")
            self._stats.record_error(str(e))
            raise

        self._stats.deletes += 1
        return result > 0

    async def exists(self, key: str) -> bool:
        return await self._client.exists(self._make_key(key)) > 0

    async def keys(self) -> List[str]:
        prefix_len = len(self.entry_prefix)
        keys = []
        async for key in self._client.scan_iter(match=self._scan_pattern(), count=100):
            keys.append(_decode(key)[prefix_len:])
        return keys

    async def clear(self) -> int:
        count = 0
        batch = []
        async for key in self._client.scan_iter(match=self._scan_pattern(), count=100):
            batch.append(key)
            if len(batch) >= 100:
                count += await self._client.delete(*batch)
                batch = []
        if batch:
            count += await self._client.delete(*batch)
        return count

    async def stat(self, key: str) -> Optional[str]:
        self._stats.reads += 1
        result = await self._stat_script(keys=[self._make_key(key)])
        return _decode(result) if result is not None else None

    async def compare_and_put(
        self,
        key: str,
        body: bytes,
        expected_hash: str,
    ) -> ConditionalOutcome:
        try:
            result = await self._put_script(
                keys=[self._make_key(key)], args=[body, expected_hash]
            )
        except redis.RedisError as e:
            logger.error(f"Redis conditional set error: {e}")
            self._stats.record_error(str(e))
            raise

        if result is not None:
            return ConditionalOutcome(applied=False, current_hash=_decode(result))
        self._stats.writes += 1
        return ConditionalOutcome(applied=True)

    async def compare_and_delete(
        self,
        key: str,
        expected_hash: str,
    ) -> ConditionalOutcome:
        try:
            result = await self._delete_script(
                keys=[self._make_key(key)], args=[expected_hash]
            )
        except redis.RedisError as e:
            logger.error(f"Redis conditional delete error: {e}")
            self._stats.record_error(str(e))
            raise

        outcome = _delete_outcome(result)
        if outcome.applied:
            self._stats.deletes += 1
        return outcome

    def scoped(self, name: str) -> "RedisHashStore":
        """Create a hash-backed store for a set.

        Args:
            name: Set key

        Returns:
            RedisHashStore sharing this client
        """
        return RedisHashStore(
            self._client,
            f"{self.config.prefix}set:{name}",
            RedisConfig(
                name=f"{self.config.name}:{name}",
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                prefix=self.config.prefix,
            ),
        )

    async def close(self) -> None:
        """Close Redis connection."""
        if self._owns_client:
            await self._client.aclose()
            logger.info(f"Closed Redis connection to {self.config.host}:{self.config.port}")

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


class RedisHashStore(StorageBackend):
    """Storage in a single Redis hash.

    Used for sets: every entry is a field of the hash, so destroying the
    set is one DEL. Borrows the parent's client and never closes it.
    """

    conditional_put = True
    conditional_delete = True

    def __init__(
        self,
        client: redis.Redis,
        hash_key: str,
        config: Optional[StorageConfig] = None,
    ):
        """Initialize hash store.

        Args:
            client: Parent Redis client
            hash_key: Name of the Redis hash
            config: Storage configuration
        """
        super().__init__(config)
        self._client = client
        self.hash_key = hash_key

        self._stat_script = client.register_script(_HASH_STAT)
        self._put_script = client.register_script(_HASH_COMPARE_AND_PUT)
        self._delete_script = client.register_script(_HASH_COMPARE_AND_DELETE)

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.reads += 1
        return await self._client.hget(self.hash_key, key)

    async def put(self, key: str, body: bytes) -> None:
        try:
            await self._client.hset(self.hash_key, key, body)
            self._stats.writes += 1
        except redis.RedisError as e:
            logger.error(f"Redis hset error: {e}")
            self._stats.record_error(str(e))
            raise

    async def delete(self, key: str) -> bool:
        try:
            result = await self._client.hdel(self.hash_key, key)
        except redis.RedisError as e:
            logger.error(f"Redis hdel error: {e}")
            self._stats.record_error(str(e))
            raise

        self._stats.deletes += 1
        return result > 0

    async def exists(self, key: str) -> bool:
        return bool(await self._client.hexists(self.hash_key, key))

    async def keys(self) -> List[str]:
        return [_decode(k) for k in await self._client.hkeys(self.hash_key)]

    async def clear(self) -> int:
        count = await self._client.hlen(self.hash_key)
        await self._client.delete(self.hash_key)
        return count

    async def stat(self, key: str) -> Optional[str]:
        self._stats.reads += 1
        result = await self._stat_script(keys=[self.hash_key], args=[key])
        return _decode(result) if result is not None else None

    async def compare_and_put(
        self,
        key: str,
        body: bytes,
        expected_hash: str,
    ) -> ConditionalOutcome:
        result = await self._put_script(
            keys=[self.hash_key], args=[key, body, expected_hash]
        )
        if result is not None:
            return ConditionalOutcome(applied=False, current_hash=_decode(result))
        self._stats.writes += 1
        return ConditionalOutcome(applied=True)

    async def compare_and_delete(
        self,
        key: str,
        expected_hash: str,
    ) -> ConditionalOutcome:
        result = await self._delete_script(keys=[self.hash_key], args=[key, expected_hash])
        outcome = _delete_outcome(result)
        if outcome.applied:
            self._stats.deletes += 1
        return outcome

    async def destroy(self) -> None:
        await self._client.delete(self.hash_key)

    def __repr__(self) -> str:
        return f"RedisHashStore(key={self.hash_key})"


__all__ = ["RedisStore", "RedisHashStore", "RedisConfig"]
