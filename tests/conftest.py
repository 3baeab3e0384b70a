"""Shared test fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from etagcache_core.cache.cache import Cache, CacheConfig
from etagcache_core.store.file import FileStore
from etagcache_core.store.memory import MemoryStore


@pytest.fixture
def memory_cache():
    return Cache(MemoryStore(), CacheConfig(name="mem"))


@pytest.fixture
def file_cache(tmp_path):
    return Cache(FileStore(str(tmp_path / "cache")), CacheConfig(name="fs"))


@pytest.fixture(params=["memory", "file"])
def cache(request, tmp_path):
    """Cache over each local backend."""
    if request.param == "memory":
        return Cache(MemoryStore(), CacheConfig(name="mem"))
    return Cache(FileStore(str(tmp_path / "cache")), CacheConfig(name="fs"))
