"""EtagCache File Store - File-Based Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from etagcache_core.store.backend import (
    StorageBackend,
    StorageConfig,
    decode_key,
    encode_key,
)

logger = logging.getLogger(__name__)


@dataclass
class FileStoreConfig(StorageConfig):
    """File store configuration.

    Attributes:
        path: Base directory for cache files
    """

    name: str = "file"
    path: str = ""


class FileStore(StorageBackend):
    """File-based storage backend.

    Persists one file per key, named by the percent-encoded key, so keys
    round-trip exactly through keys(). Blocking filesystem calls run in a
    worker thread.

    Layout:
        <path>/<encoded key>            entry bodies
        <path>/.sets/<encoded set key>/  set directories
        <path>/.tmp-<uuid>               in-flight writes

    Encoded keys never start with a dot, so hidden names are reserved.
    There is no native conditional write: a hash check followed by a
    write can interleave with another writer.

    Example:
        store = FileStore("/var/cache/myapp")
        await store.put("key", b"data")
        body = await store.get("key")
    """

    SETS_DIR = ".sets"
    TEMP_PREFIX = ".tmp-"

    supports_sets = True

    def __init__(
        self,
        base_path: str,
        config: Optional[FileStoreConfig] = None,
    ):
        """Initialize file store.

        Args:
            base_path: Base directory for cache files
            config: Storage configuration
        """
        super().__init__(config or FileStoreConfig(path=str(base_path)))
        self.base_path = Path(base_path)

    def _ensure_directory(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        return self.base_path / encode_key(key)

    def _read(self, key: str) -> Optional[bytes]:
        path = self._get_path(key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None

    def _write(self, key: str, body: bytes) -> None:
        path = self._get_path(key)
        self._ensure_directory()
        temp_path = self.base_path / f"{self.TEMP_PREFIX}{uuid.uuid4().hex}"

        try:
            with open(temp_path, "wb") as f:
                f.write(body)
            os.replace(temp_path, path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def _unlink(self, key: str) -> bool:
        try:
            self._get_path(key).unlink()
            return True
        except FileNotFoundError:
            return False

    def _entry_files(self) -> List[Path]:
        if not self.base_path.is_dir():
            return []
        return [
            p for p in self.base_path.iterdir()
            if p.is_file() and not p.name.startswith(".")
        ]

    def _clear(self) -> int:
        count = 0
        for path in self._entry_files():
            path.unlink()
            count += 1
        return count

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.reads += 1
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            logger.error(f"Error reading {key}: {e}")
            self._stats.record_error(str(e))
            raise

    async def put(self, key: str, body: bytes) -> None:
        try:
            await asyncio.to_thread(self._write, key, body)
            self._stats.writes += 1
        except OSError as e:
            logger.error(f"Error writing {key}: {e}")
            self._stats.record_error(str(e))
            raise

    async def delete(self, key: str) -> bool:
        try:
            deleted = await asyncio.to_thread(self._unlink, key)
        except OSError as e:
            logger.error(f"Error deleting {key}: {e}")
            self._stats.record_error(str(e))
            raise

        if deleted:
            self._stats.deletes += 1
        return deleted

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._get_path(key).is_file)

    async def keys(self) -> List[str]:
        files = await asyncio.to_thread(self._entry_files)
        return [decode_key(p.name) for p in files]

    async def clear(self) -> int:
        return await asyncio.to_thread(self._clear)

    def scoped(self, name: str) -> "FileStore":
        """Create a store for a set in its own directory.

        Args:
            name: Set key

        Returns:
            FileStore rooted at the set directory
        """
        path = self.base_path / self.SETS_DIR / encode_key(name)
        return FileStore(str(path), FileStoreConfig(name=f"{self.config.name}:{name}", path=str(path)))

    async def provision(self) -> None:
        """Create the store directory."""
        await asyncio.to_thread(self._ensure_directory)

    async def destroy(self) -> None:
        """Remove the store directory and everything under it."""
        await asyncio.to_thread(shutil.rmtree, self.base_path, True)

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore", "FileStoreConfig"]
