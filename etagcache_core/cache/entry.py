"""EtagCache Entry - Cache Entry and Operation Results.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from etagcache_core.cache.hasher import content_hash


@dataclass(frozen=True)
class CacheEntry:
    """A stored body addressed by key.

    The hash is always derived from the body, so an entry can never
    carry a stale fingerprint.

    Attributes:
        key: Cache key
        body: Stored bytes
    """

    key: str
    body: bytes

    @property
    def hash(self) -> str:
        """Content hash of the body."""
        return content_hash(self.body)

    @property
    def size_bytes(self) -> int:
        """Body size in bytes."""
        return len(self.body)

    def __repr__(self) -> str:
        return f"CacheEntry(key={self.key!r}, hash={self.hash}, size={self.size_bytes})"


@dataclass(frozen=True)
class SaveResult:
    """Result of a save."""

    hash: str

    @property
    def etag(self) -> str:
        return self.hash

    def to_dict(self) -> Dict[str, Any]:
        return {"etag": self.hash}


@dataclass(frozen=True)
class HeadResult:
    """Result of a head."""

    hash: str

    @property
    def etag(self) -> str:
        return self.hash

    def to_dict(self) -> Dict[str, Any]:
        return {"etag": self.hash}


@dataclass(frozen=True)
class RestoreResult:
    """Result of a restore.

    Attributes:
        hash: Current hash of the stored body
        body: Stored body, omitted when the caller already holds it
    """

    hash: str
    body: Optional[bytes] = None

    @property
    def etag(self) -> str:
        return self.hash

    @property
    def not_modified(self) -> bool:
        """True when the body was suppressed."""
        return self.body is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        data: Dict[str, Any] = {"etag": self.hash}
        if self.body is not None:
            data["body"] = self.body
        return data


__all__ = ["CacheEntry", "SaveResult", "HeadResult", "RestoreResult"]
