"""EtagCache Hasher - Content Fingerprints.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
from typing import Optional, Union

# Hashes are compared across writers and backends, including server-side
# hashing in Redis (redis.sha1hex) and S3 object metadata.
HASH_ALGORITHM = "sha1"


def content_hash(body: Union[bytes, str]) -> str:
    """Compute the content hash of a body.

    Args:
        body: Raw bytes, or text encoded as UTF-8

    Returns:
        Lowercase hex digest
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.new(HASH_ALGORITHM, body).hexdigest()


def normalize_hash(value: Optional[str]) -> Optional[str]:
    """Normalize an ETag supplied in a request header.

    Strips the weak validator prefix and surrounding quotes.

    Args:
        value: Raw header value

    Returns:
        Bare hash or None when empty
    """
    if value is None:
        return None

    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]

    return value or None


__all__ = ["HASH_ALGORITHM", "content_hash", "normalize_hash"]
