"""EtagCache S3 Store - Object Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from etagcache_core.cache.hasher import content_hash
from etagcache_core.store.backend import (
    ConditionalOutcome,
    StorageBackend,
    StorageConfig,
    decode_key,
    encode_key,
)

logger = logging.getLogger(__name__)

HASH_METADATA_KEY = "sha1"

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_PRECONDITION_CODES = {"412", "PreconditionFailed", "ConditionalRequestConflict"}


@dataclass
class S3Config(StorageConfig):
    """S3-specific configuration.

    Attributes:
        bucket: Bucket name
        prefix: Object key prefix
        region: AWS region
        endpoint_url: Custom endpoint (MinIO, LocalStack)
        access_key_id: Access key
        secret_access_key: Secret key
    """

    name: str = "s3"
    bucket: str = ""
    prefix: str = ""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3Store(StorageBackend):
    """S3 object storage backend.

    Works with AWS S3 and S3-compatible services. Each entry is one object
    named "<prefix><encoded key>". The SHA-1 of the body is written to the
    object metadata so stat() needs only a HEAD request; the S3 ETag is an
    MD5 and is only used as a write precondition.

    Conditional puts use S3 conditional writes (If-Match on the current
    ETag, If-None-Match for creates). A precondition failure means the
    object changed after the HEAD; the check is redone up to MAX_ATTEMPTS
    times, so an object deleted in between is recreated rather than
    reported as a mismatch. Deletes are check-then-delete.

    Sets are child stores under "<prefix><encoded set key>/". Listing uses
    "/" as delimiter, so set contents never show up in the parent's keys().

    Example:
        store = S3Store(S3Config(bucket="my-cache"))
        await store.put("key", b"data")
        body = await store.get("key")
    """

    conditional_put = True
    supports_sets = True

    MAX_ATTEMPTS = 3

    def __init__(
        self,
        config: S3Config,
        client: Optional[Any] = None,
    ):
        """Initialize S3 store.

        Args:
            config: S3 configuration
            client: Existing boto3 S3 client
        """
        super().__init__(config)
        self.config: S3Config = config
        self.client = client or self._create_client()

    def _create_client(self) -> Any:
        client_kwargs = {
            "service_name": "s3",
            "region_name": self.config.region,
            "config": Config(signature_version="s3v4"),
        }

        if self.config.endpoint_url:
            client_kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.access_key_id and self.config.secret_access_key:
            client_kwargs["aws_access_key_id"] = self.config.access_key_id
            client_kwargs["aws_secret_access_key"] = self.config.secret_access_key

        return boto3.client(**client_kwargs)

    @property
    def bucket(self) -> str:
        return self.config.bucket

    def _object_key(self, key: str) -> str:
        return f"{self.config.prefix}{encode_key(key)}"

    def _head(self, key: str) -> Optional[dict]:
        try:
            return self.client.head_object(Bucket=self.bucket, Key=self._object_key(key))
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            raise

    def _read(self, key: str) -> Optional[bytes]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self._object_key(key))
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            raise
        return response["Body"].read()

    def _write(self, key: str, body: bytes, **conditions: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=self._object_key(key),
            Body=body,
            Metadata={HASH_METADATA_KEY: content_hash(body)},
            **conditions,
        )

    def _hash_from_head(self, key: str, head: dict) -> str:
        stored = head.get("Metadata", {}).get(HASH_METADATA_KEY)
        if stored:
            return stored
        # Written by something other than this store
        body = self._read(key)
        return content_hash(body or b"")

    def _stat(self, key: str) -> Optional[str]:
        head = self._head(key)
        if head is None:
            return None
        return self._hash_from_head(key, head)

    def _compare_and_put(self, key: str, body: bytes, expected_hash: str) -> ConditionalOutcome:
        attempt = 1
        while True:
            head = self._head(key)
            if head is None:
                conditions = {"IfNoneMatch": "*"}
            else:
                current_hash = self._hash_from_head(key, head)
                if current_hash != expected_hash:
                    return ConditionalOutcome(applied=False, current_hash=current_hash)
                conditions = {"IfMatch": head["ETag"]}

            try:
                self._write(key, body, **conditions)
                return ConditionalOutcome(applied=True, found=head is not None)
            except ClientError as e:
                # Object changed between the HEAD and the PUT
                if _error_code(e) not in _PRECONDITION_CODES or attempt >= self.MAX_ATTEMPTS:
                    raise
                logger.warning(f"Conditional write on {key} raced a concurrent writer, retrying")
                attempt += 1

    def _head_bucket(self) -> None:
        self.client.head_bucket(Bucket=self.bucket)

    def _delete(self, key: str) -> bool:
        if self._head(key) is None:
            return False
        self.client.delete_object(Bucket=self.bucket, Key=self._object_key(key))
        return True

    def _list(self) -> List[str]:
        paginator = self.client.get_paginator("list_objects_v2")
        prefix_len = len(self.config.prefix)
        keys = []

        for page in paginator.paginate(
            Bucket=self.bucket, Prefix=self.config.prefix, Delimiter="/"
        ):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"][prefix_len:])

        return keys

    def _delete_all(self, recursive: bool) -> int:
        paginator = self.client.get_paginator("list_objects_v2")
        params = {"Bucket": self.bucket, "Prefix": self.config.prefix}
        if not recursive:
            params["Delimiter"] = "/"

        count = 0
        for page in paginator.paginate(**params):
            objects = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
            if objects:
                self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": objects, "Quiet": True},
                )
                count += len(objects)
        return count

    async def _call(self, func, *args) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except ClientError as e:
            logger.error(f"S3 error on bucket {self.bucket}: {e}")
            self._stats.record_error(str(e))
            raise

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.reads += 1
        return await self._call(self._read, key)

    async def put(self, key: str, body: bytes) -> None:
        await self._call(self._write, key, body)
        self._stats.writes += 1

    async def delete(self, key: str) -> bool:
        deleted = await self._call(self._delete, key)
        if deleted:
            self._stats.deletes += 1
        return deleted

    async def exists(self, key: str) -> bool:
        return await self._call(self._head, key) is not None

    async def keys(self) -> List[str]:
        return [decode_key(name) for name in await self._call(self._list)]

    async def clear(self) -> int:
        return await self._call(self._delete_all, False)

    async def stat(self, key: str) -> Optional[str]:
        self._stats.reads += 1
        return await self._call(self._stat, key)

    async def compare_and_put(
        self,
        key: str,
        body: bytes,
        expected_hash: str,
    ) -> ConditionalOutcome:
        outcome = await self._call(self._compare_and_put, key, body, expected_hash)
        if outcome.applied:
            self._stats.writes += 1
        return outcome

    def scoped(self, name: str) -> "S3Store":
        """Create a store for a set under its own key prefix.

        Args:
            name: Set key

        Returns:
            S3Store sharing this client
        """
        config = S3Config(
            name=f"{self.config.name}:{name}",
            bucket=self.bucket,
            prefix=f"{self.config.prefix}{encode_key(name)}/",
            region=self.config.region,
            endpoint_url=self.config.endpoint_url,
        )
        return S3Store(config, client=self.client)

    async def provision(self) -> None:
        """Verify the bucket is reachable."""
        await self._call(self._head_bucket)

    async def destroy(self) -> None:
        """Delete every object under the prefix."""
        await self._call(self._delete_all, True)

    def __repr__(self) -> str:
        return f"S3Store(bucket={self.bucket}, prefix={self.config.prefix!r})"


__all__ = ["S3Store", "S3Config"]
