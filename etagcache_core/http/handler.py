"""EtagCache Handler - HTTP Conditional Request Adapter.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Maps cache operations onto HTTP conditional request semantics. The cache
layer raises domain errors; this module alone decides status codes.

    Operation  Success                    HashMismatch  CacheNotFound  Other
    head       200, 304 if hash matches   -             404            500
    save       200, 400 bad body or key   412           404            500
    restore    200 with body, 304         -             404            500
    remove     204                        412           404            500
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type, Union

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from etagcache_core.cache.hasher import normalize_hash
from etagcache_core.errors import (
    CacheNotFoundError,
    DeleteFailedError,
    HashMismatchError,
    InvalidArgumentError,
    MissingArgumentError,
    UpdateFailedError,
)
from etagcache_core.protocol.serializer import (
    JSONSerializer,
    SerializationError,
    Serializer,
)

logger = logging.getLogger(__name__)

DEFAULT_CHECK_HEADER = "if-none-match"
DEFAULT_ETAG_HEADER = "etag"
UNKNOWN_ERROR_MESSAGE = "An Unknown Error Occurred"

KeyFunc = Callable[[Request], Union[str, Awaitable[str]]]

HEAD_ERRORS: Dict[Type[Exception], int] = {
    CacheNotFoundError: 404,
}

SAVE_ERRORS: Dict[Type[Exception], int] = {
    HashMismatchError: 412,
    UpdateFailedError: 500,
    CacheNotFoundError: 404,
    SerializationError: 400,
    MissingArgumentError: 400,
}

RESTORE_ERRORS: Dict[Type[Exception], int] = {
    CacheNotFoundError: 404,
}

REMOVE_ERRORS: Dict[Type[Exception], int] = {
    HashMismatchError: 412,
    DeleteFailedError: 500,
    CacheNotFoundError: 404,
}


class Handler:
    """Request handler over a Cache or CacheSet.

    Each operation takes a Starlette request, makes exactly one cache
    call and returns one response. The key comes from key_func, the
    caller's known hash from the check header.

    Example:
        handler = Handler(cache, key_func=lambda r: r.path_params["key"])
        app.add_route("/cache/{key}", handler.restore, methods=["GET"])
    """

    def __init__(
        self,
        cache: Any,
        key_func: Optional[KeyFunc] = None,
        check_header: str = DEFAULT_CHECK_HEADER,
        etag_header: str = DEFAULT_ETAG_HEADER,
        serializer: Optional[Serializer] = None,
    ):
        """Initialize handler.

        Args:
            cache: Cache or CacheSet
            key_func: Maps a request to a cache key, may be async
            check_header: Header carrying the caller's hash
            etag_header: Response header carrying the current hash
            serializer: Normalizes request bodies before storage

        Raises:
            MissingArgumentError: cache or key_func absent
            InvalidArgumentError: key_func is not callable
        """
        if cache is None:
            raise MissingArgumentError("cache")
        if key_func is None:
            raise MissingArgumentError("key_func")
        if not callable(key_func):
            raise InvalidArgumentError("key_func", "function", type(key_func).__name__)

        self.cache = cache
        self.key_func = key_func
        self.check_header = (check_header or DEFAULT_CHECK_HEADER).lower()
        self.etag_header = (etag_header or DEFAULT_ETAG_HEADER).lower()
        self.serializer = serializer or JSONSerializer()

    async def _key(self, request: Request) -> str:
        key = self.key_func(request)
        if inspect.isawaitable(key):
            key = await key
        return key

    def _check_hash(self, request: Request) -> Optional[str]:
        return normalize_hash(request.headers.get(self.check_header))

    def _error_response(
        self,
        error: Exception,
        statuses: Dict[Type[Exception], int],
        operation: str,
    ) -> Response:
        status = 500
        for error_type, mapped in statuses.items():
            if isinstance(error, error_type):
                status = mapped
                break

        if status >= 500:
            logger.error(f"{operation} failed: {error!r}")
        else:
            logger.debug(f"{operation} rejected with {status}: {error}")

        message = str(error) or UNKNOWN_ERROR_MESSAGE
        return PlainTextResponse(message, status_code=status)

    async def head(self, request: Request) -> Response:
        """Report the current hash; 304 if the caller holds it."""
        key = await self._key(request)
        if_newer_hash = self._check_hash(request)

        try:
            result = await self.cache.head(key)
        except Exception as e:
            return self._error_response(e, HEAD_ERRORS, f"head {key}")

        headers = {self.etag_header: result.hash}
        if result.hash != if_newer_hash:
            return Response(status_code=200, headers=headers)
        return Response(status_code=304, headers=headers)

    async def save(self, request: Request) -> Response:
        """Store the request body, conditionally on the check header."""
        key = await self._key(request)
        hash_to_replace = self._check_hash(request)

        try:
            body = self.serializer.normalize(await request.body())
            result = await self.cache.save(body, key, hash_to_replace)
        except Exception as e:
            return self._error_response(e, SAVE_ERRORS, f"save {key}")

        return Response(status_code=200, headers={self.etag_header: result.hash})

    async def restore(self, request: Request) -> Response:
        """Return the stored body; 304 if the caller holds it."""
        key = await self._key(request)
        if_newer_hash = self._check_hash(request)

        try:
            result = await self.cache.restore(key, if_newer_hash)
        except Exception as e:
            return self._error_response(e, RESTORE_ERRORS, f"restore {key}")

        headers = {self.etag_header: result.hash}
        if result.body is None:
            return Response(status_code=304, headers=headers)
        return Response(
            content=result.body,
            status_code=200,
            headers=headers,
            media_type=self.serializer.media_type,
        )

    async def remove(self, request: Request) -> Response:
        """Delete the entry, conditionally on the check header."""
        key = await self._key(request)
        hash_to_delete = self._check_hash(request)

        try:
            await self.cache.remove(key, hash_to_delete)
        except Exception as e:
            return self._error_response(e, REMOVE_ERRORS, f"remove {key}")

        return Response(status_code=204)

    def __repr__(self) -> str:
        return f"Handler(cache={self.cache!r}, check_header={self.check_header!r})"


__all__ = [
    "Handler",
    "DEFAULT_CHECK_HEADER",
    "DEFAULT_ETAG_HEADER",
    "UNKNOWN_ERROR_MESSAGE",
]
