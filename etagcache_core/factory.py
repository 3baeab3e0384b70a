"""EtagCache Factory - Build Caches and Handlers from Option Maps.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Options are validated eagerly: a missing or mistyped argument fails the
call synchronously, before any I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from etagcache_core.cache.cache import Cache, CacheConfig
from etagcache_core.errors import (
    ImplementationNotFoundError,
    InvalidArgumentError,
    MissingArgumentError,
)
from etagcache_core.http.handler import Handler
from etagcache_core.protocol.serializer import Serializer, get_serializer
from etagcache_core.store.backend import StorageBackend
from etagcache_core.store.file import FileStore, FileStoreConfig
from etagcache_core.store.memory import MemoryStore
from etagcache_core.store.redis import RedisConfig, RedisStore
from etagcache_core.store.s3 import S3Config, S3Store

logger = logging.getLogger(__name__)

TypeSpec = Union[type, Tuple[type, ...]]


@dataclass(frozen=True)
class ArgSpec:
    """A constructor argument.

    Attributes:
        name: Option name
        type: Accepted type(s)
        required: Whether the option must be present
        type_name: Name used in error messages
    """

    name: str
    type: TypeSpec
    required: bool = True
    type_name: Optional[str] = None

    @property
    def expected(self) -> str:
        if self.type_name:
            return self.type_name
        if isinstance(self.type, tuple):
            return "|".join(t.__name__ for t in self.type)
        return self.type.__name__


def _type_name(value: Any) -> str:
    if callable(value) and not isinstance(value, type):
        return "function"
    return type(value).__name__


def validate_arguments(options: Dict[str, Any], specs: List[ArgSpec]) -> Dict[str, Any]:
    """Check options against argument specs.

    Args:
        options: Option map
        specs: Expected arguments

    Returns:
        The validated options present in specs

    Raises:
        MissingArgumentError: Required option absent
        InvalidArgumentError: Option has the wrong type
    """
    validated = {}
    for spec in specs:
        value = options.get(spec.name)
        if value is None:
            if spec.required:
                raise MissingArgumentError(spec.name)
            continue

        # bool is an int subclass
        if isinstance(value, bool) and spec.type is not bool:
            raise InvalidArgumentError(spec.name, spec.expected, _type_name(value))
        if not isinstance(value, spec.type):
            raise InvalidArgumentError(spec.name, spec.expected, _type_name(value))

        validated[spec.name] = value
    return validated


def _build_memory(options: Dict[str, Any]) -> StorageBackend:
    return MemoryStore()


FILE_ARGS = [
    ArgSpec("path", str),
]


def _build_file(options: Dict[str, Any]) -> StorageBackend:
    args = validate_arguments(options, FILE_ARGS)
    return FileStore(args["path"], FileStoreConfig(path=args["path"]))


REDIS_ARGS = [
    ArgSpec("host", str),
    ArgSpec("port", int),
    ArgSpec("options", dict),
    ArgSpec("db", int, required=False),
    ArgSpec("password", str, required=False),
    ArgSpec("prefix", str, required=False),
]


def _build_redis(options: Dict[str, Any]) -> StorageBackend:
    args = validate_arguments(options, REDIS_ARGS)
    client_options = dict(args.pop("options"))
    return RedisStore(RedisConfig(options=client_options, **args))


S3_ARGS = [
    ArgSpec("bucket", str),
    ArgSpec("access_key_id", str, required=False),
    ArgSpec("secret_access_key", str, required=False),
    ArgSpec("region", str, required=False),
    ArgSpec("endpoint_url", str, required=False),
    ArgSpec("prefix", str, required=False),
]


def _build_s3(options: Dict[str, Any]) -> StorageBackend:
    args = validate_arguments(options, S3_ARGS)
    return S3Store(S3Config(**args))


IMPLEMENTATIONS: Dict[str, Callable[[Dict[str, Any]], StorageBackend]] = {
    "mem": _build_memory,
    "memory": _build_memory,
    "fs": _build_file,
    "file": _build_file,
    "redis": _build_redis,
    "s3": _build_s3,
}


def create_cache(impl: str, options: Dict[str, Any]) -> Cache:
    """Create a cache for a named implementation.

    Args:
        impl: Implementation name (mem, fs, redis, s3)
        options: Implementation options

    Returns:
        Cache over the implementation's backend

    Raises:
        MissingArgumentError: impl, options or a required option absent
        InvalidArgumentError: impl, options or an option mistyped
        ImplementationNotFoundError: Unknown implementation
    """
    if impl is None or impl == "":
        raise MissingArgumentError("impl")
    if not isinstance(impl, str):
        raise InvalidArgumentError("impl", "str", _type_name(impl))
    if options is None:
        raise MissingArgumentError("options")
    if not isinstance(options, dict):
        raise InvalidArgumentError("options", "dict", _type_name(options))

    impl = impl.lower()
    builder = IMPLEMENTATIONS.get(impl)
    if builder is None:
        raise ImplementationNotFoundError(impl)

    store = builder(options)
    name = options.get("name")
    config = CacheConfig(name=name if isinstance(name, str) and name else impl)

    logger.debug(f"Created {impl} cache {config.name}")
    return Cache(store, config)


HANDLER_ARGS = [
    ArgSpec("check_header", str, required=False),
    ArgSpec("etag_header", str, required=False),
    ArgSpec("serializer", (str, Serializer), required=False),
]


def create_handler(cache: Any, options: Dict[str, Any]) -> Handler:
    """Create a handler from an option map.

    Args:
        cache: Cache or CacheSet
        options: Handler options; key_func is required, serializer may be
            a format name

    Returns:
        Handler

    Raises:
        MissingArgumentError: cache, options or key_func absent
        InvalidArgumentError: An option is mistyped
    """
    if cache is None:
        raise MissingArgumentError("cache")
    if options is None:
        raise MissingArgumentError("options")
    if not isinstance(options, dict):
        raise InvalidArgumentError("options", "dict", _type_name(options))

    key_func = options.get("key_func")
    if key_func is not None and not callable(key_func):
        raise InvalidArgumentError("key_func", "function", _type_name(key_func))
    args = validate_arguments(options, HANDLER_ARGS)
    if key_func is None:
        raise MissingArgumentError("key_func")

    serializer = args.pop("serializer", None)
    if isinstance(serializer, str):
        serializer = get_serializer(serializer)

    return Handler(cache, key_func=key_func, serializer=serializer, **args)


__all__ = [
    "ArgSpec",
    "validate_arguments",
    "create_cache",
    "create_handler",
    "IMPLEMENTATIONS",
]
