"""EtagCache Errors - Cache Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Cache operations fail with a CacheError subclass carrying a stable
machine-checkable code. Configuration problems are raised synchronously
at construction time as ValueError/TypeError subclasses.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Stable error codes."""

    HASH_MISMATCH = 0
    UPDATE_FAILED = 1
    CACHE_NOT_FOUND = 2
    DELETE_FAILED = 3
    SET_NOT_DEFINED = 5
    SET_DESTROYED = 6


class CacheError(Exception):
    """Base class for cache operation errors.

    Attributes:
        code: Stable error code
        message: Human readable message
    """

    code: ErrorCode

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def name(self) -> str:
        """Error name without the Error suffix."""
        return type(self).__name__[: -len("Error")]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.name}, message={self.message!r})"


class HashMismatchError(CacheError):
    """Provided hash does not match the stored hash."""

    code = ErrorCode.HASH_MISMATCH

    def __init__(self, provided_hash: str, current_hash: str):
        self.provided_hash = provided_hash
        self.current_hash = current_hash
        super().__init__(
            f"Provided Hash [{provided_hash}] doesn't match current hash [{current_hash}]"
        )


class UpdateFailedError(CacheError):
    """Backend rejected a write."""

    code = ErrorCode.UPDATE_FAILED

    def __init__(self, key: str, reason: Optional[BaseException] = None):
        self.key = key
        self.reason = reason
        message = f"Failed to update key [{key}]"
        if reason is not None:
            message = f"{message} - {reason}"
        super().__init__(message)


class CacheNotFoundError(CacheError):
    """No entry stored at key."""

    code = ErrorCode.CACHE_NOT_FOUND

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cache for [{key}] not found")


class DeleteFailedError(CacheError):
    """Backend rejected a deletion."""

    code = ErrorCode.DELETE_FAILED

    def __init__(self, key: str, reason: Optional[BaseException] = None):
        self.key = key
        self.reason = reason
        message = f"Failed to delete key [{key}]"
        if reason is not None:
            message = f"{message} - {reason}"
        super().__init__(message)


class SetNotDefinedError(CacheError):
    """Backend has no set capability."""

    code = ErrorCode.SET_NOT_DEFINED

    def __init__(self):
        super().__init__("Set Class is not associated with this cache")


class SetDestroyedError(CacheError):
    """Operation attempted on a destroyed set."""

    code = ErrorCode.SET_DESTROYED

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Set [{key}] has been destroyed")


class NestedSetError(TypeError):
    """Sets cannot be divided into further sets."""

    def __init__(self):
        super().__init__("Cannot call set of a set instance")


class ConfigurationError(ValueError):
    """Invalid construction arguments."""


class MissingArgumentError(ConfigurationError):
    """Required argument is absent."""

    def __init__(self, name: str):
        self.argument = name
        super().__init__(f"Missing Required Argument [{name}]")


class InvalidArgumentError(ConfigurationError, TypeError):
    """Argument has the wrong type."""

    def __init__(self, name: str, expected: str, actual: str):
        self.argument = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid Argument Type Expected [{expected}] for [{name}] but got [{actual}]"
        )


class ImplementationNotFoundError(ConfigurationError):
    """Unknown cache implementation name."""

    def __init__(self, impl: str):
        self.impl = impl
        super().__init__(f"Implementation [{impl}] does not exist")


__all__ = [
    "ErrorCode",
    "CacheError",
    "HashMismatchError",
    "UpdateFailedError",
    "CacheNotFoundError",
    "DeleteFailedError",
    "SetNotDefinedError",
    "SetDestroyedError",
    "NestedSetError",
    "ConfigurationError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "ImplementationNotFoundError",
]
