"""Tests for the error taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from etagcache_core.errors import (
    CacheError,
    CacheNotFoundError,
    ConfigurationError,
    DeleteFailedError,
    ErrorCode,
    HashMismatchError,
    ImplementationNotFoundError,
    InvalidArgumentError,
    MissingArgumentError,
    SetDestroyedError,
    SetNotDefinedError,
    UpdateFailedError,
)


class TestCacheErrors:
    """Tests for cache operation errors."""

    def test_codes(self):
        """Test stable error codes."""
        assert HashMismatchError("a", "b").code.value == 0
        assert UpdateFailedError("k").code.value == 1
        assert CacheNotFoundError("k").code.value == 2
        assert DeleteFailedError("k").code.value == 3
        assert SetNotDefinedError().code.value == 5
        assert SetDestroyedError("s").code is ErrorCode.SET_DESTROYED

    def test_messages(self):
        """Test human readable messages."""
        assert str(HashMismatchError("a", "b")) == "Provided Hash [a] doesn't match current hash [b]"
        assert str(CacheNotFoundError("k")) == "Cache for [k] not found"
        assert str(UpdateFailedError("k", OSError("boom"))) == "Failed to update key [k] - boom"
        assert str(SetDestroyedError("s")) == "Set [s] has been destroyed"

    def test_name(self):
        """Test error name."""
        error = HashMismatchError("a", "b")
        assert error.name == "HashMismatch"
        assert error.message == str(error)
        assert isinstance(error, CacheError)


class TestConfigurationErrors:
    """Tests for construction errors."""

    def test_missing_argument(self):
        """Test missing argument message."""
        error = MissingArgumentError("path")
        assert str(error) == "Missing Required Argument [path]"
        assert isinstance(error, ValueError)

    def test_invalid_argument(self):
        """Test invalid argument message."""
        error = InvalidArgumentError("port", "int", "str")
        assert str(error) == "Invalid Argument Type Expected [int] for [port] but got [str]"
        assert isinstance(error, TypeError)
        assert isinstance(error, ConfigurationError)

    def test_implementation_not_found(self):
        """Test unknown implementation message."""
        assert str(ImplementationNotFoundError("zip")) == "Implementation [zip] does not exist"
