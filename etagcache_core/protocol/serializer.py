"""EtagCache Serializer - Request Payload Normalization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The HTTP handler does not store request bodies verbatim: it decodes and
re-encodes them so that equivalent payloads hash the same way. JSON is
re-encoded the way JSON.stringify does it, which keeps hashes compatible
with JavaScript writers of the same cache.
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Optional

import msgpack

logger = logging.getLogger(__name__)


class SerializationError(ValueError):
    """Payload could not be decoded."""


class Serializer(ABC):
    """Abstract payload serializer."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Content type of serialized payloads."""

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value

        Raises:
            SerializationError: Data is not valid for this format
        """

    def normalize(self, data: bytes) -> bytes:
        """Re-encode a payload in canonical form.

        Args:
            data: Raw payload

        Returns:
            Canonical bytes
        """
        return self.serialize(self.deserialize(data))


def _format_number(value: float) -> str:
    """Format a float the way ECMAScript Number.prototype.toString does.

    Integral values drop the fraction, fixed notation is used for
    exponents from -7 to 20, and NaN and the infinities become null.
    """
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"

    # repr yields the shortest round-trip digits, as ECMAScript requires
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digits)
    k = len(digits)
    n = k + exponent
    prefix = "-" if sign else ""

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"

    return prefix + text


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, dict):
        items = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"Object keys must be strings, got {type(key).__name__}")
            items.append(f"{json.dumps(key, ensure_ascii=False)}:{_stringify(item)}")
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_stringify(item) for item in value) + "]"
    raise SerializationError(f"Cannot serialize {type(value).__name__} as JSON")


class JSONSerializer(Serializer):
    """JSON serializer.

    Output is the text JSON.stringify produces for the same value:
    compact separators, non-ASCII characters kept, and numbers in
    ECMAScript form (1.0 is written 1, NaN is written null).
    """

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def media_type(self) -> str:
        return "application/json"

    def serialize(self, value: Any) -> bytes:
        return _stringify(value).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializationError(f"Invalid JSON payload: {e}") from e


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact binary format for clients that post msgpack bodies.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    @property
    def media_type(self) -> str:
        return "application/msgpack"

    def serialize(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            raise SerializationError(f"Invalid MessagePack payload: {e}") from e


class RawSerializer(Serializer):
    """Passthrough serializer storing bodies as received."""

    @property
    def format_name(self) -> str:
        return "raw"

    @property
    def media_type(self) -> str:
        return "application/octet-stream"

    def serialize(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def deserialize(self, data: bytes) -> Any:
        return data

    def normalize(self, data: bytes) -> bytes:
        return data


_SERIALIZERS: Dict[str, Serializer] = {
    s.format_name: s for s in (JSONSerializer(), MsgPackSerializer(), RawSerializer())
}


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get serializer by format.

    Args:
        format_name: Format name or None for JSON

    Returns:
        Serializer instance

    Raises:
        KeyError: If format not found
    """
    if format_name is None:
        return _SERIALIZERS["json"]
    if format_name not in _SERIALIZERS:
        raise KeyError(f"Unknown serializer format: {format_name}")
    return _SERIALIZERS[format_name]


__all__ = [
    "Serializer",
    "SerializationError",
    "JSONSerializer",
    "MsgPackSerializer",
    "RawSerializer",
    "get_serializer",
]
