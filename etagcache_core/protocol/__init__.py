"""Protocol module - Payload serialization."""

from etagcache_core.protocol.serializer import (
    Serializer,
    SerializationError,
    JSONSerializer,
    MsgPackSerializer,
    RawSerializer,
    get_serializer,
)

__all__ = [
    "Serializer",
    "SerializationError",
    "JSONSerializer",
    "MsgPackSerializer",
    "RawSerializer",
    "get_serializer",
]
