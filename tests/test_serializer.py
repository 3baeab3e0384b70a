"""Tests for payload serializers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import msgpack
import pytest

from etagcache_core.protocol.serializer import (
    JSONSerializer,
    MsgPackSerializer,
    RawSerializer,
    SerializationError,
    get_serializer,
)


class TestJSONSerializer:
    """Tests for JSONSerializer."""

    def test_normalize_compact(self):
        """Test whitespace is removed and key order kept."""
        serializer = JSONSerializer()
        body = b'{ "name" : "Zul",\n  "tags": [1, 2] }'

        assert serializer.normalize(body) == b'{"name":"Zul","tags":[1,2]}'

    def test_non_ascii_kept(self):
        """Test non-ASCII text is not escaped."""
        serializer = JSONSerializer()

        assert serializer.serialize({"name": "Zoë"}) == '{"name":"Zoë"}'.encode("utf-8")

    def test_integral_floats(self):
        """Test integral floats lose their fraction."""
        serializer = JSONSerializer()

        assert serializer.normalize(b'{"a":1.0,"b":1e2}') == b'{"a":1,"b":100}'
        assert serializer.normalize(b"[-0.0, -3.0]") == b"[0,-3]"

    @pytest.mark.parametrize(
        "body,expected",
        [
            (b"[1.5]", b"[1.5]"),
            (b"[-123.456]", b"[-123.456]"),
            (b"[0.000001]", b"[0.000001]"),
            (b"[1e-7]", b"[1e-7]"),
            (b"[2.5e-8]", b"[2.5e-8]"),
            (b"[1e20]", b"[100000000000000000000]"),
            (b"[1e21]", b"[1e+21]"),
            (b"[1.25e30]", b"[1.25e+30]"),
        ],
    )
    def test_number_forms(self, body, expected):
        """Test fixed and exponent notation boundaries."""
        assert JSONSerializer().normalize(body) == expected

    def test_non_finite(self):
        """Test NaN and Infinity are written as null."""
        serializer = JSONSerializer()

        assert serializer.normalize(b"[NaN, Infinity, -Infinity]") == b"[null,null,null]"

    def test_unsupported_values(self):
        """Test values with no JSON form."""
        serializer = JSONSerializer()

        with pytest.raises(SerializationError):
            serializer.serialize({1: "a"})
        with pytest.raises(SerializationError):
            serializer.serialize({"a": object()})

    def test_invalid(self):
        """Test invalid payloads."""
        serializer = JSONSerializer()

        with pytest.raises(SerializationError):
            serializer.normalize(b"{not json")
        with pytest.raises(SerializationError):
            serializer.normalize(b"\xff\xfe")


class TestMsgPackSerializer:
    """Tests for MsgPackSerializer."""

    def test_normalize(self):
        """Test canonical re-encoding."""
        serializer = MsgPackSerializer()
        body = msgpack.packb({"name": "Zul"}, use_bin_type=True)

        assert serializer.deserialize(serializer.normalize(body)) == {"name": "Zul"}

    def test_invalid(self):
        """Test truncated payload."""
        with pytest.raises(SerializationError):
            MsgPackSerializer().deserialize(b"\x92\x01")


class TestRawSerializer:
    """Tests for RawSerializer."""

    def test_passthrough(self):
        """Test bodies are kept verbatim."""
        body = b"  anything \x00"
        assert RawSerializer().normalize(body) == body


class TestRegistry:
    """Tests for get_serializer."""

    def test_lookup(self):
        """Test lookup by format name."""
        assert get_serializer().format_name == "json"
        assert get_serializer("msgpack").media_type == "application/msgpack"
        assert get_serializer("raw").format_name == "raw"

    def test_unknown(self):
        """Test unknown format."""
        with pytest.raises(KeyError):
            get_serializer("xml")
