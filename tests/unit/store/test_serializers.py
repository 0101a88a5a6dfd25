"""Unit tests for payload serializers."""

from __future__ import annotations

import pytest

from core.errors import ErrorCode
from store.serializers import ContentSerializer, SchemaSerializer


@pytest.mark.parametrize("content", ["# Hello World\n\nThis is MDX content.", "", "héllo ✓"])
def test_content_roundtrip(content: str) -> None:
    """Content should survive serialization unchanged."""
    serializer = ContentSerializer()

    encoded = serializer.serialize(content)
    decoded = serializer.deserialize(encoded.unwrap())

    assert decoded.unwrap() == content


def test_content_rejects_non_string() -> None:
    """Content serializer should reject non-text values."""
    result = ContentSerializer().serialize(42)  # type: ignore[arg-type]

    assert not result.ok and result.error.code == ErrorCode.SERIALIZATION_ERROR


def test_content_rejects_invalid_utf8() -> None:
    """Content deserialization should fail for non-UTF-8 bytes."""
    result = ContentSerializer().deserialize(b"\xff\xfe")

    assert not result.ok and result.error.code == ErrorCode.SERIALIZATION_ERROR


def test_schema_roundtrip() -> None:
    """Schema documents should survive serialization unchanged."""
    schema = {
        "type": "object",
        "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
        "required": ["name"],
    }
    serializer = SchemaSerializer()

    decoded = serializer.deserialize(serializer.serialize(schema).unwrap())

    assert decoded.unwrap() == schema


def test_schema_roundtrip_empty_document() -> None:
    """An empty schema object should roundtrip."""
    serializer = SchemaSerializer()

    assert serializer.deserialize(serializer.serialize({}).unwrap()).unwrap() == {}


def test_schema_accepts_model_json_schema_objects() -> None:
    """Objects exposing model_json_schema should be converted first."""

    class SignupForm:
        @classmethod
        def model_json_schema(cls) -> dict[str, object]:
            return {"type": "object", "properties": {"email": {"type": "string"}}}

    serializer = SchemaSerializer()

    decoded = serializer.deserialize(serializer.serialize(SignupForm).unwrap())

    assert decoded.unwrap()["properties"] == {"email": {"type": "string"}}


@pytest.mark.parametrize("value", [["not", "an", "object"], {"bad": {1, 2}}, {"nan": float("nan")}])
def test_schema_rejects_non_json_documents(value: object) -> None:
    """Non-object or non-JSON schemas should fail with a serialization error."""
    result = SchemaSerializer().serialize(value)

    assert not result.ok and result.error.code == ErrorCode.SERIALIZATION_ERROR


def test_schema_rejects_stored_array() -> None:
    """Stored schemas must decode to a JSON object."""
    result = SchemaSerializer().deserialize(b"[1, 2]")

    assert not result.ok and result.error.code == ErrorCode.SERIALIZATION_ERROR
