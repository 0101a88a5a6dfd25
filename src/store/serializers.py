"""Payload serializers for versioned record families.

A serializer turns a family's in-memory value into the bytes stored in
the record envelope and back. Content is raw text; schemas are JSON
Schema documents.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Protocol, TypeVar

from core.errors import ErrorCode
from core.result import Result, err, ok

T = TypeVar("T")


class PayloadSerializer(Protocol[T]):
    """Capability converting one payload family to and from bytes."""

    def serialize(self, value: T) -> Result[bytes]:
        """Encode value into bytes."""
        ...

    def deserialize(self, data: bytes) -> Result[T]:
        """Decode bytes into a value."""
        ...


class ContentSerializer:
    """UTF-8 text serializer for page content."""

    def serialize(self, value: str) -> Result[bytes]:
        if not isinstance(value, str):
            return err(
                ErrorCode.SERIALIZATION_ERROR,
                f"Content must be a string, got {type(value).__name__}",
            )
        return ok(value.encode("utf-8"))

    def deserialize(self, data: bytes) -> Result[str]:
        try:
            return ok(data.decode("utf-8"))
        except UnicodeDecodeError as error:
            return err(ErrorCode.SERIALIZATION_ERROR, f"Content is not valid UTF-8: {error}", error)


class SchemaSerializer:
    """Canonical JSON serializer for JSON Schema documents.

    Accepts a mapping, or any object exposing ``model_json_schema()``
    such as a pydantic model class, which is converted first.
    """

    def serialize(self, value: Any) -> Result[bytes]:
        document = _schema_document(value)
        if not isinstance(document, Mapping):
            return err(
                ErrorCode.SERIALIZATION_ERROR,
                f"Schema must be a JSON object, got {type(document).__name__}",
            )
        try:
            encoded = json.dumps(document, sort_keys=True, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as error:
            return err(ErrorCode.SERIALIZATION_ERROR, f"Schema is not JSON-serializable: {error}", error)
        return ok(encoded.encode("utf-8"))

    def deserialize(self, data: bytes) -> Result[dict[str, Any]]:
        try:
            document = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as error:
            return err(ErrorCode.SERIALIZATION_ERROR, f"Stored schema is not valid JSON: {error}", error)
        if not isinstance(document, dict):
            return err(ErrorCode.SERIALIZATION_ERROR, "Stored schema must be a JSON object")
        return ok(document)


def _schema_document(value: Any) -> Any:
    to_json_schema = getattr(value, "model_json_schema", None)
    if callable(to_json_schema):
        return to_json_schema()
    return value


default_content_serializer = ContentSerializer()
default_schema_serializer = SchemaSerializer()
