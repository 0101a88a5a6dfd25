"""Shared JSON serialization for form response payloads.

This module centralizes FormResponse JSON serialization logic.
Stored documents use camelCase field names.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from core.constants import RESPONSE_STATUSES
from core.types import FormResponse


def response_to_payload(response: FormResponse) -> dict[str, object]:
    """Serialize FormResponse into JSON-safe payload.

    Args:
        response: Response instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "id": response.id,
        "formId": response.form_id,
        "guildId": response.guild_id,
        "schemaVersion": response.schema_version,
        "data": dict(response.data),
        "status": response.status,
        "submitterId": response.submitter_id,
        "reviewerId": response.reviewer_id,
        "reviewNotes": response.review_notes,
        "createdAt": response.created_at.isoformat(),
        "updatedAt": response.updated_at.isoformat(),
    }


def response_from_payload(payload: dict[str, Any]) -> FormResponse:
    """Deserialize JSON payload into FormResponse.

    Args:
        payload: Serialized response payload.

    Returns:
        Parsed FormResponse.

    Raises:
        ValueError: If the payload is missing fields, has non-object data or
            carries an unknown status.
    """
    try:
        status = str(payload["status"])
        data = payload["data"]
        if not isinstance(data, dict):
            raise ValueError(f"Invalid response data: expected an object, got {type(data).__name__}")
        response = FormResponse(
            id=str(payload["id"]),
            form_id=str(payload["formId"]),
            guild_id=str(payload["guildId"]),
            schema_version=int(payload["schemaVersion"]),
            data=data,
            status=status,  # type: ignore[arg-type]
            created_at=_parse_timestamp(payload["createdAt"]),
            updated_at=_parse_timestamp(payload["updatedAt"]),
            submitter_id=_optional_str(payload.get("submitterId")),
            reviewer_id=_optional_str(payload.get("reviewerId")),
            review_notes=_optional_str(payload.get("reviewNotes")),
        )
    except (KeyError, TypeError) as error:
        raise ValueError(f"Invalid response payload: {error}") from error
    if status not in RESPONSE_STATUSES:
        raise ValueError(f"Invalid response status: {status!r}")
    return response


def encode_response(response: FormResponse) -> bytes:
    """Render a response as the stored JSON document.

    Raises:
        TypeError: If response data is not JSON-serializable.
        ValueError: If response data contains non-finite floats.
    """
    return json.dumps(response_to_payload(response), sort_keys=True, allow_nan=False).encode("utf-8")


def decode_response(data: bytes) -> FormResponse:
    """Parse a stored JSON document into a response.

    Raises:
        ValueError: If the document is not a valid response.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as error:
        raise ValueError(f"Response document is not UTF-8: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError("Response document must be a JSON object")
    return response_from_payload(payload)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp, reading offset-less values as UTC."""
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
