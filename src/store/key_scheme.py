"""Bucket key construction and parsing.

Keys follow ``[prefix/]namespace/guild/resource/vN.json`` for versioned
records and ``[prefix/]namespace/guild/form/id.json`` for responses.
All identity validation happens here, before any bucket IO.
"""

from __future__ import annotations

import re

from core.constants import KEY_SEPARATOR, RECORD_KEY_SUFFIX, VERSION_KEY_PREFIX
from core.errors import KeyConstructionError

_VERSION_FILE_PATTERN = re.compile(r"v([1-9][0-9]*)\.json")


def validate_segment(value: object, field_name: str) -> str:
    """Validate one identity segment.

    Args:
        value: Candidate identifier.
        field_name: Name used in the error message.

    Returns:
        The validated identifier.

    Raises:
        KeyConstructionError: If the value is empty, non-printable or contains
            the path separator.
    """
    if not isinstance(value, str) or not value:
        raise KeyConstructionError(f"{field_name} must be a non-empty string")
    if KEY_SEPARATOR in value:
        raise KeyConstructionError(f"{field_name} must not contain '{KEY_SEPARATOR}'")
    if not value.isprintable() or value in (".", ".."):
        raise KeyConstructionError(f"{field_name} contains invalid characters: {value!r}")
    return value


def validate_version(version: object) -> int:
    """Validate a version number.

    Raises:
        KeyConstructionError: If version is not a positive integer.
    """
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise KeyConstructionError(f"version must be a positive integer, got {version!r}")
    return version


def tenant_prefix(namespace: str, guild_id: str, path_prefix: str = "") -> str:
    """Build the listing prefix for all resources of a tenant."""
    segments = [namespace, validate_segment(guild_id, "guildId")]
    return _join(path_prefix, segments) + KEY_SEPARATOR


def resource_prefix(
    namespace: str,
    guild_id: str,
    resource_id: str,
    resource_field: str = "resourceId",
    path_prefix: str = "",
) -> str:
    """Build the listing prefix for all versions or records of one resource."""
    segments = [
        namespace,
        validate_segment(guild_id, "guildId"),
        validate_segment(resource_id, resource_field),
    ]
    return _join(path_prefix, segments) + KEY_SEPARATOR


def versioned_key(
    namespace: str,
    guild_id: str,
    resource_id: str,
    version: int,
    resource_field: str = "resourceId",
    path_prefix: str = "",
) -> str:
    """Build the key of one version of a resource.

    Args:
        namespace: Record family namespace.
        guild_id: Tenant identifier.
        resource_id: Page or form identifier.
        version: Positive version number.
        resource_field: Field name reported when resource_id is invalid.
        path_prefix: Optional deployment prefix.

    Returns:
        Bucket key string.

    Raises:
        KeyConstructionError: If any identity part is invalid.
    """
    prefix = resource_prefix(namespace, guild_id, resource_id, resource_field, path_prefix)
    return f"{prefix}{VERSION_KEY_PREFIX}{validate_version(version)}{RECORD_KEY_SUFFIX}"


def record_key(
    namespace: str,
    guild_id: str,
    form_id: str,
    record_id: str,
    path_prefix: str = "",
) -> str:
    """Build the key of a single-value status record.

    Raises:
        KeyConstructionError: If any identity part is invalid.
    """
    prefix = resource_prefix(namespace, guild_id, form_id, "formId", path_prefix)
    return f"{prefix}{validate_segment(record_id, 'id')}{RECORD_KEY_SUFFIX}"


def parse_version(key: str) -> int:
    """Recover the version number encoded in a versioned key.

    Args:
        key: Full or relative bucket key ending in ``vN.json``.

    Returns:
        Encoded version number.

    Raises:
        KeyConstructionError: If the final segment is not ``vN.json``.
    """
    file_name = key.rsplit(KEY_SEPARATOR, 1)[-1]
    match = _VERSION_FILE_PATTERN.fullmatch(file_name)
    if match is None:
        raise KeyConstructionError(f"Malformed version key: {key!r}")
    return int(match.group(1))


def parse_child_segment(key: str, parent_prefix: str) -> str:
    """Return the first path segment of ``key`` below ``parent_prefix``.

    Raises:
        KeyConstructionError: If key is not nested under the prefix.
    """
    if not key.startswith(parent_prefix):
        raise KeyConstructionError(f"Key {key!r} is not under prefix {parent_prefix!r}")
    remainder = key[len(parent_prefix):]
    segment, separator, _ = remainder.partition(KEY_SEPARATOR)
    if not segment or not separator:
        raise KeyConstructionError(f"Key {key!r} has no child segment under {parent_prefix!r}")
    return segment


def parse_record_id(key: str) -> str:
    """Recover the record id from a status record key.

    Raises:
        KeyConstructionError: If the key does not end in ``.json``.
    """
    file_name = key.rsplit(KEY_SEPARATOR, 1)[-1]
    if not file_name.endswith(RECORD_KEY_SUFFIX) or file_name == RECORD_KEY_SUFFIX:
        raise KeyConstructionError(f"Malformed record key: {key!r}")
    return file_name[: -len(RECORD_KEY_SUFFIX)]


def _join(path_prefix: str, segments: list[str]) -> str:
    prefix = path_prefix.strip(KEY_SEPARATOR)
    if prefix:
        segments = [prefix, *segments]
    return KEY_SEPARATOR.join(segments)
