"""Append-only versioned record store.

This module persists immutable, monotonically numbered versions of a
resource on top of a bucket. It is generic over the payload type and
delegates payload encoding to a family serializer.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, TypeVar
from urllib.parse import quote

from core.config import StorageConfig
from core.constants import KEY_SEPARATOR
from core.errors import BucketConflictError, ErrorCode, KeyConstructionError
from core.logging_config import get_logger
from core.result import Result, err, ok
from core.types import (
    EntitySummary,
    ObjectInfo,
    RecordMetadata,
    StoredVersion,
    VersionDescriptor,
    VersionInfo,
)
from store.bucket import Bucket
from store.fault_boundary import result_boundary
from store.key_scheme import (
    parse_child_segment,
    parse_version,
    resource_prefix,
    tenant_prefix,
    versioned_key,
)
from store.serializers import PayloadSerializer
from store.version_resolver import current_version, next_version

T = TypeVar("T")

_LOGGER = get_logger(__name__)
_RESERVED_METADATA = ("version", "guildId", "resourceId", "createdAt")


class VersionedRecordStore(Generic[T]):
    """Versioned record engine shared by the content and schema services.

    Each ``put`` lists existing versions, resolves ``max + 1`` and writes
    under that key. Without conditional writes two concurrent puts to
    one resource may resolve the same number; the later write wins.
    """

    def __init__(
        self,
        bucket: Bucket,
        serializer: PayloadSerializer[T],
        namespace: str,
        not_found_code: ErrorCode,
        resource_field: str = "resourceId",
        config: StorageConfig | None = None,
    ) -> None:
        """Create store.

        Args:
            bucket: Underlying blob bucket.
            serializer: Payload family serializer.
            namespace: Key namespace of the record family.
            not_found_code: Code returned when a resource has no versions.
            resource_field: Resource id name used in validation messages.
            config: Storage settings; defaults when omitted.
        """
        self._bucket = bucket
        self._serializer = serializer
        self._namespace = namespace
        self._not_found_code = not_found_code
        self._resource_field = resource_field
        self._config = config or StorageConfig()

    @property
    def config(self) -> StorageConfig:
        return self._config

    @result_boundary("put")
    async def put(
        self,
        guild_id: str,
        resource_id: str,
        payload: T,
        metadata: Mapping[str, str | None] | None = None,
    ) -> Result[VersionDescriptor]:
        """Write payload as the next version of a resource.

        Args:
            guild_id: Tenant identifier.
            resource_id: Resource identifier.
            payload: Value to serialize.
            metadata: Optional domain metadata; None values are dropped.

        Returns:
            Descriptor of the written version.
        """
        prefix = self._resource_prefix(guild_id, resource_id)
        encoded = self._serializer.serialize(payload)
        if not encoded.ok:
            return encoded
        try:
            payload_text = encoded.value.decode("utf-8")
        except UnicodeDecodeError as error:
            return err(ErrorCode.SERIALIZATION_ERROR, f"Serialized payload is not UTF-8: {error}", error)
        fields = _clean_fields(metadata)
        versions = [version for version, _ in await self._list_version_infos(prefix)]
        version = next_version(versions)
        attempts = self._config.max_write_attempts if self._config.conditional_writes else 1
        for attempt in range(1, attempts + 1):
            created_at = datetime.now(timezone.utc)
            key = self._versioned_key(guild_id, resource_id, version)
            envelope = _build_envelope(payload_text, version, guild_id, resource_id, created_at, fields)
            try:
                await self._bucket.put(
                    key,
                    envelope,
                    _bucket_metadata(version, guild_id, resource_id, created_at),
                    if_absent=self._config.conditional_writes,
                )
            except BucketConflictError:
                _LOGGER.warning(
                    "version_write_conflict",
                    namespace=self._namespace,
                    key=key,
                    attempt=attempt,
                )
                version += 1
                continue
            _LOGGER.info(
                "version_written",
                namespace=self._namespace,
                guild_id=guild_id,
                resource_id=resource_id,
                version=version,
                size=len(envelope),
            )
            return ok(VersionDescriptor(version=version, key=key, created_at=created_at))
        return err(
            ErrorCode.VERSION_CONFLICT,
            f"Could not assign a version for {guild_id}/{resource_id} "
            f"after {attempts} conditional write attempts",
        )

    @result_boundary("get")
    async def get(self, guild_id: str, resource_id: str, version: int) -> Result[StoredVersion[T]]:
        """Read one version of a resource.

        Returns:
            Payload and metadata, or ``VERSION_NOT_FOUND``.
        """
        key = self._versioned_key(guild_id, resource_id, version)
        stored = await self._bucket.get(key)
        if stored is None:
            return err(
                ErrorCode.VERSION_NOT_FOUND,
                f"Version {version} not found for {guild_id}/{resource_id}",
            )
        return self._decode(stored.data, stored.info, guild_id, resource_id, version)

    @result_boundary("get_current")
    async def get_current(self, guild_id: str, resource_id: str) -> Result[StoredVersion[T]]:
        """Read the highest existing version of a resource."""
        prefix = self._resource_prefix(guild_id, resource_id)
        versions = [version for version, _ in await self._list_version_infos(prefix)]
        latest = current_version(versions)
        if latest is None:
            return err(self._not_found_code, f"No versions exist for {guild_id}/{resource_id}")
        return await self.get(guild_id, resource_id, latest)

    @result_boundary("list_versions")
    async def list_versions(self, guild_id: str, resource_id: str) -> Result[list[VersionInfo]]:
        """List versions in ascending version order."""
        prefix = self._resource_prefix(guild_id, resource_id)
        return ok(
            [
                VersionInfo(
                    version=version,
                    key=info.key,
                    size=info.size,
                    etag=info.etag,
                    created_at=info.created_at,
                )
                for version, info in await self._list_version_infos(prefix)
            ]
        )

    @result_boundary("list_entities")
    async def list_entities(self, guild_id: str) -> Result[list[EntitySummary]]:
        """List every resource of a tenant with its current version."""
        prefix = tenant_prefix(self._namespace, guild_id, self._config.path_prefix)
        current: dict[str, int] = {}
        for info in await self._bucket.list(prefix):
            try:
                resource_id = parse_child_segment(info.key, prefix)
                file_name = info.key[len(prefix) + len(resource_id) + 1:]
                if KEY_SEPARATOR in file_name:
                    raise KeyConstructionError(f"Nested key below resource: {info.key!r}")
                version = parse_version(file_name)
            except KeyConstructionError:
                _LOGGER.warning("unrecognized_key_skipped", key=info.key)
                continue
            if version > current.get(resource_id, 0):
                current[resource_id] = version
        return ok(
            [
                EntitySummary(resource_id=resource_id, current_version=version)
                for resource_id, version in sorted(current.items())
            ]
        )

    @result_boundary("exists")
    async def exists(self, guild_id: str, resource_id: str) -> Result[bool]:
        """Return whether a resource has at least one version."""
        prefix = self._resource_prefix(guild_id, resource_id)
        return ok(bool(await self._list_version_infos(prefix)))

    @result_boundary("version_exists")
    async def version_exists(self, guild_id: str, resource_id: str, version: int) -> Result[bool]:
        """Return whether one version of a resource exists."""
        key = self._versioned_key(guild_id, resource_id, version)
        return ok(await self._bucket.head(key) is not None)

    @result_boundary("delete_version")
    async def delete_version(self, guild_id: str, resource_id: str, version: int) -> Result[None]:
        """Delete one version; deleting a missing version succeeds."""
        key = self._versioned_key(guild_id, resource_id, version)
        await self._bucket.delete(key)
        _LOGGER.info(
            "version_deleted",
            namespace=self._namespace,
            guild_id=guild_id,
            resource_id=resource_id,
            version=version,
        )
        return ok(None)

    @result_boundary("delete_all_versions")
    async def delete_all_versions(self, guild_id: str, resource_id: str) -> Result[int]:
        """Delete every version of a resource.

        Returns:
            Number of versions removed.
        """
        prefix = self._resource_prefix(guild_id, resource_id)
        version_infos = await self._list_version_infos(prefix)
        for _, info in version_infos:
            await self._bucket.delete(info.key)
        _LOGGER.info(
            "versions_deleted",
            namespace=self._namespace,
            guild_id=guild_id,
            resource_id=resource_id,
            count=len(version_infos),
        )
        return ok(len(version_infos))

    async def _list_version_infos(self, prefix: str) -> list[tuple[int, ObjectInfo]]:
        """List direct version objects under a resource prefix, ascending."""
        version_infos: list[tuple[int, ObjectInfo]] = []
        for info in await self._bucket.list(prefix):
            relative_key = info.key[len(prefix):]
            if "/" in relative_key:
                continue
            try:
                version_infos.append((parse_version(relative_key), info))
            except KeyConstructionError:
                _LOGGER.warning("unrecognized_key_skipped", key=info.key)
        return sorted(version_infos, key=lambda item: item[0])

    def _decode(
        self,
        data: bytes,
        info: ObjectInfo,
        guild_id: str,
        resource_id: str,
        version: int,
    ) -> Result[StoredVersion[T]]:
        try:
            envelope = json.loads(data.decode("utf-8"))
            payload_text = envelope["payload"]
            envelope_metadata = dict(envelope["metadata"])
            created_at = datetime.fromisoformat(str(envelope_metadata["createdAt"]))
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError) as error:
            return err(
                ErrorCode.SERIALIZATION_ERROR,
                f"Stored record at {info.key} is corrupt: {error}",
                error,
            )
        if not isinstance(payload_text, str):
            return err(ErrorCode.SERIALIZATION_ERROR, f"Stored record at {info.key} has no text payload")
        decoded = self._serializer.deserialize(payload_text.encode("utf-8"))
        if not decoded.ok:
            return decoded
        fields = {
            str(name): str(value)
            for name, value in envelope_metadata.items()
            if name not in _RESERVED_METADATA and value is not None
        }
        metadata = RecordMetadata(
            version=version,
            guild_id=guild_id,
            resource_id=resource_id,
            created_at=created_at,
            size=info.size,
            etag=info.etag,
            fields=fields,
        )
        return ok(StoredVersion(payload=decoded.value, metadata=metadata))

    def _resource_prefix(self, guild_id: str, resource_id: str) -> str:
        return resource_prefix(
            self._namespace,
            guild_id,
            resource_id,
            self._resource_field,
            self._config.path_prefix,
        )

    def _versioned_key(self, guild_id: str, resource_id: str, version: int) -> str:
        return versioned_key(
            self._namespace,
            guild_id,
            resource_id,
            version,
            self._resource_field,
            self._config.path_prefix,
        )


def _clean_fields(metadata: Mapping[str, str | None] | None) -> dict[str, str]:
    if not metadata:
        return {}
    return {
        str(name): str(value)
        for name, value in metadata.items()
        if value is not None and name not in _RESERVED_METADATA
    }


def _build_envelope(
    payload_text: str,
    version: int,
    guild_id: str,
    resource_id: str,
    created_at: datetime,
    fields: dict[str, str],
) -> bytes:
    """Render the stored JSON document for one version."""
    document: dict[str, Any] = {
        "payload": payload_text,
        "metadata": {
            "version": version,
            "guildId": guild_id,
            "resourceId": resource_id,
            "createdAt": created_at.isoformat(),
            **fields,
        },
    }
    return json.dumps(document, sort_keys=True).encode("utf-8")


def _bucket_metadata(
    version: int,
    guild_id: str,
    resource_id: str,
    created_at: datetime,
) -> dict[str, str]:
    """Identity fields mirrored into bucket object metadata.

    Ids are percent-encoded because S3 user metadata must be ASCII.
    """
    return {
        "version": str(version),
        "guildId": quote(guild_id, safe=""),
        "resourceId": quote(resource_id, safe=""),
        "createdAt": created_at.isoformat(),
    }
