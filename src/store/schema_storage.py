"""Versioned form schema storage.

Schemas are JSON Schema documents. Every ``put_schema`` creates a new
immutable version so responses can reference the exact schema version
they were validated against.
"""

from __future__ import annotations

from typing import Any

from core.config import StorageConfig
from core.constants import SCHEMA_NAMESPACE
from core.errors import ErrorCode
from core.result import Result, ok
from core.types import (
    FormSummary,
    SchemaMetadata,
    StoredSchema,
    StoredVersion,
    VersionDescriptor,
    VersionInfo,
)
from store.bucket import Bucket
from store.serializers import PayloadSerializer, default_schema_serializer
from store.versioned_store import VersionedRecordStore


class SchemaStorageService:
    """Form schema service backed by the versioned record store."""

    def __init__(
        self,
        bucket: Bucket,
        config: StorageConfig | None = None,
        serializer: PayloadSerializer[Any] | None = None,
    ) -> None:
        self._records: VersionedRecordStore[Any] = VersionedRecordStore(
            bucket,
            serializer or default_schema_serializer,
            namespace=SCHEMA_NAMESPACE,
            not_found_code=ErrorCode.SCHEMA_NOT_FOUND,
            resource_field="formId",
            config=config,
        )

    async def put_schema(
        self,
        guild_id: str,
        form_id: str,
        schema: Any,
        description: str | None = None,
    ) -> Result[VersionDescriptor]:
        """Store a schema as the next version of a form.

        Args:
            guild_id: Tenant identifier.
            form_id: Form identifier.
            schema: JSON Schema mapping or object exposing ``model_json_schema``.
            description: Optional change description.

        Returns:
            Descriptor of the written version.
        """
        return await self._records.put(guild_id, form_id, schema, {"description": description})

    async def get_schema(self, guild_id: str, form_id: str, version: int) -> Result[StoredSchema]:
        """Read one schema version."""
        result = await self._records.get(guild_id, form_id, version)
        if not result.ok:
            return result
        return ok(_to_stored_schema(result.value))

    async def get_current_schema(self, guild_id: str, form_id: str) -> Result[StoredSchema]:
        """Read the latest schema of a form, or ``SCHEMA_NOT_FOUND``."""
        result = await self._records.get_current(guild_id, form_id)
        if not result.ok:
            return result
        return ok(_to_stored_schema(result.value))

    async def list_versions(self, guild_id: str, form_id: str) -> Result[list[VersionInfo]]:
        return await self._records.list_versions(guild_id, form_id)

    async def list_forms(self, guild_id: str) -> Result[list[FormSummary]]:
        """List forms of a guild with their current schema versions."""
        result = await self._records.list_entities(guild_id)
        if not result.ok:
            return result
        return ok(
            [
                FormSummary(form_id=entity.resource_id, current_version=entity.current_version)
                for entity in result.value
            ]
        )

    async def exists(self, guild_id: str, form_id: str) -> Result[bool]:
        return await self._records.exists(guild_id, form_id)

    async def version_exists(self, guild_id: str, form_id: str, version: int) -> Result[bool]:
        return await self._records.version_exists(guild_id, form_id, version)

    async def delete_version(self, guild_id: str, form_id: str, version: int) -> Result[None]:
        return await self._records.delete_version(guild_id, form_id, version)

    async def delete_all_versions(self, guild_id: str, form_id: str) -> Result[int]:
        return await self._records.delete_all_versions(guild_id, form_id)


def create_schema_storage_service(
    bucket: Bucket, config: StorageConfig | None = None
) -> SchemaStorageService:
    """Build a schema service over a bucket."""
    return SchemaStorageService(bucket, config)


def _to_stored_schema(stored: StoredVersion[Any]) -> StoredSchema:
    metadata = stored.metadata
    return StoredSchema(
        schema=stored.payload,
        metadata=SchemaMetadata(
            version=metadata.version,
            guild_id=metadata.guild_id,
            form_id=metadata.resource_id,
            created_at=metadata.created_at,
            size=metadata.size,
            etag=metadata.etag,
            description=metadata.fields.get("description"),
        ),
    )
