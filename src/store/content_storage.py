"""Versioned page content storage.

Each ``put_content`` creates a new immutable version of a page. The
current content of a page is its highest stored version.
"""

from __future__ import annotations

from core.config import StorageConfig
from core.constants import CONTENT_NAMESPACE
from core.errors import ErrorCode
from core.result import Result, ok
from core.types import (
    ContentMetadata,
    PageSummary,
    PutContentInput,
    StoredContent,
    StoredVersion,
    VersionDescriptor,
    VersionInfo,
)
from store.bucket import Bucket
from store.serializers import PayloadSerializer, default_content_serializer
from store.versioned_store import VersionedRecordStore


class ContentStorageService:
    """Page content service backed by the versioned record store."""

    def __init__(
        self,
        bucket: Bucket,
        config: StorageConfig | None = None,
        serializer: PayloadSerializer[str] | None = None,
    ) -> None:
        self._records: VersionedRecordStore[str] = VersionedRecordStore(
            bucket,
            serializer or default_content_serializer,
            namespace=CONTENT_NAMESPACE,
            not_found_code=ErrorCode.CONTENT_NOT_FOUND,
            resource_field="pageId",
            config=config,
        )

    async def put_content(self, request: PutContentInput) -> Result[VersionDescriptor]:
        """Store content as the next version of a page."""
        metadata = {
            "title": request.title,
            "description": request.description,
            "authorId": request.author_id,
        }
        return await self._records.put(request.guild_id, request.page_id, request.content, metadata)

    async def get_content(self, guild_id: str, page_id: str, version: int) -> Result[StoredContent]:
        """Read one version of a page."""
        result = await self._records.get(guild_id, page_id, version)
        if not result.ok:
            return result
        return ok(_to_stored_content(result.value))

    async def get_current_content(self, guild_id: str, page_id: str) -> Result[StoredContent]:
        """Read the latest version of a page, or ``CONTENT_NOT_FOUND``."""
        result = await self._records.get_current(guild_id, page_id)
        if not result.ok:
            return result
        return ok(_to_stored_content(result.value))

    async def list_versions(self, guild_id: str, page_id: str) -> Result[list[VersionInfo]]:
        return await self._records.list_versions(guild_id, page_id)

    async def list_pages(self, guild_id: str) -> Result[list[PageSummary]]:
        """List pages of a guild with their current versions."""
        result = await self._records.list_entities(guild_id)
        if not result.ok:
            return result
        return ok(
            [
                PageSummary(page_id=entity.resource_id, current_version=entity.current_version)
                for entity in result.value
            ]
        )

    async def exists(self, guild_id: str, page_id: str) -> Result[bool]:
        return await self._records.exists(guild_id, page_id)

    async def version_exists(self, guild_id: str, page_id: str, version: int) -> Result[bool]:
        return await self._records.version_exists(guild_id, page_id, version)

    async def delete_version(self, guild_id: str, page_id: str, version: int) -> Result[None]:
        return await self._records.delete_version(guild_id, page_id, version)

    async def delete_all_versions(self, guild_id: str, page_id: str) -> Result[int]:
        return await self._records.delete_all_versions(guild_id, page_id)


def create_content_storage_service(
    bucket: Bucket, config: StorageConfig | None = None
) -> ContentStorageService:
    """Build a content service over a bucket."""
    return ContentStorageService(bucket, config)


def _to_stored_content(stored: StoredVersion[str]) -> StoredContent:
    metadata = stored.metadata
    return StoredContent(
        content=stored.payload,
        metadata=ContentMetadata(
            version=metadata.version,
            guild_id=metadata.guild_id,
            page_id=metadata.resource_id,
            created_at=metadata.created_at,
            size=metadata.size,
            etag=metadata.etag,
            title=metadata.fields.get("title"),
            description=metadata.fields.get("description"),
            author_id=metadata.fields.get("authorId"),
        ),
    )
