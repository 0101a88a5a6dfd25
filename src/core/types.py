"""Shared typed models.

This module defines immutable data models used by the bucket adapters,
the versioned record store, and the family storage services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Literal, Mapping, TypeVar

T = TypeVar("T")

ResponseStatus = Literal["pending", "accepted", "rejected"]


@dataclass(frozen=True)
class ObjectInfo:
    """Bucket object listing entry.

    Attributes:
        key: Full bucket key.
        size: Stored payload size in bytes.
        etag: Opaque entity tag.
        created_at: UTC upload timestamp.
        metadata: Custom string metadata stored with the object.
    """

    key: str
    size: int
    etag: str
    created_at: datetime
    metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredObject:
    """Bucket object body with its listing info."""

    info: ObjectInfo
    data: bytes


@dataclass(frozen=True)
class VersionDescriptor:
    """Outcome of writing a new version."""

    version: int
    key: str
    created_at: datetime


@dataclass(frozen=True)
class VersionInfo:
    """Listing entry for one stored version."""

    version: int
    key: str
    size: int
    etag: str
    created_at: datetime


@dataclass(frozen=True)
class EntitySummary:
    """One resource under a tenant with its current version."""

    resource_id: str
    current_version: int


@dataclass(frozen=True)
class RecordMetadata:
    """Metadata envelope of a versioned record.

    Attributes:
        version: Positive version number.
        guild_id: Tenant identifier.
        resource_id: Page or form identifier.
        created_at: UTC write timestamp.
        size: Stored blob size in bytes.
        etag: Opaque entity tag from the bucket.
        fields: Domain-specific metadata such as title or description.
    """

    version: int
    guild_id: str
    resource_id: str
    created_at: datetime
    size: int
    etag: str
    fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredVersion(Generic[T]):
    """Deserialized payload and metadata for one version."""

    payload: T
    metadata: RecordMetadata


@dataclass(frozen=True)
class PutContentInput:
    """Content write request."""

    guild_id: str
    page_id: str
    content: str
    title: str | None = None
    description: str | None = None
    author_id: str | None = None


@dataclass(frozen=True)
class ContentMetadata:
    """Metadata returned with stored page content."""

    version: int
    guild_id: str
    page_id: str
    created_at: datetime
    size: int
    etag: str
    title: str | None = None
    description: str | None = None
    author_id: str | None = None


@dataclass(frozen=True)
class StoredContent:
    """Page content with its metadata."""

    content: str
    metadata: ContentMetadata


@dataclass(frozen=True)
class PageSummary:
    """Page listing entry with its current version."""

    page_id: str
    current_version: int


@dataclass(frozen=True)
class SchemaMetadata:
    """Metadata returned with a stored form schema."""

    version: int
    guild_id: str
    form_id: str
    created_at: datetime
    size: int
    etag: str
    description: str | None = None


@dataclass(frozen=True)
class StoredSchema:
    """JSON Schema document with its metadata."""

    schema: dict[str, Any]
    metadata: SchemaMetadata


@dataclass(frozen=True)
class FormSummary:
    """Form listing entry with its current schema version."""

    form_id: str
    current_version: int


@dataclass(frozen=True)
class FormResponse:
    """Form submission with a review lifecycle.

    Attributes:
        id: Caller-supplied response identifier.
        form_id: Form identifier.
        guild_id: Tenant identifier.
        schema_version: Schema version the response was validated against.
        data: Submitted field values.
        status: Review status.
        created_at: UTC creation timestamp.
        updated_at: UTC timestamp of the last change.
        submitter_id: Optional submitting user.
        reviewer_id: Optional reviewing user.
        review_notes: Optional reviewer notes.
    """

    id: str
    form_id: str
    guild_id: str
    schema_version: int
    data: Mapping[str, Any]
    status: ResponseStatus
    created_at: datetime
    updated_at: datetime
    submitter_id: str | None = None
    reviewer_id: str | None = None
    review_notes: str | None = None


@dataclass(frozen=True)
class CreateResponseInput:
    """Response creation request."""

    id: str
    form_id: str
    guild_id: str
    schema_version: int
    data: Mapping[str, Any]
    submitter_id: str | None = None


@dataclass(frozen=True)
class UpdateStatusInput:
    """Response status transition request."""

    guild_id: str
    form_id: str
    response_id: str
    status: ResponseStatus
    reviewer_id: str | None = None
    review_notes: str | None = None


@dataclass(frozen=True)
class ListResponsesOptions:
    """Response listing filters."""

    status: ResponseStatus | None = None
    limit: int | None = None


@dataclass(frozen=True)
class ResponsePage:
    """One page of listed responses."""

    items: tuple[FormResponse, ...]
    has_more: bool
