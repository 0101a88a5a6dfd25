"""Public SDK surface for Form Store.

This module provides a stable import path for library users.
It re-exports the client, services, adapters and typed models.
"""

from __future__ import annotations

from core.config import FormStoreConfig, StorageConfig
from core.errors import ErrorCode, FormStoreError
from core.result import Err, Ok, Result, StorageError
from core.types import (
    ContentMetadata,
    CreateResponseInput,
    FormResponse,
    FormSummary,
    ListResponsesOptions,
    PageSummary,
    PutContentInput,
    ResponsePage,
    SchemaMetadata,
    StoredContent,
    StoredSchema,
    UpdateStatusInput,
    VersionDescriptor,
    VersionInfo,
)
from store.client import FormStoreClient, build_bucket
from store.content_storage import ContentStorageService, create_content_storage_service
from store.local_bucket import LocalBucket
from store.memory_bucket import MemoryBucket
from store.response_storage import ResponseStorageService, create_response_storage_service
from store.s3_bucket import S3Bucket
from store.schema_storage import SchemaStorageService, create_schema_storage_service
from store.serializers import ContentSerializer, SchemaSerializer
from store.versioned_store import VersionedRecordStore

__all__ = [
    "ContentMetadata",
    "ContentSerializer",
    "ContentStorageService",
    "CreateResponseInput",
    "Err",
    "ErrorCode",
    "FormResponse",
    "FormStoreClient",
    "FormStoreConfig",
    "FormStoreError",
    "FormSummary",
    "ListResponsesOptions",
    "LocalBucket",
    "MemoryBucket",
    "Ok",
    "PageSummary",
    "PutContentInput",
    "ResponsePage",
    "ResponseStorageService",
    "Result",
    "S3Bucket",
    "SchemaMetadata",
    "SchemaSerializer",
    "SchemaStorageService",
    "StorageConfig",
    "StorageError",
    "StoredContent",
    "StoredSchema",
    "UpdateStatusInput",
    "VersionDescriptor",
    "VersionInfo",
    "VersionedRecordStore",
    "build_bucket",
    "create_content_storage_service",
    "create_response_storage_service",
    "create_schema_storage_service",
]
