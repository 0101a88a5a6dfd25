"""Python SDK entry point for form storage.

This module wires a bucket adapter from configuration and exposes the
content, schema and response services that share it.
"""

from __future__ import annotations

from core.config import FormStoreConfig
from core.errors import FormStoreConfigError
from store.bucket import Bucket
from store.content_storage import ContentStorageService
from store.local_bucket import LocalBucket
from store.memory_bucket import MemoryBucket
from store.response_storage import ResponseStorageService
from store.s3_bucket import S3Bucket
from store.schema_storage import SchemaStorageService


class FormStoreClient:
    """Primary SDK entry point bundling the storage services."""

    def __init__(self, config: FormStoreConfig | None = None, bucket: Bucket | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            bucket: Optional bucket overriding the configured backend.
        """
        self._config = config or FormStoreConfig.from_env()
        self._bucket = bucket or build_bucket(self._config)
        storage_config = self._config.storage_config()
        self.content = ContentStorageService(self._bucket, storage_config)
        self.schemas = SchemaStorageService(self._bucket, storage_config)
        self.responses = ResponseStorageService(self._bucket, storage_config)

    @property
    def config(self) -> FormStoreConfig:
        return self._config

    @property
    def bucket(self) -> Bucket:
        return self._bucket


def build_bucket(config: FormStoreConfig) -> Bucket:
    """Create the bucket adapter selected by configuration.

    Args:
        config: Runtime configuration.

    Returns:
        Bucket adapter instance.

    Raises:
        FormStoreConfigError: If the backend name is unknown.
        BucketError: If the S3 backend lacks a bucket name.
        FormStoreDependencyError: If boto3 is missing for the S3 backend.
    """
    if config.backend == "memory":
        return MemoryBucket()
    if config.backend == "local":
        return LocalBucket(config.data_root)
    if config.backend == "s3":
        return S3Bucket.from_config(config)
    raise FormStoreConfigError(f"Unsupported bucket backend: {config.backend}")
