"""S3 bucket adapter.

This module encapsulates boto3 client creation and maps S3 object
operations onto the bucket contract. Blocking boto3 calls run in
worker threads.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Mapping

from core.config import FormStoreConfig
from core.errors import BucketConflictError, BucketError, FormStoreDependencyError
from core.types import ObjectInfo, StoredObject

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")
_PRECONDITION_CODES = ("412", "PreconditionFailed", "ConditionalRequestConflict")


class S3Bucket:
    """Bucket backed by one S3 (or S3-compatible) bucket."""

    def __init__(self, s3_client: Any, bucket_name: str) -> None:
        """Create adapter.

        Args:
            s3_client: Boto3 S3 client.
            bucket_name: Target bucket name.
        """
        self._client = s3_client
        self._bucket_name = bucket_name

    @classmethod
    def from_config(cls, config: FormStoreConfig) -> "S3Bucket":
        """Build adapter from runtime configuration.

        Raises:
            BucketError: If no bucket name is configured.
            FormStoreDependencyError: If boto3 is missing.
        """
        if not config.s3_bucket:
            raise BucketError(
                "S3 backend requires a bucket name. Set FORMSTORE_S3_BUCKET and retry."
            )
        return cls(create_s3_client(config), config.s3_bucket)

    async def put(
        self,
        key: str,
        data: bytes,
        metadata: Mapping[str, str] | None = None,
        *,
        if_absent: bool = False,
    ) -> ObjectInfo:
        return await asyncio.to_thread(self._put_sync, key, data, dict(metadata or {}), if_absent)

    async def get(self, key: str) -> StoredObject | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def head(self, key: str) -> ObjectInfo | None:
        return await asyncio.to_thread(self._head_sync, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)

    async def list(self, prefix: str) -> list[ObjectInfo]:
        return await asyncio.to_thread(self._list_sync, prefix)

    def _put_sync(
        self, key: str, data: bytes, metadata: dict[str, str], if_absent: bool
    ) -> ObjectInfo:
        request: dict[str, Any] = {
            "Bucket": self._bucket_name,
            "Key": key,
            "Body": data,
            "Metadata": metadata,
            "ContentType": "application/json",
        }
        if if_absent:
            request["IfNoneMatch"] = "*"
        try:
            response = self._client.put_object(**request)
        except Exception as error:
            if _client_error_code(error) in _PRECONDITION_CODES:
                raise BucketConflictError(f"Object already exists at {self._uri(key)}") from error
            raise BucketError(f"Failed to write {self._uri(key)}: {error}") from error
        return ObjectInfo(
            key=key,
            size=len(data),
            etag=_strip_etag(response.get("ETag", "")),
            created_at=datetime.now(timezone.utc),
            metadata=metadata,
        )

    def _get_sync(self, key: str) -> StoredObject | None:
        try:
            response = self._client.get_object(Bucket=self._bucket_name, Key=key)
            data = response["Body"].read()
        except Exception as error:
            if _client_error_code(error) in _NOT_FOUND_CODES:
                return None
            raise BucketError(f"Failed to read {self._uri(key)}: {error}") from error
        return StoredObject(info=_info_from_response(key, response, len(data)), data=data)

    def _head_sync(self, key: str) -> ObjectInfo | None:
        try:
            response = self._client.head_object(Bucket=self._bucket_name, Key=key)
        except Exception as error:
            if _client_error_code(error) in _NOT_FOUND_CODES:
                return None
            raise BucketError(f"Failed to inspect {self._uri(key)}: {error}") from error
        return _info_from_response(key, response, int(response.get("ContentLength", 0)))

    def _delete_sync(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket_name, Key=key)
        except Exception as error:
            if _client_error_code(error) in _NOT_FOUND_CODES:
                return
            raise BucketError(f"Failed to delete {self._uri(key)}: {error}") from error

    def _list_sync(self, prefix: str) -> list[ObjectInfo]:
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            pages = paginator.paginate(Bucket=self._bucket_name, Prefix=prefix)
            infos = [
                ObjectInfo(
                    key=str(obj["Key"]),
                    size=int(obj.get("Size", 0)),
                    etag=_strip_etag(obj.get("ETag", "")),
                    created_at=_as_utc(obj.get("LastModified")),
                )
                for page in pages
                for obj in page.get("Contents", [])
            ]
        except Exception as error:
            raise BucketError(f"Failed to list {self._uri(prefix)}: {error}") from error
        return sorted(infos, key=lambda info: info.key)

    def _uri(self, key: str) -> str:
        return f"s3://{self._bucket_name}/{key}"


def create_s3_client(config: FormStoreConfig) -> Any:
    """Create boto3 S3 client.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 S3 client.

    Raises:
        FormStoreDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise FormStoreDependencyError(
            "S3 backend requires boto3, but it is not installed. "
            "Install boto3 to store records in S3 buckets."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    client_kwargs: dict[str, str] = {}
    if config.s3_endpoint_url:
        client_kwargs["endpoint_url"] = config.s3_endpoint_url
    return session.client("s3", **client_kwargs)


def _client_error_code(error: Exception) -> str | None:
    """Extract the S3 error code from a botocore ClientError."""
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return None
    error_payload = response.get("Error", {})
    code = error_payload.get("Code") if isinstance(error_payload, dict) else None
    return str(code) if code is not None else None


def _info_from_response(key: str, response: Mapping[str, Any], size: int) -> ObjectInfo:
    return ObjectInfo(
        key=key,
        size=size,
        etag=_strip_etag(response.get("ETag", "")),
        created_at=_as_utc(response.get("LastModified")),
        metadata={str(name): str(value) for name, value in dict(response.get("Metadata", {})).items()},
    )


def _strip_etag(raw_etag: str) -> str:
    return str(raw_etag).strip('"')


def _as_utc(value: Any) -> datetime:
    if not isinstance(value, datetime):
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
