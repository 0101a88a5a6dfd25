"""Filesystem bucket adapter.

Object bodies are written under ``<data_root>/objects/<key>`` with a
JSON side-car under ``<data_root>/metadata/<key>.json`` holding etag,
upload time and custom metadata. Blocking file IO runs in worker
threads so the async contract holds.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from core.constants import KEY_SEPARATOR, LOCAL_METADATA_SUFFIX, LOCAL_OBJECTS_DIR_NAME
from core.errors import BucketConflictError, BucketError
from core.logging_config import get_logger
from core.types import ObjectInfo, StoredObject
from store.bucket import compute_etag

_LOGGER = get_logger(__name__)
_METADATA_DIR_NAME = "metadata"


class LocalBucket:
    """Bucket stored as plain files under a data root."""

    def __init__(self, data_root: Path) -> None:
        """Initialize the bucket directories.

        Args:
            data_root: Root directory owning objects and metadata trees.
        """
        self._objects_root = data_root / LOCAL_OBJECTS_DIR_NAME
        self._metadata_root = data_root / _METADATA_DIR_NAME
        self._objects_root.mkdir(parents=True, exist_ok=True)
        self._metadata_root.mkdir(parents=True, exist_ok=True)

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
        object_path = self._object_path(key)
        info = ObjectInfo(
            key=key,
            size=len(data),
            etag=compute_etag(data),
            created_at=datetime.now(timezone.utc),
            metadata=metadata,
        )
        try:
            object_path.parent.mkdir(parents=True, exist_ok=True)
            with object_path.open("xb" if if_absent else "wb") as handle:
                handle.write(data)
            _write_side_car(self._metadata_path(key), info)
        except FileExistsError as error:
            raise BucketConflictError(f"Object already exists at {key}") from error
        except OSError as error:
            raise BucketError(f"Failed to write object {key} at {object_path}: {error}") from error
        return info

    def _get_sync(self, key: str) -> StoredObject | None:
        info = self._head_sync(key)
        if info is None:
            return None
        try:
            data = self._object_path(key).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as error:
            raise BucketError(f"Failed to read object {key}: {error}") from error
        return StoredObject(info=info, data=data)

    def _head_sync(self, key: str) -> ObjectInfo | None:
        object_path = self._object_path(key)
        if not object_path.is_file():
            return None
        return self._read_info(key, object_path)

    def _delete_sync(self, key: str) -> None:
        for path in (self._object_path(key), self._metadata_path(key)):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as error:
                raise BucketError(f"Failed to delete object {key} at {path}: {error}") from error

    def _list_sync(self, prefix: str) -> list[ObjectInfo]:
        search_root = self._objects_root
        directory_part = prefix.rsplit(KEY_SEPARATOR, 1)[0] if KEY_SEPARATOR in prefix else ""
        if directory_part:
            search_root = self._objects_root / directory_part
        if not search_root.is_dir():
            return []
        infos: list[ObjectInfo] = []
        for object_path in sorted(search_root.rglob("*")):
            if not object_path.is_file():
                continue
            key = object_path.relative_to(self._objects_root).as_posix()
            if not key.startswith(prefix):
                continue
            info = self._read_info(key, object_path)
            # Deleted between the directory walk and the read.
            if info is not None:
                infos.append(info)
        return sorted(infos, key=lambda info: info.key)

    def _read_info(self, key: str, object_path: Path) -> ObjectInfo | None:
        """Load object info from the side-car, rebuilding it when absent.

        Returns:
            Object info, or None when the object no longer exists.

        Raises:
            BucketError: If the object or side-car cannot be read.
        """
        metadata_path = self._metadata_path(key)
        try:
            if metadata_path.is_file():
                try:
                    payload = json.loads(metadata_path.read_text(encoding="utf-8"))
                    return _info_from_side_car(key, payload)
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as error:
                    _LOGGER.warning("local_bucket_side_car_invalid", key=key, error=str(error))
            data = object_path.read_bytes()
            modified_at = object_path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as error:
            raise BucketError(f"Failed to read object info for {key}: {error}") from error
        return ObjectInfo(
            key=key,
            size=len(data),
            etag=compute_etag(data),
            created_at=datetime.fromtimestamp(modified_at, tz=timezone.utc),
        )

    def _object_path(self, key: str) -> Path:
        return _resolve_inside(self._objects_root, key)

    def _metadata_path(self, key: str) -> Path:
        return _resolve_inside(self._metadata_root, key + LOCAL_METADATA_SUFFIX)


def _resolve_inside(root: Path, key: str) -> Path:
    """Map a key onto a path that cannot escape root.

    Raises:
        BucketError: If the key is empty or traverses outside root.
    """
    parts = key.split(KEY_SEPARATOR)
    if not key or any(part in ("", ".", "..") for part in parts):
        raise BucketError(f"Invalid object key for local bucket: {key!r}")
    return root.joinpath(*parts)


def _write_side_car(metadata_path: Path, info: ObjectInfo) -> None:
    metadata_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "size": info.size,
        "etag": info.etag,
        "created_at": info.created_at.isoformat(),
        "metadata": dict(info.metadata),
    }
    metadata_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def _info_from_side_car(key: str, payload: dict[str, Any]) -> ObjectInfo:
    return ObjectInfo(
        key=key,
        size=int(payload["size"]),
        etag=str(payload["etag"]),
        created_at=datetime.fromisoformat(str(payload["created_at"])),
        metadata={str(name): str(value) for name, value in dict(payload["metadata"]).items()},
    )
