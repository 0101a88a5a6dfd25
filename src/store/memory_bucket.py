"""In-process bucket adapter.

Objects live in a dictionary owned by the instance. Used for tests
and for embedding the storage services without external IO.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from core.errors import BucketConflictError
from core.types import ObjectInfo, StoredObject
from store.bucket import compute_etag


class MemoryBucket:
    """Dictionary-backed bucket."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    async def put(
        self,
        key: str,
        data: bytes,
        metadata: Mapping[str, str] | None = None,
        *,
        if_absent: bool = False,
    ) -> ObjectInfo:
        if if_absent and key in self._objects:
            raise BucketConflictError(f"Object already exists at {key}")
        info = ObjectInfo(
            key=key,
            size=len(data),
            etag=compute_etag(data),
            created_at=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )
        self._objects[key] = StoredObject(info=info, data=bytes(data))
        return info

    async def get(self, key: str) -> StoredObject | None:
        return self._objects.get(key)

    async def head(self, key: str) -> ObjectInfo | None:
        stored = self._objects.get(key)
        return stored.info if stored else None

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)

    async def list(self, prefix: str) -> list[ObjectInfo]:
        return [
            self._objects[key].info
            for key in sorted(self._objects)
            if key.startswith(prefix)
        ]

    def keys(self) -> list[str]:
        """Return all stored keys in order."""
        return sorted(self._objects)
