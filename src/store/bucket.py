"""Blob bucket contract.

Storage services depend on this protocol only. Adapters raise
``BucketError`` for faults and ``BucketConflictError`` when a
write-if-absent targets an existing key.
"""

from __future__ import annotations

import hashlib
from typing import Mapping, Protocol

from core.types import ObjectInfo, StoredObject


class Bucket(Protocol):
    """Async key to bytes store with prefix listing."""

    async def put(
        self,
        key: str,
        data: bytes,
        metadata: Mapping[str, str] | None = None,
        *,
        if_absent: bool = False,
    ) -> ObjectInfo:
        """Store bytes under a key, replacing any existing object."""
        ...

    async def get(self, key: str) -> StoredObject | None:
        """Return the object stored under key, or None."""
        ...

    async def head(self, key: str) -> ObjectInfo | None:
        """Return object info without the body, or None."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        ...

    async def list(self, prefix: str) -> list[ObjectInfo]:
        """List objects whose key starts with prefix, sorted by key."""
        ...


def compute_etag(data: bytes) -> str:
    """Return the MD5 hex digest used as a content etag."""
    return hashlib.md5(data).hexdigest()
