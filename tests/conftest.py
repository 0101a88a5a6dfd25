"""Pytest configuration and shared bucket fakes for repository test runs."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Mapping

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def memory_bucket():
    """Return an empty in-memory bucket."""
    from store.memory_bucket import MemoryBucket

    return MemoryBucket()


@pytest.fixture
def racy_bucket():
    """Return a bucket whose listings wait until every writer has listed.

    Concurrent writers therefore observe the same snapshot before any of
    them writes, reproducing the list-then-write window deterministically.
    """
    from store.memory_bucket import MemoryBucket

    class RacyBucket(MemoryBucket):
        def __init__(self, writers: int) -> None:
            super().__init__()
            self._barrier = asyncio.Barrier(writers)
            self._armed = True

        def disarm(self) -> None:
            self._armed = False

        async def list(self, prefix: str):
            snapshot = await super().list(prefix)
            if self._armed:
                await self._barrier.wait()
            return snapshot

    return RacyBucket


@pytest.fixture
def failing_bucket():
    """Return a bucket whose every operation raises a bucket fault."""
    from core.errors import BucketError

    class FailingBucket:
        async def put(
            self,
            key: str,
            data: bytes,
            metadata: Mapping[str, str] | None = None,
            *,
            if_absent: bool = False,
        ):
            raise BucketError("connection refused")

        async def get(self, key: str):
            raise BucketError("connection refused")

        async def head(self, key: str):
            raise BucketError("connection refused")

        async def delete(self, key: str) -> None:
            raise BucketError("connection refused")

        async def list(self, prefix: str):
            raise BucketError("connection refused")

    return FailingBucket()
