"""Version number resolution.

Version assignment is list-then-write: the store lists existing
versions, asks this module for the next number, then writes. The
bucket has no atomic increment, so two concurrent writers to one
resource can compute the same number and the later put replaces the
earlier one. Callers serialize writes per resource, or enable
conditional writes in ``StorageConfig``.
"""

from __future__ import annotations

from typing import Iterable


def next_version(existing_versions: Iterable[int]) -> int:
    """Return the version number for the next write.

    Args:
        existing_versions: Positive version numbers already stored.

    Returns:
        ``max(existing_versions) + 1``, or 1 when none exist.

    Raises:
        ValueError: If any existing version is not positive.
    """
    current = current_version(existing_versions)
    return 1 if current is None else current + 1


def current_version(existing_versions: Iterable[int]) -> int | None:
    """Return the highest existing version, or None when empty.

    Raises:
        ValueError: If any existing version is not positive.
    """
    highest: int | None = None
    for version in existing_versions:
        if version < 1:
            raise ValueError(f"Existing versions must be positive, got {version}")
        if highest is None or version > highest:
            highest = version
    return highest
