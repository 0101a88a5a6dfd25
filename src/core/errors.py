"""Form Store exception hierarchy and public error codes.

Exceptions are raised at adapter and key-construction seams.
Service operations translate them into ``ErrorCode`` results.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes surfaced to storage callers."""

    INVALID_KEY = "INVALID_KEY"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"
    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    BUCKET_ERROR = "BUCKET_ERROR"


class FormStoreError(Exception):
    """Base exception for all Form Store failures."""


class FormStoreConfigError(FormStoreError):
    """Raised for invalid runtime configuration."""


class FormStoreDependencyError(FormStoreError):
    """Raised when an optional runtime dependency is missing."""


class KeyConstructionError(FormStoreError):
    """Raised when a bucket key cannot be built or parsed."""


class BucketError(FormStoreError):
    """Raised for bucket connectivity, permission, and IO failures."""


class BucketConflictError(BucketError):
    """Raised when a write-if-absent targets an existing key."""


class ResultUnwrapError(FormStoreError):
    """Raised when unwrapping a failed result."""
