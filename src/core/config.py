"""Runtime configuration model for Form Store.

This module owns all environment variable parsing and validation.
Other modules consume typed config objects instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BACKEND,
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_WRITE_ATTEMPTS,
    KEY_SEPARATOR,
    SUPPORTED_BACKENDS,
)
from core.errors import FormStoreConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class StorageConfig:
    """Per-service storage settings.

    Attributes:
        path_prefix: Deployment namespace prepended to every key.
        conditional_writes: Use write-if-absent when assigning versions.
        max_write_attempts: Version assignment attempts under conditional writes.
        strict_create: Reject response creation when the id already exists.
    """

    path_prefix: str = ""
    conditional_writes: bool = False
    max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS
    strict_create: bool = False

    def __post_init__(self) -> None:
        if self.max_write_attempts < 1:
            raise FormStoreConfigError(
                f"Invalid max_write_attempts {self.max_write_attempts}: expected >= 1."
            )
        object.__setattr__(self, "path_prefix", self.path_prefix.strip(KEY_SEPARATOR))


@dataclass(frozen=True)
class FormStoreConfig:
    """Validated runtime configuration.

    Attributes:
        backend: Bucket adapter name (memory, local or s3).
        data_root: Local root directory for the local bucket.
        path_prefix: Deployment namespace prepended to every key.
        s3_bucket: Bucket name for the S3 adapter.
        s3_region: Optional AWS region for S3 operations.
        s3_profile: Optional AWS profile for boto3 session initialization.
        s3_endpoint_url: Optional endpoint for S3-compatible services.
        conditional_writes: Use write-if-absent when assigning versions.
        max_write_attempts: Version assignment attempts under conditional writes.
        strict_create: Reject response creation when the id already exists.
    """

    backend: str
    data_root: Path
    path_prefix: str = ""
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_profile: str | None = None
    s3_endpoint_url: str | None = None
    conditional_writes: bool = False
    max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS
    strict_create: bool = False

    @classmethod
    def from_env(cls) -> "FormStoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            FormStoreConfigError: If environment values are invalid.
        """
        backend = _parse_backend(os.getenv("FORMSTORE_BACKEND", DEFAULT_BACKEND))
        data_root_value = os.getenv("FORMSTORE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        return cls(
            backend=backend,
            data_root=Path(data_root_value).expanduser().resolve(),
            path_prefix=os.getenv("FORMSTORE_PATH_PREFIX", ""),
            s3_bucket=os.getenv("FORMSTORE_S3_BUCKET"),
            s3_region=os.getenv("FORMSTORE_S3_REGION"),
            s3_profile=os.getenv("FORMSTORE_S3_PROFILE"),
            s3_endpoint_url=os.getenv("FORMSTORE_S3_ENDPOINT_URL"),
            conditional_writes=_parse_bool(
                "FORMSTORE_CONDITIONAL_WRITES",
                os.getenv("FORMSTORE_CONDITIONAL_WRITES", "false"),
            ),
            max_write_attempts=_parse_positive_int(
                "FORMSTORE_MAX_WRITE_ATTEMPTS",
                os.getenv("FORMSTORE_MAX_WRITE_ATTEMPTS", str(DEFAULT_MAX_WRITE_ATTEMPTS)),
            ),
            strict_create=_parse_bool(
                "FORMSTORE_STRICT_CREATE",
                os.getenv("FORMSTORE_STRICT_CREATE", "false"),
            ),
        )

    def storage_config(self) -> StorageConfig:
        """Derive the per-service storage settings."""
        return StorageConfig(
            path_prefix=self.path_prefix,
            conditional_writes=self.conditional_writes,
            max_write_attempts=self.max_write_attempts,
            strict_create=self.strict_create,
        )


def _parse_backend(raw_value: str) -> str:
    """Parse the bucket backend name.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Normalized backend name.

    Raises:
        FormStoreConfigError: If backend is not supported.
    """
    backend = raw_value.strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise FormStoreConfigError(
            f"Invalid FORMSTORE_BACKEND value '{raw_value}': "
            f"expected one of {', '.join(SUPPORTED_BACKENDS)}."
        )
    return backend


def _parse_bool(name: str, raw_value: str) -> bool:
    """Parse a boolean flag environment value.

    Raises:
        FormStoreConfigError: If value is not a recognized flag.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise FormStoreConfigError(
        f"Invalid {name} value: expected true/false, got '{raw_value}'."
    )


def _parse_positive_int(name: str, raw_value: str) -> int:
    """Parse a positive integer environment value.

    Raises:
        FormStoreConfigError: If value cannot be parsed into a positive int.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise FormStoreConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a numeric value."
        ) from error
    if value < 1:
        raise FormStoreConfigError(f"Invalid {name} value: expected >= 1, got {value}.")
    return value
