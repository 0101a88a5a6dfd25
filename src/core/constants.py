"""Core constants used across Form Store modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".formstore")
DEFAULT_BACKEND = "local"
SUPPORTED_BACKENDS = ("memory", "local", "s3")
DEFAULT_MAX_WRITE_ATTEMPTS = 5
KEY_SEPARATOR = "/"
VERSION_KEY_PREFIX = "v"
RECORD_KEY_SUFFIX = ".json"
CONTENT_NAMESPACE = "content"
SCHEMA_NAMESPACE = "schemas"
RESPONSE_NAMESPACE = "responses"
SUPPORTED_NAMESPACES = (CONTENT_NAMESPACE, SCHEMA_NAMESPACE, RESPONSE_NAMESPACE)
JSON_CONTENT_TYPE = "application/json"
LOCAL_OBJECTS_DIR_NAME = "objects"
LOCAL_METADATA_SUFFIX = ".meta.json"
RESPONSE_STATUSES = ("pending", "accepted", "rejected")
DEFAULT_RESPONSE_STATUS = "pending"
