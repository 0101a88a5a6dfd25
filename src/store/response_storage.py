"""Form response storage with review status tracking.

Each response is a single mutable JSON document keyed by its id under
``responses/<guild>/<form>/``. Status updates rewrite the document in
place; listing walks keys in ascending order.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Mapping

from core.config import StorageConfig
from core.constants import (
    DEFAULT_RESPONSE_STATUS,
    JSON_CONTENT_TYPE,
    RECORD_KEY_SUFFIX,
    RESPONSE_NAMESPACE,
    RESPONSE_STATUSES,
)
from core.errors import ErrorCode, KeyConstructionError
from core.logging_config import get_logger
from core.result import Result, err, ok
from core.types import (
    CreateResponseInput,
    FormResponse,
    ListResponsesOptions,
    ObjectInfo,
    ResponsePage,
    ResponseStatus,
    UpdateStatusInput,
)
from store.bucket import Bucket
from store.fault_boundary import result_boundary
from store.key_scheme import parse_record_id, record_key, resource_prefix
from store.record_payload import decode_response, encode_response

_LOGGER = get_logger(__name__)


class ResponseStorageService:
    """Status-tracked response store.

    Creation overwrites an existing response with the same id unless
    ``StorageConfig.strict_create`` is set, in which case duplicates fail
    with ``ALREADY_EXISTS``.
    """

    def __init__(self, bucket: Bucket, config: StorageConfig | None = None) -> None:
        self._bucket = bucket
        self._config = config or StorageConfig()

    @result_boundary("create")
    async def create(self, request: CreateResponseInput) -> Result[FormResponse]:
        """Create a pending response.

        Args:
            request: Response creation request.

        Returns:
            Stored response, or ``VALIDATION_ERROR`` naming the bad field.
        """
        problem = _validate_create(request)
        if problem is not None:
            return err(ErrorCode.VALIDATION_ERROR, problem)
        key = self._key(request.guild_id, request.form_id, request.id)
        if self._config.strict_create and await self._bucket.head(key) is not None:
            return err(
                ErrorCode.ALREADY_EXISTS,
                f"Response {request.id} already exists for form {request.form_id}",
            )
        now = datetime.now(timezone.utc)
        response = FormResponse(
            id=request.id,
            form_id=request.form_id,
            guild_id=request.guild_id,
            schema_version=request.schema_version,
            data=dict(request.data),
            status=DEFAULT_RESPONSE_STATUS,
            created_at=now,
            updated_at=now,
            submitter_id=request.submitter_id,
        )
        written = await self._write(key, response)
        if not written.ok:
            return written
        _LOGGER.info(
            "response_created",
            guild_id=request.guild_id,
            form_id=request.form_id,
            response_id=request.id,
            schema_version=request.schema_version,
        )
        return ok(response)

    @result_boundary("get")
    async def get(self, guild_id: str, form_id: str, response_id: str) -> Result[FormResponse | None]:
        """Read a response; a missing response is ``Ok(None)``."""
        key = self._key(guild_id, form_id, response_id)
        return await self._read(key)

    @result_boundary("update_status")
    async def update_status(self, request: UpdateStatusInput) -> Result[FormResponse]:
        """Transition a response to a new status.

        Reviewer fields are replaced only when supplied; ``updated_at`` never
        moves backwards.

        Returns:
            Updated response, or ``NOT_FOUND`` when it does not exist.
        """
        problem = _validate_update(request)
        if problem is not None:
            return err(ErrorCode.VALIDATION_ERROR, problem)
        key = self._key(request.guild_id, request.form_id, request.response_id)
        current = await self._read(key)
        if not current.ok:
            return current
        if current.value is None:
            return err(
                ErrorCode.NOT_FOUND,
                f"Response {request.response_id} not found for form {request.form_id}",
            )
        previous = current.value
        updated = replace(
            previous,
            status=request.status,
            updated_at=max(datetime.now(timezone.utc), previous.updated_at),
            reviewer_id=request.reviewer_id if request.reviewer_id is not None else previous.reviewer_id,
            review_notes=(
                request.review_notes if request.review_notes is not None else previous.review_notes
            ),
        )
        written = await self._write(key, updated)
        if not written.ok:
            return written
        _LOGGER.info(
            "response_status_updated",
            guild_id=request.guild_id,
            form_id=request.form_id,
            response_id=request.response_id,
            previous_status=previous.status,
            status=request.status,
        )
        return ok(updated)

    @result_boundary("delete")
    async def delete(self, guild_id: str, form_id: str, response_id: str) -> Result[None]:
        """Delete a response; deleting a missing response succeeds."""
        await self._bucket.delete(self._key(guild_id, form_id, response_id))
        _LOGGER.info(
            "response_deleted",
            guild_id=guild_id,
            form_id=form_id,
            response_id=response_id,
        )
        return ok(None)

    @result_boundary("exists")
    async def exists(self, guild_id: str, form_id: str, response_id: str) -> Result[bool]:
        key = self._key(guild_id, form_id, response_id)
        return ok(await self._bucket.head(key) is not None)

    @result_boundary("list")
    async def list(
        self,
        guild_id: str,
        form_id: str,
        options: ListResponsesOptions | None = None,
    ) -> Result[ResponsePage]:
        """List responses of a form in key order.

        Args:
            guild_id: Tenant identifier.
            form_id: Form identifier.
            options: Optional status filter and item limit.

        Returns:
            Matching responses and whether more exist beyond the limit.
        """
        options = options or ListResponsesOptions()
        problem = _validate_list_options(options)
        if problem is not None:
            return err(ErrorCode.VALIDATION_ERROR, problem)
        items: list[FormResponse] = []
        has_more = False
        for info in await self._record_infos(guild_id, form_id):
            loaded = await self._read(info.key)
            if not loaded.ok:
                return loaded
            response = loaded.value
            if response is None or not _matches(response, options.status):
                continue
            if options.limit is not None and len(items) >= options.limit:
                has_more = True
                break
            items.append(response)
        return ok(ResponsePage(items=tuple(items), has_more=has_more))

    @result_boundary("count")
    async def count(
        self,
        guild_id: str,
        form_id: str,
        status: ResponseStatus | None = None,
    ) -> Result[int]:
        """Count responses of a form, optionally by status."""
        if status is not None and status not in RESPONSE_STATUSES:
            return err(ErrorCode.VALIDATION_ERROR, f"Unknown status: {status!r}")
        infos = await self._record_infos(guild_id, form_id)
        if status is None:
            return ok(len(infos))
        total = 0
        for info in infos:
            loaded = await self._read(info.key)
            if not loaded.ok:
                return loaded
            if loaded.value is not None and loaded.value.status == status:
                total += 1
        return ok(total)

    async def _record_infos(self, guild_id: str, form_id: str) -> list[ObjectInfo]:
        """List response documents directly under a form prefix."""
        prefix = resource_prefix(
            RESPONSE_NAMESPACE, guild_id, form_id, "formId", self._config.path_prefix
        )
        infos: list[ObjectInfo] = []
        for info in await self._bucket.list(prefix):
            relative_key = info.key[len(prefix):]
            if "/" in relative_key or not relative_key.endswith(RECORD_KEY_SUFFIX):
                continue
            try:
                parse_record_id(relative_key)
            except KeyConstructionError:
                _LOGGER.warning("unrecognized_key_skipped", key=info.key)
                continue
            infos.append(info)
        return sorted(infos, key=lambda item: item.key)

    async def _read(self, key: str) -> Result[FormResponse | None]:
        stored = await self._bucket.get(key)
        if stored is None:
            return ok(None)
        try:
            return ok(decode_response(stored.data))
        except ValueError as error:
            return err(ErrorCode.SERIALIZATION_ERROR, f"Stored response at {key} is corrupt: {error}", error)

    async def _write(self, key: str, response: FormResponse) -> Result[None]:
        try:
            document = encode_response(response)
        except (TypeError, ValueError) as error:
            return err(
                ErrorCode.SERIALIZATION_ERROR,
                f"Response data is not JSON-serializable: {error}",
                error,
            )
        await self._bucket.put(key, document, {"contentType": JSON_CONTENT_TYPE, "status": response.status})
        return ok(None)

    def _key(self, guild_id: str, form_id: str, response_id: str) -> str:
        return record_key(RESPONSE_NAMESPACE, guild_id, form_id, response_id, self._config.path_prefix)


def create_response_storage_service(
    bucket: Bucket, config: StorageConfig | None = None
) -> ResponseStorageService:
    """Build a response service over a bucket."""
    return ResponseStorageService(bucket, config)


def _validate_create(request: CreateResponseInput) -> str | None:
    """Return the first validation problem of a create request."""
    if not _non_empty(request.id):
        return "Response ID is required"
    if not _non_empty(request.form_id):
        return "Form ID is required"
    if not _non_empty(request.guild_id):
        return "Guild ID is required"
    if not _positive_int(request.schema_version):
        return "Schema version must be a positive integer"
    if not isinstance(request.data, Mapping):
        return "Response data must be a mapping"
    return None


def _validate_update(request: UpdateStatusInput) -> str | None:
    if not _non_empty(request.response_id):
        return "Response ID is required"
    if not _non_empty(request.form_id):
        return "Form ID is required"
    if not _non_empty(request.guild_id):
        return "Guild ID is required"
    if request.status not in RESPONSE_STATUSES:
        return f"Status must be one of {', '.join(RESPONSE_STATUSES)}"
    return None


def _validate_list_options(options: ListResponsesOptions) -> str | None:
    if options.status is not None and options.status not in RESPONSE_STATUSES:
        return f"Status must be one of {', '.join(RESPONSE_STATUSES)}"
    if options.limit is not None and not _positive_int(options.limit):
        return "Limit must be a positive integer"
    return None


def _matches(response: FormResponse, status: ResponseStatus | None) -> bool:
    return status is None or response.status == status


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1
