"""Integration tests for a full form lifecycle on the local bucket."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

from core.config import FormStoreConfig
from core.errors import ErrorCode
from core.types import CreateResponseInput, ListResponsesOptions, PutContentInput, UpdateStatusInput
from formstore import FormStoreClient


def _client(tmp_path: Path, **overrides: object) -> FormStoreClient:
    config = replace(
        FormStoreConfig(backend="local", data_root=tmp_path / "formstore"),
        **overrides,
    )
    return FormStoreClient(config)


async def test_form_lifecycle_persists_across_clients(tmp_path: Path) -> None:
    """Content, schema and reviewed responses should survive a new client."""
    writer = _client(tmp_path, path_prefix="prod")
    await writer.content.put_content(PutContentInput(guild_id="g1", page_id="welcome", content="Hi"))
    schema_v1 = await writer.schemas.put_schema("g1", "signup", {"type": "object"}, "first")
    schema_v2 = await writer.schemas.put_schema(
        "g1", "signup", {"type": "object", "required": ["email"]}, "email required"
    )
    await writer.responses.create(
        CreateResponseInput(
            id="r1",
            form_id="signup",
            guild_id="g1",
            schema_version=schema_v2.unwrap().version,
            data={"email": "a@example.com"},
            submitter_id="u1",
        )
    )
    await writer.responses.update_status(
        UpdateStatusInput(
            guild_id="g1",
            form_id="signup",
            response_id="r1",
            status="accepted",
            reviewer_id="admin",
        )
    )

    reader = _client(tmp_path, path_prefix="prod")
    schema = (await reader.schemas.get_current_schema("g1", "signup")).unwrap()
    response = (await reader.responses.get("g1", "signup", "r1")).unwrap()
    accepted = (
        await reader.responses.list("g1", "signup", ListResponsesOptions(status="accepted"))
    ).unwrap()
    unprefixed = await _client(tmp_path).content.get_current_content("g1", "welcome")

    assert schema_v1.unwrap().version == 1
    assert (schema.metadata.version, schema.metadata.description) == (2, "email required")
    assert schema.schema["required"] == ["email"]
    assert response is not None and response.schema_version == 2
    assert (response.status, response.reviewer_id, response.submitter_id) == ("accepted", "admin", "u1")
    assert [item.id for item in accepted.items] == ["r1"]
    assert unprefixed.error.code == ErrorCode.CONTENT_NOT_FOUND


async def test_conditional_writes_on_local_bucket_keep_every_version(tmp_path: Path) -> None:
    """Concurrent writers with conditional writes should never lose a version."""
    client = _client(tmp_path, conditional_writes=True, max_write_attempts=10)

    results = await asyncio.gather(
        *(
            client.content.put_content(
                PutContentInput(guild_id="g1", page_id="welcome", content=f"draft {index}")
            )
            for index in range(5)
        )
    )
    versions = (await client.content.list_versions("g1", "welcome")).unwrap()

    assert sorted(result.unwrap().version for result in results) == [1, 2, 3, 4, 5]
    assert [version.version for version in versions] == [1, 2, 3, 4, 5]
