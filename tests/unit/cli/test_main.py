"""Unit tests for Form Store CLI commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from cli.main import build_parser, main
from core.types import CreateResponseInput, PutContentInput, UpdateStatusInput
from store.content_storage import ContentStorageService
from store.local_bucket import LocalBucket
from store.response_storage import ResponseStorageService
from store.schema_storage import SchemaStorageService


@pytest.fixture
def data_root(tmp_path: Path, monkeypatch) -> Path:
    """Return a seeded local data root and pin the local backend."""
    monkeypatch.setenv("FORMSTORE_BACKEND", "local")
    monkeypatch.delenv("FORMSTORE_PATH_PREFIX", raising=False)
    asyncio.run(_seed(tmp_path))
    return tmp_path


async def _seed(root: Path) -> None:
    bucket = LocalBucket(root)
    content = ContentStorageService(bucket)
    await content.put_content(PutContentInput(guild_id="g", page_id="home", content="# Home v1"))
    await content.put_content(PutContentInput(guild_id="g", page_id="home", content="# Home v2"))
    await content.put_content(PutContentInput(guild_id="g", page_id="about", content="# About"))
    schemas = SchemaStorageService(bucket)
    await schemas.put_schema("g", "signup", {"type": "object", "title": "Signup"})
    responses = ResponseStorageService(bucket)
    for response_id in ("r1", "r2", "r3"):
        await responses.create(
            CreateResponseInput(id=response_id, form_id="signup", guild_id="g", schema_version=1, data={})
        )
    await responses.update_status(
        UpdateStatusInput(guild_id="g", form_id="signup", response_id="r2", status="accepted")
    )


def test_versions_lists_each_version(data_root: Path, capsys) -> None:
    """versions should print one row per stored version."""
    exit_code = main(["--data-root", str(data_root), "versions", "content", "g", "home"])
    rows = capsys.readouterr().out.splitlines()

    assert exit_code == 0
    assert [row.split("\t")[0] for row in rows] == ["1", "2"]


def test_entities_lists_current_versions(data_root: Path, capsys) -> None:
    """entities should print each page with its current version."""
    exit_code = main(["--data-root", str(data_root), "entities", "content", "g"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["about\t1", "home\t2"]


def test_show_prints_current_and_pinned_content(data_root: Path, capsys) -> None:
    """show should print the current version unless one is pinned."""
    main(["--data-root", str(data_root), "show", "content", "g", "home"])
    current = capsys.readouterr().out
    main(["--data-root", str(data_root), "show", "content", "g", "home", "--version", "1"])
    pinned = capsys.readouterr().out

    assert current.strip() == "# Home v2"
    assert pinned.strip() == "# Home v1"


def test_show_prints_schema_json(data_root: Path, capsys) -> None:
    """show should render schemas as JSON."""
    exit_code = main(["--data-root", str(data_root), "show", "schemas", "g", "signup"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"type": "object", "title": "Signup"}


def test_responses_filters_and_limits(data_root: Path, capsys) -> None:
    """responses should honor status filters and mark truncated listings."""
    main(["--data-root", str(data_root), "responses", "g", "signup", "--status", "pending"])
    pending = capsys.readouterr().out.splitlines()
    main(["--data-root", str(data_root), "responses", "g", "signup", "--limit", "1"])
    limited = capsys.readouterr().out.splitlines()

    assert [row.split("\t")[:2] for row in pending] == [["r1", "pending"], ["r3", "pending"]]
    assert len(limited) == 2 and limited[-1] == "..."


def test_missing_content_reports_error_code(data_root: Path, capsys) -> None:
    """Failed lookups should print the error code and exit 1."""
    exit_code = main(["--data-root", str(data_root), "show", "content", "g", "missing"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.err.startswith("CONTENT_NOT_FOUND:")


def test_path_prefix_override_isolates_listing(data_root: Path, capsys) -> None:
    """A different prefix should see none of the seeded data."""
    exit_code = main(["--data-root", str(data_root), "--path-prefix", "prod", "entities", "content", "g"])

    assert exit_code == 0
    assert capsys.readouterr().out == ""


def test_parser_rejects_unknown_namespace() -> None:
    """Namespaces outside content and schemas should be rejected."""
    with pytest.raises(SystemExit):
        build_parser().parse_args(["versions", "responses", "g", "f"])
