"""Form Store CLI entry points.

This module exposes inspection commands for stored content, schemas
and responses. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import FormStoreConfig
from core.constants import (
    CONTENT_NAMESPACE,
    RESPONSE_STATUSES,
    SCHEMA_NAMESPACE,
)
from core.result import Err
from core.types import ListResponsesOptions
from store.client import FormStoreClient

_VERSIONED_NAMESPACES = (CONTENT_NAMESPACE, SCHEMA_NAMESPACE)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="formstore", description="Form Store inspection CLI")
    parser.add_argument("--data-root", help="Override FORMSTORE_DATA_ROOT for this command")
    parser.add_argument("--path-prefix", help="Override FORMSTORE_PATH_PREFIX for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_versions_command(subparsers)
    _add_entities_command(subparsers)
    _add_show_command(subparsers)
    _add_responses_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Form Store CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.data_root, args.path_prefix)
    if args.command == "versions":
        return asyncio.run(_run_versions_command(client, args))
    if args.command == "entities":
        return asyncio.run(_run_entities_command(client, args))
    if args.command == "show":
        return asyncio.run(_run_show_command(client, args))
    if args.command == "responses":
        return asyncio.run(_run_responses_command(client, args))
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None, path_prefix: str | None) -> FormStoreClient:
    """Build SDK client with optional overrides.

    Args:
        data_root: Optional data root override path.
        path_prefix: Optional key prefix override.

    Returns:
        Configured SDK client.
    """
    config = FormStoreConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    if path_prefix is not None:
        config = replace(config, path_prefix=path_prefix)
    return FormStoreClient(config)


def _add_versions_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("versions", help="List versions of a page or form")
    parser.add_argument("namespace", choices=_VERSIONED_NAMESPACES)
    parser.add_argument("guild_id")
    parser.add_argument("resource_id")


def _add_entities_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("entities", help="List pages or forms of a guild")
    parser.add_argument("namespace", choices=_VERSIONED_NAMESPACES)
    parser.add_argument("guild_id")


def _add_show_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("show", help="Print one content or schema version")
    parser.add_argument("namespace", choices=_VERSIONED_NAMESPACES)
    parser.add_argument("guild_id")
    parser.add_argument("resource_id")
    parser.add_argument("--version", type=int, help="Version number; current when omitted")


def _add_responses_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("responses", help="List responses of a form")
    parser.add_argument("guild_id")
    parser.add_argument("form_id")
    parser.add_argument("--status", choices=RESPONSE_STATUSES)
    parser.add_argument("--limit", type=int)


async def _run_versions_command(client: FormStoreClient, args: argparse.Namespace) -> int:
    """Handle versions command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    service = client.content if args.namespace == CONTENT_NAMESPACE else client.schemas
    result = await service.list_versions(args.guild_id, args.resource_id)
    if isinstance(result, Err):
        return _report_failure(result)
    for version in result.value:
        print(
            f"{version.version}\t"
            f"{version.size}\t"
            f"{version.created_at.isoformat()}\t"
            f"{version.etag}"
        )
    return 0


async def _run_entities_command(client: FormStoreClient, args: argparse.Namespace) -> int:
    """Handle entities command."""
    if args.namespace == CONTENT_NAMESPACE:
        pages = await client.content.list_pages(args.guild_id)
        if isinstance(pages, Err):
            return _report_failure(pages)
        rows = [(page.page_id, page.current_version) for page in pages.value]
    else:
        forms = await client.schemas.list_forms(args.guild_id)
        if isinstance(forms, Err):
            return _report_failure(forms)
        rows = [(form.form_id, form.current_version) for form in forms.value]
    for resource_id, current_version in rows:
        print(f"{resource_id}\t{current_version}")
    return 0


async def _run_show_command(client: FormStoreClient, args: argparse.Namespace) -> int:
    """Handle show command."""
    if args.namespace == CONTENT_NAMESPACE:
        if args.version is None:
            content = await client.content.get_current_content(args.guild_id, args.resource_id)
        else:
            content = await client.content.get_content(args.guild_id, args.resource_id, args.version)
        if isinstance(content, Err):
            return _report_failure(content)
        print(content.value.content)
        return 0
    if args.version is None:
        schema = await client.schemas.get_current_schema(args.guild_id, args.resource_id)
    else:
        schema = await client.schemas.get_schema(args.guild_id, args.resource_id, args.version)
    if isinstance(schema, Err):
        return _report_failure(schema)
    print(json.dumps(schema.value.schema, indent=2, sort_keys=True))
    return 0


async def _run_responses_command(client: FormStoreClient, args: argparse.Namespace) -> int:
    """Handle responses command."""
    options = ListResponsesOptions(status=args.status, limit=args.limit)
    result = await client.responses.list(args.guild_id, args.form_id, options)
    if isinstance(result, Err):
        return _report_failure(result)
    for response in result.value.items:
        print(
            f"{response.id}\t"
            f"{response.status}\t"
            f"{response.schema_version}\t"
            f"{response.updated_at.isoformat()}"
        )
    if result.value.has_more:
        print("...")
    return 0


def _report_failure(result: Err) -> int:
    """Print a failed result to stderr and return the failure exit code."""
    print(f"{result.error.code.value}: {result.error.message}", file=sys.stderr)
    return 1
