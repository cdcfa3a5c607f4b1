"""CLI entry point for searchstore."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from searchstore.adapters.base.adapter import SearchStore
from searchstore.adapters.base.exceptions import StoreError
from searchstore.adapters.base.registry import connect
from searchstore.config.settings import Settings
from searchstore.models.query import MatchPolicy


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per store operation."""
    parser = argparse.ArgumentParser(
        prog="searchstore",
        description="searchstore — CRUD and field search over Elasticsearch/OpenSearch",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--backend", "-b", type=str, default=None, help="Backend name (overrides config)")
    parser.add_argument("--host", type=str, default=None, help="Cluster host, e.g. http://localhost")
    parser.add_argument("--port", "-p", type=str, default=None, help="Cluster port (overrides config)")
    parser.add_argument(
        "--policy",
        type=str,
        choices=[p.value for p in MatchPolicy],
        default=None,
        help="Field search matching policy (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"searchstore {_get_version()}")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("ping", help="Check the cluster is reachable")

    create = commands.add_parser("create", help="Create a document and print its id")
    create.add_argument("collection")
    create.add_argument("type")
    create.add_argument("body", type=_json_object, help="Document as a JSON object")

    get = commands.add_parser("get", help="Print a document by id")
    get.add_argument("collection")
    get.add_argument("type")
    get.add_argument("id")

    update = commands.add_parser("update", help="Merge fields into a document")
    update.add_argument("collection")
    update.add_argument("type")
    update.add_argument("id")
    update.add_argument("body", type=_json_object, help="Partial document as a JSON object")

    delete = commands.add_parser("delete", help="Delete a document by id")
    delete.add_argument("collection")
    delete.add_argument("type")
    delete.add_argument("id")

    get_all = commands.add_parser("all", help="Print every document of a type")
    get_all.add_argument("collection")
    get_all.add_argument("type")

    search = commands.add_parser("search", help="Print documents whose field matches a query")
    search.add_argument("collection")
    search.add_argument("type")
    search.add_argument("field")
    search.add_argument("query")

    drop = commands.add_parser("drop", help="Delete a whole collection")
    drop.add_argument("collection")

    refresh = commands.add_parser("refresh", help="Make prior writes visible to searches")
    refresh.add_argument("collection")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point for searchstore."""
    args = build_parser().parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            return 1
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.backend:
        settings.store.backend = args.backend
    if args.host:
        settings.store.host = args.host
    if args.port:
        settings.store.port = args.port
    if args.policy:
        settings.store.match_policy = MatchPolicy(args.policy)
    if args.log_level:
        settings.observability.log_level = args.log_level

    from searchstore.observability.logging import setup_logging

    setup_logging(settings.observability)

    try:
        return asyncio.run(_run(args, settings))
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    async with await connect(settings) as store:
        try:
            return await _dispatch(store, args)
        except store.client_errors as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


async def _dispatch(store: SearchStore, args: argparse.Namespace) -> int:
    command = args.command
    if command == "ping":
        _emit({"backend": store.name, "status": "ok"})
    elif command == "create":
        _emit({"id": await store.create_document(args.collection, args.type, args.body)})
    elif command == "get":
        document = await store.get_by_id(args.collection, args.type, args.id)
        if document is None:
            print(f"Document '{args.id}' not found", file=sys.stderr)
            return 1
        _emit(document)
    elif command == "update":
        updated = await store.update_document(args.collection, args.type, args.id, args.body)
        _emit({"updated": updated})
        return 0 if updated else 1
    elif command == "delete":
        await store.delete_document(args.collection, args.type, args.id)
        _emit({"deleted": args.id})
    elif command == "all":
        _emit(await store.get_all(args.collection, args.type))
    elif command == "search":
        _emit(await store.search_by_field(args.collection, args.type, args.field, args.query))
    elif command == "drop":
        _emit({"deleted": await store.delete_collection(args.collection)})
    elif command == "refresh":
        await store.refresh(args.collection)
        _emit({"refreshed": args.collection})
    return 0


def _json_object(value: str) -> dict[str, Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError("expected a JSON object")
    return parsed


def _emit(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False))


def _get_version() -> str:
    """Get the package version."""
    try:
        from searchstore import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    sys.exit(main())
