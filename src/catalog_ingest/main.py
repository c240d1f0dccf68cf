#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalog_ingest.adapters.github import GitHubApp, GitHubContentResolver
from catalog_ingest.app import load_services, setup_integration
from catalog_ingest.config import ConfigurationError, configure_logging, get_github_app_config
from catalog_ingest.domain.errors import IngestError
from catalog_ingest.domain.mapping import MappingEngine

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalog_ingest.domain.model import CanonicalEntity


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="catalog-ingest",
        description="Ingest GitHub resources into the software catalog",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the webhook and configuration API")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: %(default)s)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: %(default)s)")

    commands.add_parser("sync", help="Reconcile every configured installation once")

    transform = commands.add_parser(
        "transform", help="Map one JSON payload with a mapping file and print the entities"
    )
    transform.add_argument("mapping", type=Path, help="Mapping YAML file")
    transform.add_argument("payload", type=Path, help="JSON payload file")
    transform.add_argument("--kind", required=True, help="Resource kind of the payload")
    transform.add_argument(
        "--installation-id",
        help="Installation used to resolve file:// mappings",
    )

    setup = commands.add_parser("setup", help="Register an installation for a catalog scope")
    setup.add_argument("--installation-id", required=True)
    setup.add_argument("--organization-id", required=True)
    setup.add_argument("--tenant-id", help="Omit for the organization-wide integration")
    setup.add_argument(
        "--mapping",
        type=Path,
        help="Mapping YAML file (default: packaged default mapping)",
    )
    setup.add_argument("--no-sync", action="store_true", help="Skip the initial sync")

    return parser.parse_args(list(argv))


def _entity_json(entity: CanonicalEntity) -> dict[str, object]:
    return {
        "identifier": entity.identifier,
        "title": entity.title,
        "blueprint": entity.blueprint_id,
        "properties": entity.properties,
        "relations": entity.relations,
    }


def _serve(args: argparse.Namespace) -> None:
    import uvicorn  # noqa: PLC0415

    from catalog_ingest.api import create_app  # noqa: PLC0415

    uvicorn.run(create_app(load_services()), host=args.host, port=args.port)


def _sync() -> None:
    services = load_services()
    results = asyncio.run(services.synchronizer.sync_all())
    for result in results:
        status = "skipped" if result.skipped else "synced"
        print(
            f"{result.organization_id} installation {result.installation_id}: {status}, "
            f"repositories={result.repositories}, items={result.items}, "
            f"persisted={result.persisted}, failed={len(result.failed_collections)}"
        )


def _transform(args: argparse.Namespace) -> None:
    mapping = args.mapping.read_text()
    payload = json.loads(args.payload.read_text())
    github_config = get_github_app_config()
    resolver = GitHubContentResolver(GitHubApp(github_config) if github_config else None)
    engine = MappingEngine(content_resolver=resolver)
    entities = asyncio.run(engine.transform(payload, args.kind, mapping, args.installation_id))
    print(json.dumps([_entity_json(entity) for entity in entities], indent=2))


def _setup(args: argparse.Namespace) -> None:
    services = load_services()
    context = setup_integration(
        services,
        installation_id=args.installation_id,
        organization_id=args.organization_id,
        tenant_id=args.tenant_id,
        mapping_yaml=args.mapping.read_text() if args.mapping else None,
    )
    print(f"Configured {context.describe()}")
    if args.no_sync:
        return
    result = asyncio.run(services.synchronizer.sync_one(context))
    print(f"Initial sync persisted {result.persisted} entities")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        match args.command:
            case "serve":
                _serve(args)
            case "sync":
                _sync()
            case "transform":
                _transform(args)
            case "setup":
                _setup(args)
    except (ConfigurationError, IngestError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
