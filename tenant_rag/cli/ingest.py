"""Standalone CLI for managing tenants and their documents.

Usage::

    python -m tenant_rag.cli.ingest create acme
    python -m tenant_rag.cli.ingest text acme "First document." "Second one."
    python -m tenant_rag.cli.ingest pdf acme --file report.pdf --title "Q3 Report"
    python -m tenant_rag.cli.ingest txt acme --file notes.txt
    python -m tenant_rag.cli.ingest batch acme --file documents.json
    python -m tenant_rag.cli.ingest clear acme --yes
    python -m tenant_rag.cli.ingest delete acme --yes

Providers are selected from the same environment variables / ``.env``
file as the API server.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from tenant_rag.config.settings import Settings
from tenant_rag.utils.errors import RagPipelineError, ValidationError

_DEFAULT_TITLE = "Untitled Document"
_DEFAULT_AUTHOR = "Unknown Author"


def _file_metadata(path: Path, data: bytes, title: str | None, author: str | None) -> dict[str, Any]:
    return {
        "title": title or _DEFAULT_TITLE,
        "author": author or _DEFAULT_AUTHOR,
        "filename": path.name,
        "filesize": len(data),
    }


def _load_batch(path: Path) -> list:
    """Read a batch file: ``{"documents": [...]}`` or a bare JSON list."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(message=f"Batch file is not valid JSON: {exc}", stage="validate") from exc
    if isinstance(payload, dict):
        return payload.get("documents")
    return payload


def _print_results(results: list) -> None:  # noqa: ANN001
    total_chunks = sum(r.chunk_count for r in results)
    total_time = sum(r.elapsed_seconds for r in results)
    print("\nIngestion complete:")
    print(f"  Documents:      {len(results)}")
    print(f"  Chunks created: {total_chunks}")
    print(f"  Time:           {total_time:.2f}s")
    for result in results:
        print(f"  Document ID:    {result.document_id} ({result.chunk_count} chunks)")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_create(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ensure the shared index is ready and register the tenant."""
    result = await components["namespace_service"].create_tenant(args.tenant)
    print(result.message)
    return 0


async def _handle_clear(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Delete every document of a tenant, keeping the tenant registered."""
    namespaces = components["namespace_service"]
    count = await namespaces.document_count(args.tenant)
    if count == 0:
        print(f"No documents found for tenant {args.tenant}. Nothing to clear.")
        return 0

    if not args.yes:
        confirm = input(f"  Delete all {count} records of tenant {args.tenant}? [y/N] ").strip().lower()
        if confirm not in ("y", "yes"):
            print("  Aborted.")
            return 0

    result = await namespaces.clear_namespace(args.tenant)
    print(result.message)
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Delete every document of a tenant and forget the tenant."""
    if not args.yes:
        confirm = input(f"  Delete tenant {args.tenant} and all of its documents? [y/N] ").strip().lower()
        if confirm not in ("y", "yes"):
            print("  Aborted.")
            return 0

    result = await components["namespace_service"].delete_tenant(args.tenant)
    print(result.message)
    return 0


async def _handle_text(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest documents given inline on the command line."""
    print(f"Ingesting {len(args.documents)} document(s) for tenant {args.tenant}")
    results = await components["ingestion_service"].ingest_many(args.tenant, list(args.documents))
    _print_results(results)
    return 0


async def _handle_pdf(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a PDF file."""
    path = Path(args.file)
    print(f"Ingesting PDF for tenant {args.tenant}")
    print(f"  File: {path}")
    data = path.read_bytes()
    result = await components["ingestion_service"].ingest_pdf(
        args.tenant, data, _file_metadata(path, data, args.title, args.author)
    )
    _print_results([result])
    return 0


async def _handle_txt(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a plain-text file."""
    path = Path(args.file)
    print(f"Ingesting text file for tenant {args.tenant}")
    print(f"  File: {path}")
    data = path.read_bytes()
    result = await components["ingestion_service"].ingest_text_file(
        args.tenant, data, _file_metadata(path, data, args.title, args.author)
    )
    _print_results([result])
    return 0


async def _handle_batch(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest every document listed in a JSON batch file."""
    documents = _load_batch(Path(args.file))
    print(f"Ingesting batch {args.file} for tenant {args.tenant}")
    results = await components["ingestion_service"].ingest_many(args.tenant, documents)
    _print_results(results)
    return 0


_HANDLERS = {
    "create": _handle_create,
    "clear": _handle_clear,
    "delete": _handle_delete,
    "text": _handle_text,
    "pdf": _handle_pdf,
    "txt": _handle_txt,
    "batch": _handle_batch,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build the providers, run one subcommand, release the HTTP client."""
    from tenant_rag.config.loader import load_config
    from tenant_rag.main import build_components

    components = build_components(app_settings, load_config(settings=app_settings))
    try:
        await components["tenant_registry"].initialize()
        return await _HANDLERS[args.command](args, components)
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m tenant_rag.cli.ingest",
        description="Manage tenants and ingest their documents.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Tenant and ingestion commands")

    # -- create --
    create_parser = subparsers.add_parser("create", help="Create a tenant (ensures the index exists)")
    create_parser.add_argument("tenant", help="Tenant ID")

    # -- clear / delete --
    clear_parser = subparsers.add_parser("clear", help="Delete all documents of a tenant")
    clear_parser.add_argument("tenant", help="Tenant ID")
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    delete_parser = subparsers.add_parser("delete", help="Delete a tenant and all of its documents")
    delete_parser.add_argument("tenant", help="Tenant ID")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    # -- text --
    text_parser = subparsers.add_parser("text", help="Ingest documents passed as arguments")
    text_parser.add_argument("tenant", help="Tenant ID")
    text_parser.add_argument("documents", nargs="+", help="Document text (one argument per document)")

    # -- pdf / txt --
    for name, label in (("pdf", "a PDF file"), ("txt", "a plain-text file")):
        file_parser = subparsers.add_parser(name, help=f"Ingest {label}")
        file_parser.add_argument("tenant", help="Tenant ID")
        file_parser.add_argument("--file", required=True, help="Path to the file")
        file_parser.add_argument("--title", default=None, help=f"Document title (default: {_DEFAULT_TITLE})")
        file_parser.add_argument("--author", default=None, help=f"Author name (default: {_DEFAULT_AUTHOR})")

    # -- batch --
    batch_parser = subparsers.add_parser("batch", help="Ingest documents listed in a JSON file")
    batch_parser.add_argument("tenant", help="Tenant ID")
    batch_parser.add_argument(
        "--file",
        required=True,
        help='JSON file holding {"documents": ["...", ...]} or a bare list of strings',
    )

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ingestion tool.

    Parses the subcommand, loads Settings from the environment / .env file
    and dispatches to the handler.  Pipeline errors are printed to stderr
    and exit with status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    try:
        exit_code = asyncio.run(_run(args, app_settings))
    except RagPipelineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
