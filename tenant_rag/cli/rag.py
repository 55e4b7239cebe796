"""Standalone CLI for ingesting into and querying tenant collections.

Usage::

    python -m tenant_rag.cli.rag ingest --tenant acme --file /path/to/handbook.pdf

    python -m tenant_rag.cli.rag query --tenant acme --text "refund policy" --top-k 3

    python -m tenant_rag.cli.rag stats --tenant acme

    python -m tenant_rag.cli.rag delete --tenant acme --document-id <id>

    python -m tenant_rag.cli.rag drop --tenant acme

Providers are chosen from the same environment variables / ``.env`` file as
the web app, so both entry points read and write the same collections.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from tenant_rag.config.settings import Settings
from tenant_rag.models.rag import QueryOptions
from tenant_rag.utils.errors import TenantRAGError
from tenant_rag.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest one local file into the tenant's collection."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}")
        return 1

    result = await components["ingestion_service"].ingest(
        path.read_bytes(), path.name, tenant_id=args.tenant
    )

    print(f"Ingested: {result.filename}")
    print(f"  Document id:  {result.document_id}")
    print(f"  Chunks:       {result.chunk_count}")
    print(f"  Pages:        {result.page_count}")
    print(f"  Tokens (est): {result.total_tokens}")
    print(f"  Time:         {result.ingestion_time:.2f}s")
    return 0


async def _handle_query(args: argparse.Namespace, components: dict[str, Any]) -> int:
    results = await components["query_service"].query(
        args.text,
        tenant_id=args.tenant,
        options=QueryOptions(top_k=args.top_k, min_score=args.min_score),
    )
    if not results:
        print("No results.")
        return 0

    for rank, result in enumerate(results, start=1):
        print(
            f"{rank}. [{result.score:.3f}] {result.metadata.source} "
            f"(chunk {result.metadata.chunk_index})"
        )
        print(f"   {result.content}")
    return 0


async def _handle_stats(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Display collection statistics for one tenant."""
    stats = await components["collection_manager"].get_stats(args.tenant)

    print("Collection Statistics")
    print("=" * 40)
    print(f"  Collection:   {stats.collection_name}")
    print(f"  Exists:       {'yes' if stats.exists else 'no'}")
    print(f"  Vectors:      {stats.vector_count}")
    print(f"  Dimension:    {stats.dimension if stats.dimension is not None else '-'}")
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    deleted = await components["ingestion_service"].delete_document(
        args.document_id, tenant_id=args.tenant
    )
    print(f"Deleted {deleted} vector(s) for document {args.document_id}")
    return 0


async def _handle_drop(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Drop the tenant's whole collection.  Document records are left as they are."""
    deleted = await components["collection_manager"].delete_collection(args.tenant)
    if deleted:
        print(f"Dropped collection for tenant {args.tenant}")
    else:
        print(f"No collection for tenant {args.tenant}")
    return 0


_HANDLERS = {
    "ingest": _handle_ingest,
    "query": _handle_query,
    "stats": _handle_stats,
    "delete": _handle_delete,
    "drop": _handle_drop,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Assemble services, dispatch one command, then release clients."""
    from tenant_rag.main import build_services, close_services

    try:
        components = build_services(app_settings)
    except TenantRAGError as exc:
        return _report_error(exc)

    try:
        await components["document_store"].initialize()
        return await _HANDLERS[args.command](args, components)
    except TenantRAGError as exc:
        return _report_error(exc)
    finally:
        await close_services(components)


def _report_error(exc: TenantRAGError) -> int:
    print(f"Error ({type(exc).__name__}): {exc}")
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the tenant-rag CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m tenant_rag.cli.rag",
        description="Ingest documents into and query per-tenant vector collections.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- ingest --
    ingest_parser = subparsers.add_parser("ingest", help="Ingest a pdf, docx or txt file")
    ingest_parser.add_argument("--tenant", required=True, help="Tenant identifier")
    ingest_parser.add_argument("--file", required=True, help="Path to the document")

    # -- query --
    query_parser = subparsers.add_parser("query", help="Retrieve relevant chunks")
    query_parser.add_argument("--tenant", required=True, help="Tenant identifier")
    query_parser.add_argument("--text", required=True, help="Query text")
    query_parser.add_argument("--top-k", type=int, default=None, help="Maximum results")
    query_parser.add_argument(
        "--min-score", type=float, default=None, help="Minimum similarity (0-1)"
    )

    # -- stats --
    stats_parser = subparsers.add_parser("stats", help="Show collection statistics")
    stats_parser.add_argument("--tenant", required=True, help="Tenant identifier")

    # -- delete --
    delete_parser = subparsers.add_parser("delete", help="Delete one document's vectors")
    delete_parser.add_argument("--tenant", required=True, help="Tenant identifier")
    delete_parser.add_argument("--document-id", required=True, help="Document id")

    # -- drop --
    drop_parser = subparsers.add_parser("drop", help="Drop the tenant's vector collection")
    drop_parser.add_argument("--tenant", required=True, help="Tenant identifier")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level)
    return asyncio.run(_run(args, app_settings))


if __name__ == "__main__":
    sys.exit(main())
