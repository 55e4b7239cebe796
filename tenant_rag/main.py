"""tenant-rag FastAPI application entry point.

Wires providers, services and routes together via dependency injection.
Configuration comes from environment variables and ``.env`` (see
:class:`~tenant_rag.config.settings.Settings`).

``build_services`` is also used by the CLI so both entry points share one
assembly path.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from tenant_rag.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from tenant_rag.api.routes import router as api_router
from tenant_rag.config.settings import Settings
from tenant_rag.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from tenant_rag.providers.embedding.factory import build_embedding_provider
from tenant_rag.providers.vector_store.factory import build_vector_store
from tenant_rag.services.collection_manager import CollectionManager
from tenant_rag.services.ingestion.chunker import TextChunker
from tenant_rag.services.ingestion.extractor import TextExtractor
from tenant_rag.services.ingestion.ingestion_service import IngestionService
from tenant_rag.services.query_service import QueryService
from tenant_rag.utils.logging import configure_logging, get_logger

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Dependency assembly
# ---------------------------------------------------------------------------


def build_services(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service for the application.

    Returns a flat dict of named components, stored on ``app.state`` by the
    web app and used directly by the CLI.

    Raises
    ------
    ConfigurationError
        If no embedding provider is configured or the vector store backend
        is unknown.
    """
    embedding_provider = build_embedding_provider(app_settings)
    vector_store = build_vector_store(app_settings)
    document_store = SQLiteDocumentStore(db_path=app_settings.document_db_path)

    collection_manager = CollectionManager(
        vector_store=vector_store,
        dimension=embedding_provider.get_dimension(),
        prefix=app_settings.collection_prefix,
    )
    ingestion_service = IngestionService(
        extractor=TextExtractor(min_content_chars=app_settings.min_content_chars),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size_tokens,
            overlap=app_settings.chunk_overlap_tokens,
            chars_per_token=app_settings.chars_per_token,
        ),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        collection_manager=collection_manager,
        document_store=document_store,
        batch_size=app_settings.ingest_batch_size,
        upsert_concurrency=app_settings.upsert_concurrency,
        max_file_size_bytes=app_settings.max_file_size_bytes,
    )
    query_service = QueryService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        collection_manager=collection_manager,
        default_top_k=app_settings.query_top_k,
        default_min_score=app_settings.query_min_score,
        preview_chars=app_settings.preview_chars,
    )

    return {
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "document_store": document_store,
        "collection_manager": collection_manager,
        "ingestion_service": ingestion_service,
        "query_service": query_service,
    }


async def close_services(components: dict[str, Any]) -> None:
    """Release network clients held by the components."""
    close = getattr(components.get("vector_store"), "close", None)
    if close is not None:
        await close()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build all services on startup, close network clients on shutdown."""
    components = build_services(settings)
    for key, value in components.items():
        setattr(application.state, key, value)

    await components["document_store"].initialize()

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        embedding_provider=components["embedding_provider"].get_provider_name(),
        vector_store=components["vector_store"].get_provider_name(),
    )

    yield

    await close_services(components)
    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="tenant-rag API",
        version="0.1.0",
        description=(
            "Upload documents per tenant, then retrieve the most relevant "
            "passages with source attribution for grounded chat answers."
        ),
        lifespan=_lifespan,
    )

    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "tenant_rag.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "development",
    )
