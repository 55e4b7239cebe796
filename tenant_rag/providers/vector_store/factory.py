"""Vector store backend selection from settings."""

from __future__ import annotations

import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


def build_vector_store(settings: Settings) -> IVectorStoreProvider:
    """Return the vector store named by ``VECTOR_STORE_BACKEND``."""
    backend = settings.vector_store_backend.strip().lower()

    if backend == "chromadb":
        from tenant_rag.providers.vector_store.chromadb_provider import ChromaDBProvider

        store: IVectorStoreProvider = ChromaDBProvider(
            persist_directory=settings.chromadb_persist_dir,
            host=settings.chromadb_host,
            port=settings.chromadb_port,
        )
    elif backend == "qdrant":
        from tenant_rag.providers.vector_store.qdrant_provider import QdrantProvider

        if not settings.qdrant_url:
            raise ConfigurationError(message="QDRANT_URL is required", provider_name="qdrant")
        store = QdrantProvider(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            timeout=settings.qdrant_timeout,
        )
    else:
        raise ConfigurationError(
            message=f"Unknown VECTOR_STORE_BACKEND {backend!r}; expected 'chromadb' or 'qdrant'"
        )

    logger.info("vector_store_selected", backend=store.get_provider_name())
    return store
