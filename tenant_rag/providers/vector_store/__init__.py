"""Vector store provider implementations.

    ChromaDBProvider -- local persistent (or remote HTTP) ChromaDB, the default.
    QdrantProvider   -- Qdrant REST API over httpx.

Backends are imported lazily by ``build_vector_store`` so a deployment only
loads the client it uses.
"""

from tenant_rag.providers.vector_store.factory import build_vector_store

__all__ = ["build_vector_store"]
