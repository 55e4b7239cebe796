"""Interface definitions for every external service tenant-rag talks to.

Concrete adapters live in ``tenant_rag/providers/`` and are wired together
in ``tenant_rag/main.py``.  Services depend only on these ABCs, so tests can
inject in-memory fakes.

    Interface             ->  Concrete implementations
    --------------------------------------------------------------
    IEmbeddingProvider    ->  GeminiEmbeddingProvider, OpenAIEmbeddingProvider,
                              NomicEmbeddingProvider
    IVectorStoreProvider  ->  ChromaDBProvider, QdrantProvider
    IDocumentStore        ->  SQLiteDocumentStore
"""

from tenant_rag.interfaces.document_store import IDocumentStore
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = ["IDocumentStore", "IEmbeddingProvider", "IVectorStoreProvider"]
