"""Abstract base class for vector-store service providers.

A provider manages many named collections (one per tenant) and exposes the
primitives the collection manager and the pipelines need: existence check,
create, upsert, similarity search and deletion.  Implementations wrap
ChromaDB (local, default) or Qdrant (REST).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tenant_rag.models.rag import CollectionInfo, ScoredPoint, VectorPoint


# Concrete implementations (tenant_rag/providers/vector_store/):
#   ChromaDBProvider -- chromadb persistent/HTTP client, cosine space
#   QdrantProvider   -- Qdrant REST API over httpx
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the RAG pipelines.

    The store itself enforces no tenant boundary; callers pass a collection
    name derived from the tenant id on every call.
    """

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        """Return ``True`` if a collection called *name* exists."""

    @abstractmethod
    async def create_collection(self, name: str, dimension: int) -> bool:
        """Create a cosine-similarity collection sized for *dimension*.

        Returns
        -------
        bool
            ``True`` if this call created it, ``False`` if it already
            existed (e.g. a concurrent request won the race).

        Raises
        ------
        tenant_rag.utils.errors.CollectionProvisionError
            On any failure other than "already exists".
        """

    @abstractmethod
    async def get_collection_info(self, name: str) -> CollectionInfo | None:
        """Return size and dimension of *name*, or ``None`` if it is missing."""

    @abstractmethod
    async def delete_collection(self, name: str) -> bool:
        """Drop *name*.  Returns ``False`` if it did not exist."""

    @abstractmethod
    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        """Insert or replace *points* by id and wait for the write to land.

        Returns the number of points written.

        Raises
        ------
        tenant_rag.utils.errors.UpsertError
            If the store rejects or fails the write.
        """

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        min_score: float = 0.0,
    ) -> list[ScoredPoint]:
        """Return up to *top_k* points with ``score >= min_score``.

        Results are sorted by descending score.  An empty list is a valid
        answer and never an error.

        Raises
        ------
        tenant_rag.utils.errors.CollectionNotFoundError
            If *collection* does not exist.
        tenant_rag.utils.errors.SearchError
            On any other store failure.
        """

    @abstractmethod
    async def delete_points(self, collection: str, document_id: str) -> int:
        """Delete every point whose payload ``document_id`` matches.

        Returns the number of points removed when the backend reports it,
        otherwise ``0``.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` if the backend is reachable."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"chromadb"``."""
