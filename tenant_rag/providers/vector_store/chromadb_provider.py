"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` (or ``HttpClient`` when a host is
configured) to implement :class:`IVectorStoreProvider`.  Each tenant gets
its own cosine-space collection; the embedding dimension is recorded in the
collection metadata so mismatches can be detected later.

ChromaDB's client API is synchronous and in-process, so a check-then-create
inside :meth:`create_collection` cannot be interleaved by another coroutine.
"""

from __future__ import annotations

import os
from typing import Any

# Disable ChromaDB's anonymous telemetry before the client is imported.
os.environ.setdefault("ANONYMIZED_TELEMETRY", "False")

import chromadb
import structlog

from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import CollectionInfo, ScoredPoint, VectorPoint
from tenant_rag.utils.errors import (
    CollectionNotFoundError,
    CollectionProvisionError,
    SearchError,
    UpsertError,
)

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that is never called.

    All vectors are computed by our IEmbeddingProvider and passed explicitly,
    so ChromaDB must not download or load its default ONNX model.
    """

    def __init__(self) -> None:
        pass

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "tenant-rag passes pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    @staticmethod
    def name() -> str:
        return "noop_precomputed"

    def get_config(self) -> dict[str, Any]:
        return {}

    @staticmethod
    def build_from_config(config: dict[str, Any]) -> "_NoopEmbeddingFunction":
        return _NoopEmbeddingFunction()


def _collection_names(client: Any) -> set[str]:
    # Older chromadb releases return names, newer ones Collection objects.
    return {getattr(c, "name", c) for c in client.list_collections()}


def _to_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    # Chroma metadata values must be scalars and never None.
    return {
        key: value
        for key, value in payload.items()
        if key != "text" and isinstance(value, (str, int, float, bool))
    }


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB, one collection per tenant."""

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        host: str = "",
        port: int = 8000,
    ) -> None:
        self._persist_directory = persist_directory
        chroma_settings = chromadb.config.Settings(anonymized_telemetry=False)
        if host:
            self._client = chromadb.HttpClient(host=host, port=port, settings=chroma_settings)
        else:
            self._client = chromadb.PersistentClient(
                path=persist_directory,
                settings=chroma_settings,
            )
        self._embedding_function = _NoopEmbeddingFunction()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def collection_exists(self, name: str) -> bool:
        try:
            return name in _collection_names(self._client)
        except Exception as exc:
            raise CollectionProvisionError(
                message=f"ChromaDB collection lookup failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def create_collection(self, name: str, dimension: int) -> bool:
        try:
            if name in _collection_names(self._client):
                return False
            self._client.create_collection(
                name=name,
                metadata={"hnsw:space": "cosine", "dimension": dimension},
                embedding_function=self._embedding_function,
            )
        except Exception as exc:
            if "already exists" in str(exc).lower():
                logger.info("chromadb_collection_exists_on_create", collection=name)
                return False
            raise CollectionProvisionError(
                message=f"ChromaDB create_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_collection_created", collection=name, dimension=dimension)
        return True

    async def get_collection_info(self, name: str) -> CollectionInfo | None:
        if not await self.collection_exists(name):
            return None
        try:
            collection = self._get(name)
            metadata = collection.metadata or {}
            dimension = metadata.get("dimension")
            count = collection.count()
            if dimension is None and count:
                sample = collection.peek(limit=1)
                embeddings = sample.get("embeddings") if sample else None
                if embeddings is not None and len(embeddings) > 0:
                    dimension = len(embeddings[0])
        except Exception as exc:
            raise CollectionProvisionError(
                message=f"ChromaDB get_collection_info failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return CollectionInfo(
            name=name,
            dimension=int(dimension) if dimension is not None else None,
            vector_count=count,
        )

    async def delete_collection(self, name: str) -> bool:
        if not await self.collection_exists(name):
            return False
        try:
            self._client.delete_collection(name=name)
        except Exception as exc:
            raise CollectionProvisionError(
                message=f"ChromaDB delete_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_collection_deleted", collection=name)
        return True

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        if not points:
            return 0
        try:
            self._get(collection).upsert(
                ids=[p.id for p in points],
                embeddings=[p.vector for p in points],
                documents=[str(p.payload.get("text", "")) for p in points],
                metadatas=[_to_metadata(p.payload) for p in points],
            )
        except Exception as exc:
            raise UpsertError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_upsert", collection=collection, count=len(points))
        return len(points)

    async def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        min_score: float = 0.0,
    ) -> list[ScoredPoint]:
        if not await self._exists_for_search(collection):
            raise CollectionNotFoundError(
                message=f"Collection {collection!r} does not exist",
                provider_name=self.get_provider_name(),
            )
        try:
            target = self._get(collection)
            available = target.count()
            if available == 0:
                return []
            results = target.query(
                query_embeddings=[vector],
                n_results=min(top_k, available),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise SearchError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = results["ids"][0] if results.get("ids") else []
        documents = results["documents"][0] if results.get("documents") else [""] * len(ids)
        metadatas = results["metadatas"][0] if results.get("metadatas") else [{}] * len(ids)
        distances = results["distances"][0] if results.get("distances") else [1.0] * len(ids)

        hits: list[ScoredPoint] = []
        for point_id, text, meta, distance in zip(ids, documents, metadatas, distances, strict=True):
            similarity = max(0.0, min(1.0, 1.0 - distance))
            if similarity < min_score:
                continue
            payload = dict(meta or {})
            payload["text"] = text or ""
            hits.append(ScoredPoint(id=point_id, score=similarity, payload=payload))

        hits.sort(key=lambda hit: hit.score, reverse=True)
        logger.info(
            "chromadb_search",
            collection=collection,
            raw_results=len(ids),
            results_count=len(hits),
            top_score=hits[0].score if hits else 0.0,
        )
        return hits[:top_k]

    async def delete_points(self, collection: str, document_id: str) -> int:
        if not await self.collection_exists(collection):
            return 0
        try:
            target = self._get(collection)
            existing = target.get(where={"document_id": document_id}, include=["metadatas"])
            count = len(existing["ids"]) if existing["ids"] else 0
            if count > 0:
                target.delete(where={"document_id": document_id})
        except Exception as exc:
            raise UpsertError(
                message=f"ChromaDB delete_points failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_delete_points",
            collection=collection,
            document_id=document_id,
            deleted_count=count,
        )
        return count

    async def health_check(self) -> bool:
        try:
            self._client.heartbeat()
        except Exception as exc:
            logger.warning("chromadb_health_check_failed", error=str(exc))
            return False
        return True

    def get_provider_name(self) -> str:
        return "chromadb"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get(self, name: str) -> Any:
        return self._client.get_collection(name=name, embedding_function=self._embedding_function)

    async def _exists_for_search(self, name: str) -> bool:
        try:
            return name in _collection_names(self._client)
        except Exception as exc:
            raise SearchError(
                message=f"ChromaDB collection lookup failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
