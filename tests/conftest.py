"""Shared pytest fixtures for the tenant-rag test suite.

Deterministic in-memory fakes stand in for the embedding service and the
vector store so the pipelines can be exercised without network access.
"""

from __future__ import annotations

import asyncio
import hashlib
import math
from pathlib import Path

import pytest
import pytest_asyncio

from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import CollectionInfo, ScoredPoint, VectorPoint
from tenant_rag.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from tenant_rag.services.collection_manager import CollectionManager
from tenant_rag.services.ingestion.chunker import TextChunker
from tenant_rag.services.ingestion.extractor import TextExtractor
from tenant_rag.services.ingestion.ingestion_service import IngestionService
from tenant_rag.services.query_service import QueryService
from tenant_rag.utils.errors import CollectionNotFoundError

TEST_DIMENSION = 8


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class MockEmbeddingProvider(IEmbeddingProvider):
    """Hash-based embeddings: identical text always yields the identical unit vector."""

    def __init__(self, dimension: int = TEST_DIMENSION) -> None:
        self._dimension = dimension
        self.calls: list[list[str]] = []

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        await asyncio.sleep(0)
        return [self.vector_for(t) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        return (await self.embed_documents([text]))[0]

    def vector_for(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        raw = [digest[i] + 1.0 for i in range(self._dimension)]
        norm = math.sqrt(sum(v * v for v in raw))
        return [v / norm for v in raw]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "mock_embedding"

    def is_available(self) -> bool:
        return True


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class InMemoryVectorStore(IVectorStoreProvider):
    """Dict-backed vector store that yields to the event loop on every call."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, VectorPoint]] = {}
        self.dimensions: dict[str, int] = {}
        self.create_calls = 0

    async def collection_exists(self, name: str) -> bool:
        await asyncio.sleep(0)
        return name in self.collections

    async def create_collection(self, name: str, dimension: int) -> bool:
        self.create_calls += 1
        await asyncio.sleep(0)
        if name in self.collections:
            return False
        self.collections[name] = {}
        self.dimensions[name] = dimension
        return True

    async def get_collection_info(self, name: str) -> CollectionInfo | None:
        await asyncio.sleep(0)
        if name not in self.collections:
            return None
        return CollectionInfo(
            name=name,
            dimension=self.dimensions[name],
            vector_count=len(self.collections[name]),
        )

    async def delete_collection(self, name: str) -> bool:
        await asyncio.sleep(0)
        self.dimensions.pop(name, None)
        return self.collections.pop(name, None) is not None

    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        await asyncio.sleep(0)
        target = self.collections[collection]
        for point in points:
            target[point.id] = point
        return len(points)

    async def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        min_score: float = 0.0,
    ) -> list[ScoredPoint]:
        await asyncio.sleep(0)
        if collection not in self.collections:
            raise CollectionNotFoundError(message=f"{collection} missing")
        hits = [
            ScoredPoint(
                id=p.id,
                score=max(0.0, min(1.0, _cosine(vector, p.vector))),
                payload=dict(p.payload),
            )
            for p in self.collections[collection].values()
        ]
        hits = [h for h in hits if h.score >= min_score]
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:top_k]

    async def delete_points(self, collection: str, document_id: str) -> int:
        await asyncio.sleep(0)
        target = self.collections.get(collection, {})
        doomed = [pid for pid, p in target.items() if p.payload.get("document_id") == document_id]
        for pid in doomed:
            del target[pid]
        return len(doomed)

    async def health_check(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "in_memory"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def collection_manager(vector_store: InMemoryVectorStore) -> CollectionManager:
    return CollectionManager(vector_store=vector_store, dimension=TEST_DIMENSION)


@pytest_asyncio.fixture
async def document_store(tmp_path: Path) -> SQLiteDocumentStore:
    store = SQLiteDocumentStore(db_path=tmp_path / "documents.db")
    await store.initialize()
    return store


@pytest.fixture
def ingestion_service(
    embedding_provider: MockEmbeddingProvider,
    vector_store: InMemoryVectorStore,
    collection_manager: CollectionManager,
    document_store: SQLiteDocumentStore,
) -> IngestionService:
    return IngestionService(
        extractor=TextExtractor(),
        chunker=TextChunker(chunk_size=64, overlap=8),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        collection_manager=collection_manager,
        document_store=document_store,
        batch_size=4,
    )


@pytest.fixture
def query_service(
    embedding_provider: MockEmbeddingProvider,
    vector_store: InMemoryVectorStore,
    collection_manager: CollectionManager,
) -> QueryService:
    return QueryService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        collection_manager=collection_manager,
        default_min_score=0.0,
    )


@pytest.fixture
def sample_text() -> str:
    """Multi-paragraph plain text, several chunks long at chunk_size=64."""
    paragraphs = [
        f"Paragraph {n} covers the refund policy, shipping windows and warranty "
        f"terms for product line {n}. Customers may return items within thirty days."
        for n in range(12)
    ]
    return "\n\n".join(paragraphs)
