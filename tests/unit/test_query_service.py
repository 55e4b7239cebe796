"""Unit tests for QueryService -- tenant-scoped retrieval with source attribution."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from tenant_rag.models.rag import QueryOptions, ResultMetadata, RetrievedResult, ScoredPoint, VectorPoint
from tenant_rag.services.collection_manager import CollectionManager
from tenant_rag.services.query_service import QueryService, build_context
from tenant_rag.utils.errors import InvalidTenantError, SearchError
from tests.conftest import InMemoryVectorStore, MockEmbeddingProvider


async def _seed(
    store: InMemoryVectorStore,
    embedder: MockEmbeddingProvider,
    manager: CollectionManager,
    tenant_id: str,
    texts: list[str],
    source: str = "handbook.pdf",
) -> None:
    collection = await manager.ensure_collection_exists(tenant_id)
    points = [
        VectorPoint(
            id=f"{tenant_id}-{i}",
            vector=embedder.vector_for(text),
            payload={"document_id": "doc-1", "chunk_index": i, "text": text, "source": source},
        )
        for i, text in enumerate(texts)
    ]
    await store.upsert(collection, points)


class TestQuery:
    @pytest.mark.asyncio
    async def test_exact_match_ranks_first(
        self, query_service, vector_store, embedding_provider, collection_manager
    ) -> None:
        texts = ["refund policy details", "shipping windows", "warranty coverage"]
        await _seed(vector_store, embedding_provider, collection_manager, "acme", texts)

        results = await query_service.query("shipping windows", tenant_id="acme")

        assert results[0].content == "shipping windows"
        assert results[0].score == pytest.approx(1.0)
        assert results[0].metadata.source == "handbook.pdf"
        assert results[0].metadata.chunk_index == 1
        assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)

    @pytest.mark.asyncio
    async def test_tenants_are_isolated(
        self, query_service, vector_store, embedding_provider, collection_manager
    ) -> None:
        await _seed(vector_store, embedding_provider, collection_manager, "acme", ["acme secret"])
        await _seed(vector_store, embedding_provider, collection_manager, "globex", ["globex plan"])

        results = await query_service.query("acme secret", tenant_id="globex")

        assert all(r.content != "acme secret" for r in results)

    @pytest.mark.asyncio
    async def test_top_k_and_min_score(
        self, query_service, vector_store, embedding_provider, collection_manager
    ) -> None:
        texts = [f"passage number {n}" for n in range(10)]
        await _seed(vector_store, embedding_provider, collection_manager, "acme", texts)

        capped = await query_service.query(
            "passage number 3", tenant_id="acme", options=QueryOptions(top_k=2)
        )
        assert len(capped) == 2

        strict = await query_service.query(
            "passage number 3", tenant_id="acme", options=QueryOptions(min_score=0.9999)
        )
        assert [r.content for r in strict] == ["passage number 3"]

    @pytest.mark.asyncio
    async def test_no_collection_returns_empty(self, query_service) -> None:
        assert await query_service.query("anything", tenant_id="newcomer") == []

    @pytest.mark.asyncio
    async def test_blank_query_returns_empty(self, query_service, embedding_provider) -> None:
        assert await query_service.query("   ", tenant_id="acme") == []
        assert embedding_provider.calls == []

    @pytest.mark.asyncio
    async def test_invalid_tenant(self, query_service) -> None:
        with pytest.raises(InvalidTenantError):
            await query_service.query("hello", tenant_id="not/valid")

    @pytest.mark.asyncio
    async def test_long_content_truncated(
        self, vector_store, embedding_provider, collection_manager
    ) -> None:
        service = QueryService(
            embedding_provider, vector_store, collection_manager, default_min_score=0.0, preview_chars=20
        )
        long_text = "word " * 50
        await _seed(vector_store, embedding_provider, collection_manager, "acme", [long_text])

        results = await service.query(long_text, tenant_id="acme")

        assert results[0].content.endswith("...")
        assert len(results[0].content) <= 23

    @pytest.mark.asyncio
    async def test_search_errors_propagate(self, embedding_provider, collection_manager) -> None:
        store = AsyncMock()
        store.search = AsyncMock(side_effect=SearchError(message="timeout", provider_name="qdrant"))
        service = QueryService(embedding_provider, store, collection_manager)

        with pytest.raises(SearchError):
            await service.query("hello", tenant_id="acme")

    @pytest.mark.asyncio
    async def test_missing_source_is_unknown(self, embedding_provider, collection_manager) -> None:
        store = AsyncMock()
        store.search = AsyncMock(
            return_value=[ScoredPoint(id="x", score=0.8, payload={"text": "orphan", "document_id": "d"})]
        )
        service = QueryService(embedding_provider, store, collection_manager)

        results = await service.query("hello", tenant_id="acme")

        assert results[0].metadata.source == "Unknown"
        assert results[0].metadata.chunk_index is None


class TestBuildContext:
    def test_renders_sources(self) -> None:
        results = [
            RetrievedResult(
                content="Refunds within 30 days.",
                score=0.9,
                metadata=ResultMetadata(source="policy.pdf", document_id="d1", chunk_index=0),
            ),
            RetrievedResult(
                content="Ships in 2 days.",
                score=0.7,
                metadata=ResultMetadata(source="shipping.txt", document_id="d2", chunk_index=4),
            ),
        ]
        assert build_context(results) == (
            "Source: policy.pdf\nRefunds within 30 days.\n\nSource: shipping.txt\nShips in 2 days."
        )

    def test_empty(self) -> None:
        assert build_context([]) == ""
