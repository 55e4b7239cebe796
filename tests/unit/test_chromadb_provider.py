"""Unit tests for the ChromaDB vector store provider (local persistent client)."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from tenant_rag.models.rag import VectorPoint
from tenant_rag.providers.vector_store.chromadb_provider import ChromaDBProvider
from tenant_rag.utils.errors import CollectionNotFoundError

_COLLECTION = "partner_acme"


def _point(point_id: str, vector: list[float], document_id: str = "doc-1", index: int = 0) -> VectorPoint:
    return VectorPoint(
        id=point_id,
        vector=vector,
        payload={
            "document_id": document_id,
            "chunk_index": index,
            "text": f"chunk {index} of {document_id}",
            "source": f"{document_id}.pdf",
            "tenant_id": "acme",
            "page_count": 3,
        },
    )


@pytest.fixture
def provider(tmp_path: Path) -> ChromaDBProvider:
    return ChromaDBProvider(persist_directory=str(tmp_path / "chroma"))


class TestCollections:
    @pytest.mark.asyncio
    async def test_create_is_idempotent(self, provider: ChromaDBProvider) -> None:
        assert await provider.collection_exists(_COLLECTION) is False
        assert await provider.create_collection(_COLLECTION, 2) is True
        assert await provider.create_collection(_COLLECTION, 2) is False
        assert await provider.collection_exists(_COLLECTION) is True

    @pytest.mark.asyncio
    async def test_collection_info(self, provider: ChromaDBProvider) -> None:
        assert await provider.get_collection_info(_COLLECTION) is None

        await provider.create_collection(_COLLECTION, 2)
        await provider.upsert(_COLLECTION, [_point("p1", [1.0, 0.0])])
        info = await provider.get_collection_info(_COLLECTION)

        assert info is not None
        assert info.dimension == 2
        assert info.vector_count == 1

    @pytest.mark.asyncio
    async def test_delete_collection(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        assert await provider.delete_collection(_COLLECTION) is True
        assert await provider.delete_collection(_COLLECTION) is False


class TestSearch:
    @pytest.mark.asyncio
    async def test_min_score_filters_everything(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        await provider.upsert(_COLLECTION, [_point("p1", [0.5, math.sqrt(0.75)])])

        assert await provider.search(_COLLECTION, [1.0, 0.0], top_k=5, min_score=0.9) == []

        hits = await provider.search(_COLLECTION, [1.0, 0.0], top_k=5, min_score=0.0)
        assert len(hits) == 1
        assert hits[0].score == pytest.approx(0.5, abs=1e-3)

    @pytest.mark.asyncio
    async def test_results_sorted_and_capped(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        await provider.upsert(
            _COLLECTION,
            [
                _point("far", [0.0, 1.0], index=0),
                _point("near", [1.0, 0.05], index=1),
                _point("mid", [1.0, 1.0], index=2),
            ],
        )

        hits = await provider.search(_COLLECTION, [1.0, 0.0], top_k=2)

        assert [h.id for h in hits] == ["near", "mid"]
        assert hits[0].score >= hits[1].score
        assert hits[0].payload["text"] == "chunk 1 of doc-1"
        assert hits[0].payload["source"] == "doc-1.pdf"
        assert hits[0].payload["chunk_index"] == 1

    @pytest.mark.asyncio
    async def test_empty_collection(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        assert await provider.search(_COLLECTION, [1.0, 0.0], top_k=3) == []

    @pytest.mark.asyncio
    async def test_missing_collection(self, provider: ChromaDBProvider) -> None:
        with pytest.raises(CollectionNotFoundError):
            await provider.search("partner_nobody", [1.0, 0.0], top_k=3)


class TestPoints:
    @pytest.mark.asyncio
    async def test_upsert_same_id_replaces(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        await provider.upsert(_COLLECTION, [_point("p1", [1.0, 0.0])])
        await provider.upsert(_COLLECTION, [_point("p1", [0.0, 1.0])])

        info = await provider.get_collection_info(_COLLECTION)
        assert info is not None
        assert info.vector_count == 1

    @pytest.mark.asyncio
    async def test_upsert_empty_list(self, provider: ChromaDBProvider) -> None:
        assert await provider.upsert(_COLLECTION, []) == 0

    @pytest.mark.asyncio
    async def test_delete_points_by_document(self, provider: ChromaDBProvider) -> None:
        await provider.create_collection(_COLLECTION, 2)
        await provider.upsert(
            _COLLECTION,
            [
                _point("a0", [1.0, 0.0], document_id="doc-a", index=0),
                _point("a1", [0.9, 0.1], document_id="doc-a", index=1),
                _point("b0", [0.0, 1.0], document_id="doc-b", index=0),
            ],
        )

        assert await provider.delete_points(_COLLECTION, "doc-a") == 2
        assert await provider.delete_points(_COLLECTION, "doc-a") == 0
        info = await provider.get_collection_info(_COLLECTION)
        assert info is not None
        assert info.vector_count == 1

    @pytest.mark.asyncio
    async def test_delete_points_missing_collection(self, provider: ChromaDBProvider) -> None:
        assert await provider.delete_points("partner_nobody", "doc-a") == 0


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_check(self, provider: ChromaDBProvider) -> None:
        assert await provider.health_check() is True
        assert provider.get_provider_name() == "chromadb"
