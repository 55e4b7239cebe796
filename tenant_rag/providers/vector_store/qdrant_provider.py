"""Qdrant vector store provider adapter.

Talks to the Qdrant REST API over ``httpx``.  Each tenant collection is
created with cosine distance, an explicit HNSW config and keyword payload
indexes on ``document_id`` and ``tenant_id`` so document deletion and
filtered maintenance stay cheap.  Writes use ``wait=true`` so an upsert only
returns once the points are durable.
"""

from __future__ import annotations

from typing import Any

import httpx
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

_HNSW_CONFIG = {"m": 16, "ef_construct": 100}
_OPTIMIZERS_CONFIG = {"indexing_threshold": 20000}
_INDEXED_PAYLOAD_FIELDS = ("document_id", "tenant_id")


def _document_filter(document_id: str) -> dict[str, Any]:
    return {"must": [{"key": "document_id", "match": {"value": document_id}}]}


def _is_already_exists(response: httpx.Response) -> bool:
    if response.status_code == 409:
        return True
    return response.status_code == 400 and "already exists" in response.text.lower()


class QdrantProvider(IVectorStoreProvider):
    """Vector store provider backed by a Qdrant server."""

    def __init__(
        self,
        url: str = "http://localhost:6333",
        api_key: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"api-key": api_key} if api_key else {}
        self._client = http_client or httpx.AsyncClient(
            base_url=url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def collection_exists(self, name: str) -> bool:
        try:
            response = await self._client.get(f"/collections/{name}/exists")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollectionProvisionError(
                message=f"Qdrant collection lookup failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return bool(response.json().get("result", {}).get("exists", False))

    async def create_collection(self, name: str, dimension: int) -> bool:
        body = {
            "vectors": {"size": dimension, "distance": "Cosine"},
            "hnsw_config": _HNSW_CONFIG,
            "optimizers_config": _OPTIMIZERS_CONFIG,
        }
        try:
            response = await self._client.put(f"/collections/{name}", json=body)
            if _is_already_exists(response):
                logger.info("qdrant_collection_exists_on_create", collection=name)
                return False
            response.raise_for_status()
            for field_name in _INDEXED_PAYLOAD_FIELDS:
                index_response = await self._client.put(
                    f"/collections/{name}/index",
                    params={"wait": "true"},
                    json={"field_name": field_name, "field_schema": "keyword"},
                )
                index_response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollectionProvisionError(
                message=f"Qdrant create_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("qdrant_collection_created", collection=name, dimension=dimension)
        return True

    async def get_collection_info(self, name: str) -> CollectionInfo | None:
        try:
            response = await self._client.get(f"/collections/{name}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollectionProvisionError(
                message=f"Qdrant get_collection_info failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        result = response.json().get("result", {})
        vectors = result.get("config", {}).get("params", {}).get("vectors", {})
        dimension = vectors.get("size") if isinstance(vectors, dict) else None
        count = result.get("points_count") or result.get("vectors_count") or 0
        return CollectionInfo(name=name, dimension=dimension, vector_count=count)

    async def delete_collection(self, name: str) -> bool:
        try:
            response = await self._client.delete(f"/collections/{name}")
            if response.status_code == 404:
                return False
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollectionProvisionError(
                message=f"Qdrant delete_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        deleted = bool(response.json().get("result", False))
        logger.info("qdrant_collection_deleted", collection=name, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    async def upsert(self, collection: str, points: list[VectorPoint]) -> int:
        if not points:
            return 0
        body = {
            "points": [
                {"id": p.id, "vector": p.vector, "payload": p.payload} for p in points
            ]
        }
        try:
            response = await self._client.put(
                f"/collections/{collection}/points",
                params={"wait": "true"},
                json=body,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpsertError(
                message=f"Qdrant upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("qdrant_upsert", collection=collection, count=len(points))
        return len(points)

    async def search(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        min_score: float = 0.0,
    ) -> list[ScoredPoint]:
        body = {
            "vector": vector,
            "limit": top_k,
            "score_threshold": min_score,
            "with_payload": True,
        }
        try:
            response = await self._client.post(
                f"/collections/{collection}/points/search",
                json=body,
            )
            if response.status_code == 404:
                raise CollectionNotFoundError(
                    message=f"Collection {collection!r} does not exist",
                    provider_name=self.get_provider_name(),
                )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SearchError(
                message=f"Qdrant search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        hits = [
            ScoredPoint(
                id=str(item["id"]),
                score=max(0.0, min(1.0, float(item.get("score", 0.0)))),
                payload=item.get("payload") or {},
            )
            for item in response.json().get("result", [])
        ]
        hits = [hit for hit in hits if hit.score >= min_score]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        logger.info(
            "qdrant_search",
            collection=collection,
            results_count=len(hits),
            top_score=hits[0].score if hits else 0.0,
        )
        return hits[:top_k]

    async def delete_points(self, collection: str, document_id: str) -> int:
        point_filter = _document_filter(document_id)
        try:
            count_response = await self._client.post(
                f"/collections/{collection}/points/count",
                json={"filter": point_filter, "exact": True},
            )
            if count_response.status_code == 404:
                return 0
            count_response.raise_for_status()
            count = int(count_response.json().get("result", {}).get("count", 0))
            if count:
                response = await self._client.post(
                    f"/collections/{collection}/points/delete",
                    params={"wait": "true"},
                    json={"filter": point_filter},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpsertError(
                message=f"Qdrant delete_points failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "qdrant_delete_points",
            collection=collection,
            document_id=document_id,
            deleted_count=count,
        )
        return count

    async def health_check(self) -> bool:
        try:
            response = await self._client.get("/healthz")
        except httpx.HTTPError as exc:
            logger.warning("qdrant_health_check_failed", error=str(exc))
            return False
        return response.status_code == 200

    def get_provider_name(self) -> str:
        return "qdrant"
