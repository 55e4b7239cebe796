"""Conversational retrieval over one tenant's documents.

:meth:`QueryService.query` embeds the question, searches the tenant's
collection and returns :class:`RetrievedResult` objects with a short preview
and source attribution for citation display.  :func:`build_context` renders
results into the grounding block a chat handler puts in its prompt.

There is no caching: every call re-embeds and re-searches.
"""

from __future__ import annotations

import structlog

from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import QueryOptions, ResultMetadata, RetrievedResult, ScoredPoint
from tenant_rag.services.collection_manager import CollectionManager
from tenant_rag.utils.errors import CollectionNotFoundError

logger = structlog.get_logger(logger_name=__name__)


def _preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def build_context(results: list[RetrievedResult]) -> str:
    """Render *results* as ``Source: <file>`` blocks separated by blank lines."""
    return "\n\n".join(
        f"Source: {result.metadata.source}\n{result.content}" for result in results
    )


class QueryService:
    """Embeds a query and searches the caller's tenant collection.

    Parameters
    ----------
    embedding_provider:
        Provider used to embed the query text.
    vector_store:
        Backend holding tenant collections.
    collection_manager:
        Resolves tenant ids to collection names.
    default_top_k, default_min_score:
        Used when the caller's :class:`QueryOptions` leaves a field unset.
    preview_chars:
        Maximum length of ``RetrievedResult.content``.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        collection_manager: CollectionManager,
        default_top_k: int = 5,
        default_min_score: float = 0.4,
        preview_chars: int = 300,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._collection_manager = collection_manager
        self._default_top_k = default_top_k
        self._default_min_score = default_min_score
        self._preview_chars = preview_chars

    async def query(
        self,
        text: str,
        *,
        tenant_id: str,
        options: QueryOptions | None = None,
    ) -> list[RetrievedResult]:
        """Return the tenant's most similar chunks for *text*.

        Results are sorted by descending score and never include a score
        below ``min_score``.  An empty list means nothing relevant was
        found, including when the tenant has not uploaded anything yet.

        Raises
        ------
        InvalidTenantError
            If *tenant_id* is not namespace-safe.
        EmbeddingProviderError
            If the query could not be embedded.
        SearchError
            If the vector store fails.
        """
        collection = self._collection_manager.collection_name(tenant_id)
        options = options or QueryOptions()
        top_k = options.top_k if options.top_k is not None else self._default_top_k
        min_score = (
            options.min_score if options.min_score is not None else self._default_min_score
        )

        if not text.strip():
            return []

        vector = await self._embedding_provider.embed_query(text)
        try:
            hits = await self._vector_store.search(collection, vector, top_k, min_score)
        except CollectionNotFoundError:
            logger.info("query_no_collection", tenant_id=tenant_id, collection=collection)
            return []

        results = [self._to_result(hit) for hit in hits]
        logger.info(
            "query_complete",
            tenant_id=tenant_id,
            query_length=len(text),
            top_k=top_k,
            min_score=min_score,
            results_count=len(results),
            top_score=results[0].score if results else 0.0,
        )
        return results

    def _to_result(self, hit: ScoredPoint) -> RetrievedResult:
        payload = hit.payload
        chunk_index = payload.get("chunk_index")
        return RetrievedResult(
            content=_preview(str(payload.get("text", "")), self._preview_chars),
            score=hit.score,
            metadata=ResultMetadata(
                source=str(payload.get("source") or "Unknown"),
                document_id=str(payload.get("document_id", "")),
                chunk_index=int(chunk_index) if chunk_index is not None else None,
            ),
        )
