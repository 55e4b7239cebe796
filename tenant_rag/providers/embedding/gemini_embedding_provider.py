"""Google Gemini embedding provider adapter.

Wraps the ``google-genai`` async client.  The Gemini embed endpoint takes
one text per request here, so each batch fans its items out concurrently
and the first failed request cancels the rest of its batch.
"""

from __future__ import annotations

import functools
from collections.abc import Sequence

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from tenant_rag.config.settings import Settings
from tenant_rag.providers.embedding.base import BatchedEmbeddingProvider
from tenant_rag.utils.concurrency import bounded_task_group
from tenant_rag.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)


class GeminiEmbeddingProvider(BatchedEmbeddingProvider):
    """Embedding provider backed by Gemini ``text-embedding-004``.

    ``output_dimensionality`` is pinned to ``embedding_dimension`` so vectors
    always fit the tenant collections.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__(
            dimension=settings.embedding_dimension,
            batch_size=settings.embedding_batch_size,
            batch_delay_ms=settings.embedding_batch_delay_ms,
        )
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_embedding_model
        self._client = genai.Client(api_key=self._api_key)
        self._config = types.EmbedContentConfig(output_dimensionality=self._dimension)

    async def _embed_batch(self, batch: Sequence[str]) -> list[list[float]]:
        requests = [functools.partial(self._embed_one, text) for text in batch]
        return await bounded_task_group(requests, limit=len(requests))

    async def _embed_one(self, text: str) -> list[float]:
        try:
            response = await self._client.aio.models.embed_content(
                model=self._model,
                contents=text,
                config=self._config,
            )
        except genai_errors.APIError as exc:
            logger.warning("gemini_embedding_failed", model=self._model, error=str(exc))
            raise EmbeddingProviderError(
                message=f"Gemini API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.embeddings or response.embeddings[0].values is None:
            raise EmbeddingProviderError(
                message="Gemini returned no embedding values",
                provider_name=self.get_provider_name(),
            )
        return list(response.embeddings[0].values)

    def get_provider_name(self) -> str:
        return "gemini_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
