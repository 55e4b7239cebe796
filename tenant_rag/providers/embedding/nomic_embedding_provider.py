"""Nomic embedding provider adapter (local/free via Ollama).

Talks to the OpenAI-compatible ``/v1`` endpoint that Ollama exposes, using
``nomic-embed-text`` (768 dimensions).  No API key required.
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx
import openai
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.providers.embedding.base import BatchedEmbeddingProvider
from tenant_rag.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)

_NOMIC_DIMENSION = 768


class NomicEmbeddingProvider(BatchedEmbeddingProvider):
    """Embedding provider backed by ``nomic-embed-text`` served via Ollama."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(
            dimension=_NOMIC_DIMENSION,
            batch_size=settings.embedding_batch_size,
            batch_delay_ms=settings.embedding_batch_delay_ms,
        )
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",  # Ollama ignores the key
        )
        self._model = "nomic-embed-text"

    async def _embed_batch(self, batch: Sequence[str]) -> list[list[float]]:
        try:
            response = await self._client.embeddings.create(input=list(batch), model=self._model)
        except openai.APIError as exc:
            raise EmbeddingProviderError(
                message=f"Nomic/Ollama embedding API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.debug("nomic_embedding_batch", model=self._model, batch_size=len(batch))
        return [item.embedding for item in response.data]

    def get_provider_name(self) -> str:
        return "nomic_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server is reachable."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
            return response.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
