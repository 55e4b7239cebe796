"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client.  Supports real OpenAI and
OpenAI-compatible gateways via ``openai_base_url``.  One request is sent per
batch; the API returns vectors with an ``index`` field, which is used to
restore input order.
"""

from __future__ import annotations

from collections.abc import Sequence

import openai
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.providers.embedding.base import BatchedEmbeddingProvider
from tenant_rag.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)

# Models that accept the ``dimensions`` request parameter.
_SHORTENABLE_MODELS = frozenset({"text-embedding-3-small", "text-embedding-3-large"})


class OpenAIEmbeddingProvider(BatchedEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Uses ``text-embedding-3-small`` shortened to ``embedding_dimension``
    (768 by default) so it can share collections with the Gemini provider.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__(
            dimension=settings.embedding_dimension,
            batch_size=settings.embedding_batch_size,
            batch_delay_ms=settings.embedding_batch_delay_ms,
        )
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {"api_key": self._api_key}
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_embedding_model
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    async def _embed_batch(self, batch: Sequence[str]) -> list[list[float]]:
        request: dict = {"input": list(batch), "model": self._model}
        if self._model in _SHORTENABLE_MODELS:
            request["dimensions"] = self._dimension

        try:
            response = await self._client.embeddings.create(**request)
        except openai.APIError as exc:
            raise EmbeddingProviderError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ordered = sorted(response.data, key=lambda item: item.index)
        logger.debug(
            "openai_embedding_batch",
            model=self._model,
            batch_size=len(batch),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return [item.embedding for item in ordered]

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
