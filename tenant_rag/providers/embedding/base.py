"""Shared batching and validation for embedding provider adapters.

Every concrete provider only knows how to embed one batch.  This base class
owns the parts that must behave identically across providers:

* splitting input into batches of ``batch_size`` with ``batch_delay_ms``
  between them,
* checking that each batch returns one vector per input with the declared
  dimension,
* turning any upstream failure into :class:`EmbeddingProviderError`.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence

import structlog

from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.utils.concurrency import gather_in_batches
from tenant_rag.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)


class BatchedEmbeddingProvider(IEmbeddingProvider):
    """Template for providers that embed fixed-size batches with a pause between them."""

    def __init__(
        self,
        dimension: int,
        batch_size: int = 20,
        batch_delay_ms: int = 100,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._dimension = dimension
        self._batch_size = batch_size
        self._batch_delay = max(0, batch_delay_ms) / 1000.0

    @abstractmethod
    async def _embed_batch(self, batch: Sequence[str]) -> list[list[float]]:
        """Embed one batch.  Must return vectors in input order."""

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            vectors = await gather_in_batches(
                texts,
                self._checked_batch,
                batch_size=self._batch_size,
                delay_seconds=self._batch_delay,
            )
        except EmbeddingProviderError:
            raise
        except Exception as exc:
            raise EmbeddingProviderError(
                message=f"Embedding failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "embed_documents",
            provider=self.get_provider_name(),
            count=len(vectors),
            batches=-(-len(texts) // self._batch_size),
        )
        return vectors

    async def embed_query(self, text: str) -> list[float]:
        result = await self.embed_documents([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    async def _checked_batch(self, batch: Sequence[str]) -> list[list[float]]:
        vectors = await self._embed_batch(batch)
        if len(vectors) != len(batch):
            raise EmbeddingProviderError(
                message=f"Expected {len(batch)} embeddings, received {len(vectors)}",
                provider_name=self.get_provider_name(),
            )
        for vector in vectors:
            if len(vector) != self._dimension:
                raise EmbeddingProviderError(
                    message=(
                        f"Embedding dimension mismatch: expected {self._dimension}, "
                        f"received {len(vector)}"
                    ),
                    provider_name=self.get_provider_name(),
                )
        return [list(v) for v in vectors]
