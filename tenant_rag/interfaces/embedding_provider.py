"""Abstract base class for text-embedding service providers.

Implementations wrap Gemini ``text-embedding-004``, OpenAI
``text-embedding-3-small`` or Nomic ``nomic-embed-text`` (via Ollama).
Pipelines depend only on this interface; the concrete provider is picked
once by :func:`tenant_rag.providers.embedding.build_embedding_provider` and
injected at construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (tenant_rag/providers/embedding/):
#   GeminiEmbeddingProvider  -- google-genai SDK, 768 dims
#   OpenAIEmbeddingProvider  -- openai SDK, dimensions pinned to config
#   NomicEmbeddingProvider   -- Ollama OpenAI-compatible endpoint, 768 dims
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the RAG pipelines.

    Every vector returned has length :meth:`get_dimension`.  The collection
    manager sizes new tenant collections from that value.
    """

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a list of texts.

        Parameters
        ----------
        texts:
            Texts to embed.  Implementations group them into rate-limit
            friendly batches with a short pause between batches.

        Returns
        -------
        list[list[float]]
            Vectors positionally aligned with *texts*: ``result[i]`` is the
            embedding of ``texts[i]``.

        Raises
        ------
        tenant_rag.utils.errors.EmbeddingProviderError
            If any item fails.  No partial result is ever returned.
        """

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Generate an embedding vector for a single query string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Constant for the lifetime of the provider instance.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"gemini_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the configuration it needs."""
