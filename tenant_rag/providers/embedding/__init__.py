"""Embedding provider implementations.

Three implementations of IEmbeddingProvider, in selection priority order:
    1. GeminiEmbeddingProvider -- text-embedding-004 via google-genai (768 dims).
    2. OpenAIEmbeddingProvider -- text-embedding-3-small shortened to 768 dims.
    3. NomicEmbeddingProvider  -- nomic-embed-text via a local Ollama server.

``build_embedding_provider`` picks one from settings.
"""

from tenant_rag.providers.embedding.factory import build_embedding_provider
from tenant_rag.providers.embedding.gemini_embedding_provider import GeminiEmbeddingProvider
from tenant_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from tenant_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = [
    "GeminiEmbeddingProvider",
    "NomicEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "build_embedding_provider",
]
