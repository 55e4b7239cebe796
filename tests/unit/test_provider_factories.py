"""Unit tests for embedding provider and vector store selection."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from tenant_rag.config.settings import Settings
from tenant_rag.providers.embedding import (
    GeminiEmbeddingProvider,
    NomicEmbeddingProvider,
    OpenAIEmbeddingProvider,
    build_embedding_provider,
)
from tenant_rag.providers.vector_store import build_vector_store
from tenant_rag.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    defaults = {
        "embedding_provider": "",
        "gemini_api_key": "",
        "openai_api_key": "",
        "openai_base_url": "",
        "ollama_base_url": "",
        "vector_store_backend": "chromadb",
        "chromadb_host": "",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestAvailableProviders:
    def test_priority_order(self) -> None:
        settings = _settings(
            gemini_api_key="g", openai_api_key="o", ollama_base_url="http://localhost:11434"
        )
        assert settings.get_available_embedding_providers() == ["gemini", "openai", "nomic"]

    def test_nothing_configured(self) -> None:
        assert _settings().get_available_embedding_providers() == []


class TestBuildEmbeddingProvider:
    def test_first_configured_wins(self) -> None:
        with patch("tenant_rag.providers.embedding.gemini_embedding_provider.genai.Client"):
            provider = build_embedding_provider(_settings(gemini_api_key="g", openai_api_key="o"))
        assert isinstance(provider, GeminiEmbeddingProvider)

    def test_falls_through_to_openai(self) -> None:
        provider = build_embedding_provider(_settings(openai_api_key="o"))
        assert isinstance(provider, OpenAIEmbeddingProvider)

    def test_falls_through_to_nomic(self) -> None:
        provider = build_embedding_provider(_settings(ollama_base_url="http://localhost:11434"))
        assert isinstance(provider, NomicEmbeddingProvider)

    def test_explicit_choice_overrides_priority(self) -> None:
        provider = build_embedding_provider(
            _settings(embedding_provider="openai", gemini_api_key="g", openai_api_key="o")
        )
        assert isinstance(provider, OpenAIEmbeddingProvider)

    def test_explicit_choice_must_be_configured(self) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            build_embedding_provider(_settings(embedding_provider="gemini", openai_api_key="o"))

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown"):
            build_embedding_provider(_settings(embedding_provider="word2vec", openai_api_key="o"))

    def test_none_configured(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_embedding_provider(_settings())
        assert exc_info.value.stage == "config"


class TestBuildVectorStore:
    def test_chromadb(self, tmp_path) -> None:
        store = build_vector_store(_settings(chromadb_persist_dir=str(tmp_path / "chroma")))
        assert store.get_provider_name() == "chromadb"

    @pytest.mark.asyncio
    async def test_qdrant(self) -> None:
        store = build_vector_store(
            _settings(vector_store_backend="qdrant", qdrant_url="http://qdrant:6333")
        )
        assert store.get_provider_name() == "qdrant"
        await store.close()

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError):
            build_vector_store(_settings(vector_store_backend="faiss"))
