"""Embedding provider selection.

The provider is chosen once, from configuration, and injected into the
pipelines.  ``EMBEDDING_PROVIDER`` names it explicitly; when blank, the first
configured provider in the fixed priority order gemini -> openai -> nomic
wins.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.providers.embedding.gemini_embedding_provider import GeminiEmbeddingProvider
from tenant_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from tenant_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from tenant_rag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDERS: dict[str, Callable[[Settings], IEmbeddingProvider]] = {
    "gemini": GeminiEmbeddingProvider,
    "openai": OpenAIEmbeddingProvider,
    "nomic": NomicEmbeddingProvider,
}


def build_embedding_provider(settings: Settings) -> IEmbeddingProvider:
    """Return the configured embedding provider.

    Raises
    ------
    ConfigurationError
        If the explicitly requested provider is unknown or lacks its
        credentials, or if no provider is configured at all.
    """
    configured = settings.get_available_embedding_providers()
    requested = settings.embedding_provider.strip().lower()

    if requested:
        if requested not in _PROVIDERS:
            raise ConfigurationError(
                message=(
                    f"Unknown EMBEDDING_PROVIDER {requested!r}; "
                    f"expected one of {sorted(_PROVIDERS)}"
                )
            )
        if requested not in configured:
            raise ConfigurationError(
                message=f"EMBEDDING_PROVIDER={requested} is selected but not configured",
                provider_name=requested,
            )
        name = requested
    elif configured:
        name = configured[0]
    else:
        raise ConfigurationError(
            message="No embedding provider configured: set GEMINI_API_KEY, "
            "OPENAI_API_KEY or OLLAMA_BASE_URL"
        )

    provider = _PROVIDERS[name](settings)
    logger.info(
        "embedding_provider_selected",
        provider=provider.get_provider_name(),
        dimension=provider.get_dimension(),
        explicit=bool(requested),
    )
    return provider
