"""Utility modules for tenant-rag.

- **errors** -- exception hierarchy rooted at TenantRAGError; every error
  carries the pipeline stage that raised it and a retryable flag.
- **logging** -- structlog setup with console output in development and
  JSON in production.
- **concurrency** -- batched fan-out and bounded task groups used by the
  embedding adapters and the ingestion pipeline.
- **text_cleaner** -- idempotent Unicode/whitespace normalization of
  extracted document text.
"""

from tenant_rag.utils.errors import (
    CollectionNotFoundError,
    CollectionProvisionError,
    ConfigurationError,
    EmbeddingProviderError,
    EmptyContentError,
    ExtractionError,
    FileTooLargeError,
    InputError,
    InvalidTenantError,
    SearchError,
    TenantRAGError,
    UnsupportedFormatError,
    UpsertError,
)
from tenant_rag.utils.logging import bind_request_context, configure_logging, get_logger
from tenant_rag.utils.text_cleaner import clean_text

__all__ = [
    "CollectionNotFoundError",
    "CollectionProvisionError",
    "ConfigurationError",
    "EmbeddingProviderError",
    "EmptyContentError",
    "ExtractionError",
    "FileTooLargeError",
    "InputError",
    "InvalidTenantError",
    "SearchError",
    "TenantRAGError",
    "UnsupportedFormatError",
    "UpsertError",
    "bind_request_context",
    "clean_text",
    "configure_logging",
    "get_logger",
]
