"""Custom exception hierarchy for tenant-rag.

All application exceptions inherit from :class:`TenantRAGError`, which
carries the pipeline ``stage`` that failed, an optional ``provider_name``
identifying the external service involved (e.g. "gemini", "qdrant"), and a
``retryable`` flag so callers can tell user-correctable input problems from
transient infrastructure failures.

The hierarchy is organized by pipeline stage:

    TenantRAGError  (base -- catch-all for any tenant-rag error)
    +-- InputError                 (user-correctable, never retryable)
    |   +-- UnsupportedFormatError (extract: extension not pdf/docx/txt)
    |   +-- ExtractionError        (extract: parser blew up)
    |   +-- EmptyContentError      (extract: nothing meaningful left)
    |   +-- FileTooLargeError      (validate: upload over the size cap)
    |   +-- InvalidTenantError     (collection: tenant id not namespace-safe)
    +-- EmbeddingProviderError     (embed: upstream or rate-limit failure)
    +-- CollectionProvisionError   (collection: check/create failed)
    +-- UpsertError                (upsert: vector-store write failed)
    +-- SearchError                (search: vector-store read failed)
    |   +-- CollectionNotFoundError
    +-- ConfigurationError         (startup / missing config)

"Collection already exists" is never raised: provisioning treats it as
success.  An empty search result is never an error either.
"""


class TenantRAGError(Exception):
    """Base exception for all tenant-rag errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[gemini] quota exceeded``.
    """

    default_stage: str = "pipeline"
    retryable: bool = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
        stage: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        self._stage = stage or self.default_stage
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def stage(self) -> str:
        return self._stage

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors (user-correctable)
# ---------------------------------------------------------------------------

class InputError(TenantRAGError):
    """Base for errors caused by the caller's input rather than infrastructure."""

    default_stage = "extract"
    retryable = False


class UnsupportedFormatError(InputError):
    """Raised when an uploaded file's extension is not pdf, docx or txt."""

    def __init__(
        self,
        message: str = "Unsupported file format",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(InputError):
    """Raised when a document parser fails on the uploaded bytes."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyContentError(InputError):
    """Raised when extraction yields too little text to be worth indexing."""

    def __init__(
        self,
        message: str = "Document contains no extractable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class FileTooLargeError(InputError):
    """Raised when an upload exceeds the configured size cap."""

    default_stage = "validate"

    def __init__(
        self,
        message: str = "File exceeds the maximum upload size",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidTenantError(InputError):
    """Raised when a tenant id cannot be turned into a safe collection name."""

    default_stage = "collection"

    def __init__(
        self,
        message: str = "Invalid tenant id",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Infrastructure errors (caller may retry)
# ---------------------------------------------------------------------------

class EmbeddingProviderError(TenantRAGError):
    """Raised when the embedding service fails for any item in a request.

    Never carries partial results: a failed batch fails the whole call so
    chunk/vector alignment can't drift.
    """

    default_stage = "embed"
    retryable = True

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CollectionProvisionError(TenantRAGError):
    """Raised when a tenant collection cannot be checked or created."""

    default_stage = "collection"
    retryable = True

    def __init__(
        self,
        message: str = "Collection provisioning failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpsertError(TenantRAGError):
    """Raised when writing points to the vector store fails."""

    default_stage = "upsert"
    retryable = True

    def __init__(
        self,
        message: str = "Vector upsert failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SearchError(TenantRAGError):
    """Raised when a similarity search fails (not when it finds nothing)."""

    default_stage = "search"
    retryable = True

    def __init__(
        self,
        message: str = "Vector search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CollectionNotFoundError(SearchError):
    """Raised when searching a collection that has never been provisioned."""

    retryable = False

    def __init__(
        self,
        message: str = "Collection does not exist",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(TenantRAGError):
    """Raised when configuration is invalid or missing at startup."""

    default_stage = "config"

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
