"""Application settings loaded from environment variables via pydantic-settings.

Values are read from environment variables first and from a ``.env`` file in
the working directory second.  Field ``gemini_api_key`` maps to env var
``GEMINI_API_KEY``, and so on.  Empty strings mean "not configured": the
provider factories skip anything whose credentials are blank.

Only the factories in :mod:`tenant_rag.main` and the provider modules read
this object.  Services receive plain values through their constructors so
they can be built in tests without touching the environment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """tenant-rag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Embedding Providers ===
    # Explicit provider choice ("gemini", "openai", "nomic").  When blank the
    # first configured provider in priority order is used.
    embedding_provider: str = ""
    gemini_api_key: str = ""
    gemini_embedding_model: str = "text-embedding-004"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible gateways
    openai_embedding_model: str = "text-embedding-3-small"
    ollama_base_url: str = ""  # e.g. http://localhost:11434
    embedding_dimension: int = 768
    embedding_batch_size: int = 20
    embedding_batch_delay_ms: int = 100

    # === Vector Store ===
    vector_store_backend: str = "chromadb"  # "chromadb" or "qdrant"
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_host: str = ""  # set to use a remote Chroma server
    chromadb_port: int = 8000
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""
    qdrant_timeout: float = 30.0
    collection_prefix: str = "partner_"

    # === Chunking / Extraction ===
    chunk_size_tokens: int = 512
    chunk_overlap_tokens: int = 50
    chars_per_token: int = 4
    min_content_chars: int = 10
    max_file_size_bytes: int = 10 * 1024 * 1024

    # === Pipelines ===
    ingest_batch_size: int = 100
    upsert_concurrency: int = 1
    query_top_k: int = 5
    query_min_score: float = 0.4
    preview_chars: int = 300

    # === Document Metadata ===
    document_db_path: str = "data/documents.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_embedding_providers(self) -> list[str]:
        """Return embedding provider names that are configured, in priority order."""
        providers: list[str] = []
        if self.gemini_api_key:
            providers.append("gemini")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("nomic")
        return providers
