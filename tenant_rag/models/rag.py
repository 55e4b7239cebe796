"""RAG pipeline data models.

Pydantic v2 models for the values that flow between the chunker, the
embedding adapters, the vector store and the query pipeline.  All models are
frozen: a chunk, once produced, is never edited in place.

Flow for one upload:

    cleaned text --TextChunker--> Chunk[]
    Chunk[] --IEmbeddingProvider--> vectors
    (Chunk, vector) --build_point--> VectorPoint  --upsert--> vector store

and for one query:

    query text --IEmbeddingProvider--> vector --search--> ScoredPoint[]
    ScoredPoint[] --QueryService--> RetrievedResult[]
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Fixed namespace so point ids are stable across processes and deployments.
POINT_ID_NAMESPACE = uuid.UUID("6f1c1c9e-5b7a-4d8e-9a51-3c2b8f0d7e41")


def point_id_for(document_id: str, chunk_index: int) -> str:
    """Return the deterministic vector-store id for a chunk.

    Re-ingesting the same document yields the same ids, so upserts replace
    earlier points instead of duplicating them.
    """
    return str(uuid.uuid5(POINT_ID_NAMESPACE, f"{document_id}:{chunk_index}"))


class Chunk(BaseModel):
    """A bounded slice of a document's text; the unit of embedding and retrieval.

    Identity is ``(document_id, index)``.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="The chunk's textual content.")
    index: int = Field(ge=0, description="Zero-based position within the document.")
    document_id: str = Field(description="Identifier of the parent document.")
    tenant_id: str = Field(description="Tenant that owns the parent document.")
    token_count: int = Field(default=0, ge=0, description="Estimated token count.")

    @property
    def point_id(self) -> str:
        return point_id_for(self.document_id, self.index)


class VectorPoint(BaseModel):
    """A vector plus payload, ready to be written to a tenant collection."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Deterministic point id (UUIDv5 of document id and index).")
    vector: list[float] = Field(description="Embedding vector.")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="document_id, chunk_index, text, source, tenant_id, page_count, created_at.",
    )


class ScoredPoint(BaseModel):
    """A raw similarity-search hit as returned by a vector store provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = Field(ge=0.0, le=1.0, description="Similarity in [0, 1], higher is closer.")
    payload: dict[str, Any] = Field(default_factory=dict)


class ResultMetadata(BaseModel):
    """Source attribution attached to each retrieved result."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Original filename of the document the chunk came from.")
    document_id: str
    chunk_index: int | None = None


class RetrievedResult(BaseModel):
    """One query hit, shaped for citation display and prompt grounding."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Chunk text, truncated to a preview length.")
    score: float = Field(ge=0.0, le=1.0)
    metadata: ResultMetadata


class QueryOptions(BaseModel):
    """Per-call retrieval knobs.  ``None`` fields fall back to service defaults."""

    model_config = ConfigDict(frozen=True)

    top_k: int | None = Field(default=None, ge=1, le=100)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)


class IngestionResult(BaseModel):
    """Summary returned after a document has been fully ingested."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    tenant_id: str
    filename: str
    chunk_count: int = Field(ge=0)
    page_count: int = Field(ge=0)
    total_tokens: int = Field(default=0, ge=0)
    ingestion_time: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")


class CollectionStats(BaseModel):
    """Size and shape of one tenant collection."""

    model_config = ConfigDict(frozen=True)

    collection_name: str
    exists: bool
    vector_count: int = Field(default=0, ge=0)
    dimension: int | None = None


class CollectionInfo(BaseModel):
    """What a vector store reports about an existing collection."""

    model_config = ConfigDict(frozen=True)

    name: str
    dimension: int | None = None
    vector_count: int = 0


class ExtractedText(BaseModel):
    """Cleaned text pulled out of an uploaded file."""

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int = Field(ge=0)
    file_type: str = Field(description='Normalized extension: "pdf", "docx" or "txt".')
