"""Pydantic request/response schemas for the tenant-rag HTTP API.

Request schemas end with "Request", response schemas with "Response".
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tenant_rag.models.document import DocumentStatus
from tenant_rag.models.rag import RetrievedResult


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    stage: str | None = None
    retryable: bool = False


class DocumentUploadResponse(BaseModel):
    """Returned after an upload has been fully ingested."""

    document_id: str
    filename: str
    chunk_count: int
    page_count: int
    ingestion_time: float


class DocumentResponse(BaseModel):
    """One document metadata record."""

    id: str
    filename: str
    mime_type: str
    size_bytes: int
    chunk_count: int
    page_count: int
    status: DocumentStatus
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse] = Field(default_factory=list)
    total: int = 0


class DocumentDeleteResponse(BaseModel):
    document_id: str
    points_deleted: int


class QueryRequest(BaseModel):
    """A retrieval request from the chat handler."""

    query: str = Field(min_length=1, max_length=4000)
    top_k: int | None = Field(default=None, ge=1, le=100)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)


class QueryResponse(BaseModel):
    """Retrieved results plus the rendered grounding context."""

    query: str
    results: list[RetrievedResult] = Field(default_factory=list)
    context: str = ""
    total_results: int = 0


class CollectionStatsResponse(BaseModel):
    collection_name: str
    exists: bool
    vector_count: int = 0
    dimension: int | None = None


class HealthResponse(BaseModel):
    """Service health and the active providers."""

    status: str
    version: str
    embedding_provider: str
    vector_store: str
    vector_store_healthy: bool
