"""tenant-rag domain models, re-exported for ``from tenant_rag.models import X``."""

from __future__ import annotations

from tenant_rag.models.document import Document, DocumentStatus
from tenant_rag.models.rag import (
    Chunk,
    CollectionInfo,
    CollectionStats,
    ExtractedText,
    IngestionResult,
    QueryOptions,
    ResultMetadata,
    RetrievedResult,
    ScoredPoint,
    VectorPoint,
    point_id_for,
)

__all__ = [
    "Chunk",
    "CollectionInfo",
    "CollectionStats",
    "Document",
    "DocumentStatus",
    "ExtractedText",
    "IngestionResult",
    "QueryOptions",
    "ResultMetadata",
    "RetrievedResult",
    "ScoredPoint",
    "VectorPoint",
    "point_id_for",
]
