"""Document metadata record.

A :class:`Document` is created in ``processing`` state when an upload starts
and moves to ``ready`` (with its chunk count) or ``error`` exactly once.  The
query path never reads or writes it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentStatus(str, Enum):
    """Lifecycle state of an uploaded document."""

    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Document(BaseModel):
    """Metadata for one uploaded file owned by one tenant."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str
    filename: str
    mime_type: str = ""
    size_bytes: int = Field(default=0, ge=0)
    chunk_count: int = Field(default=0, ge=0)
    page_count: int = Field(default=0, ge=0)
    status: DocumentStatus = DocumentStatus.PROCESSING
    error_message: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
