"""Abstract base class for document metadata persistence.

Stores one :class:`~tenant_rag.models.document.Document` row per upload so
the surrounding application can list a tenant's files and their status.
Every method is scoped by tenant id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tenant_rag.models.document import Document, DocumentStatus


class IDocumentStore(ABC):
    """Contract for document metadata storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables or other backing structures if they don't exist."""

    @abstractmethod
    async def create(self, document: Document) -> Document:
        """Persist a new document record and return it."""

    @abstractmethod
    async def update_status(
        self,
        document_id: str,
        *,
        tenant_id: str,
        status: DocumentStatus,
        chunk_count: int | None = None,
        page_count: int | None = None,
        error_message: str | None = None,
    ) -> Document | None:
        """Move a document to *status*.  Returns ``None`` if it does not exist."""

    @abstractmethod
    async def get(self, document_id: str, *, tenant_id: str) -> Document | None:
        """Return the document if it exists and belongs to *tenant_id*."""

    @abstractmethod
    async def list_documents(self, *, tenant_id: str) -> list[Document]:
        """Return the tenant's documents, newest first."""

    @abstractmethod
    async def delete(self, document_id: str, *, tenant_id: str) -> bool:
        """Remove the record.  Returns ``False`` if nothing matched."""
