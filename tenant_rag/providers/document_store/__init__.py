"""Document metadata store implementations."""

from tenant_rag.providers.document_store.sqlite_document_store import SQLiteDocumentStore

__all__ = ["SQLiteDocumentStore"]
