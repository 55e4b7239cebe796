"""Orchestrator for the document upload pipeline.

Pipeline stages: **validate -> extract -> chunk -> provision -> embed -> upsert**.

:class:`IngestionService` coordinates the extractor, the chunker, the
embedding provider, the collection manager, the vector store and the
document store without any of them knowing about each other.  All
collaborators are injected, so tests can swap in deterministic fakes.

A Document record is written in ``processing`` state before any work starts.
It becomes ``ready`` only after every batch has been embedded and upserted;
any failure (or cancellation of the ingesting task) marks it ``error`` and
the exception propagates unchanged.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING

import structlog

from tenant_rag.models.document import Document, DocumentStatus
from tenant_rag.models.rag import Chunk, IngestionResult, VectorPoint
from tenant_rag.services.ingestion.chunker import TextChunker
from tenant_rag.services.ingestion.extractor import TextExtractor, mime_type_for
from tenant_rag.utils.concurrency import bounded_task_group, chunked
from tenant_rag.utils.errors import EmptyContentError, FileTooLargeError

if TYPE_CHECKING:
    from tenant_rag.interfaces.document_store import IDocumentStore
    from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
    from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
    from tenant_rag.services.collection_manager import CollectionManager

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Runs one upload through extraction, chunking, embedding and storage.

    Parameters
    ----------
    extractor:
        Turns file bytes into cleaned text.
    chunker:
        Splits cleaned text into overlapping token-bounded chunks.
    embedding_provider:
        Generates vectors for chunk text.
    vector_store:
        Receives the embedded chunks.
    collection_manager:
        Resolves and provisions the tenant's collection.
    document_store:
        Optional metadata store for Document status tracking.
    batch_size:
        Chunks embedded and upserted per batch (default 100).
    upsert_concurrency:
        How many batches may be in flight at once.  ``1`` (the default)
        runs batches strictly one after another.
    max_file_size_bytes:
        Uploads larger than this are rejected before any work is done.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        collection_manager: CollectionManager,
        document_store: IDocumentStore | None = None,
        batch_size: int = 100,
        upsert_concurrency: int = 1,
        max_file_size_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self._extractor = extractor
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._collection_manager = collection_manager
        self._document_store = document_store
        self._batch_size = batch_size
        self._upsert_concurrency = max(1, upsert_concurrency)
        self._max_file_size_bytes = max_file_size_bytes

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_upload(self, filename: str, size: int, *, tenant_id: str) -> None:
        """Reject an invalid tenant or an oversized upload before reading it.

        Raises
        ------
        InvalidTenantError, FileTooLargeError
        """
        self._collection_manager.collection_name(tenant_id)
        if size > self._max_file_size_bytes:
            raise FileTooLargeError(
                message=(
                    f"{filename} is {size} bytes; the limit is "
                    f"{self._max_file_size_bytes} bytes"
                )
            )

    async def ingest(self, data: bytes, filename: str, *, tenant_id: str) -> IngestionResult:
        """Ingest one uploaded file into the tenant's collection.

        Returns
        -------
        IngestionResult
            The new document id, chunk and page counts, and timing.

        Raises
        ------
        InvalidTenantError, FileTooLargeError
            Before any Document record is written.
        UnsupportedFormatError, ExtractionError, EmptyContentError,
        EmbeddingProviderError, CollectionProvisionError, UpsertError
            After the Document record has been marked ``error``.
        """
        start = time.monotonic()
        self.check_upload(filename, len(data), tenant_id=tenant_id)

        document = Document(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            filename=filename,
            mime_type=mime_type_for(filename),
            size_bytes=len(data),
        )
        if self._document_store is not None:
            await self._document_store.create(document)

        logger.info(
            "ingestion_started",
            document_id=document.id,
            tenant_id=tenant_id,
            filename=filename,
            size_bytes=len(data),
        )

        try:
            chunks, page_count = await self._run_pipeline(document, data)
        except (Exception, asyncio.CancelledError) as exc:
            await self._mark_failed(document, exc)
            raise

        if self._document_store is not None:
            await self._document_store.update_status(
                document.id,
                tenant_id=tenant_id,
                status=DocumentStatus.READY,
                chunk_count=len(chunks),
                page_count=page_count,
            )

        elapsed = round(time.monotonic() - start, 3)
        result = IngestionResult(
            document_id=document.id,
            tenant_id=tenant_id,
            filename=filename,
            chunk_count=len(chunks),
            page_count=page_count,
            total_tokens=sum(c.token_count for c in chunks),
            ingestion_time=elapsed,
        )
        logger.info(
            "ingestion_complete",
            document_id=document.id,
            tenant_id=tenant_id,
            chunks=len(chunks),
            pages=page_count,
            elapsed_s=elapsed,
        )
        return result

    async def delete_document(self, document_id: str, *, tenant_id: str) -> int:
        """Remove a document's vectors and metadata.  Returns points deleted."""
        collection = self._collection_manager.collection_name(tenant_id)
        deleted = await self._vector_store.delete_points(collection, document_id)
        if self._document_store is not None:
            await self._document_store.delete(document_id, tenant_id=tenant_id)
        logger.info(
            "document_removed",
            document_id=document_id,
            tenant_id=tenant_id,
            points_deleted=deleted,
        )
        return deleted

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_pipeline(self, document: Document, data: bytes) -> tuple[list[Chunk], int]:
        extracted = self._extractor.extract(data, document.filename)
        chunks = self._chunker.chunk(
            extracted.text,
            document_id=document.id,
            tenant_id=document.tenant_id,
        )
        if not chunks:
            raise EmptyContentError(message=f"{document.filename} produced no chunks")

        collection = await self._collection_manager.ensure_collection_exists(document.tenant_id)

        jobs = [
            partial(
                self._embed_and_upsert,
                collection,
                batch,
                document,
                extracted.page_count,
            )
            for batch in chunked(chunks, self._batch_size)
        ]
        if self._upsert_concurrency == 1:
            for job in jobs:
                await job()
        else:
            await bounded_task_group(jobs, self._upsert_concurrency)

        return chunks, extracted.page_count

    async def _embed_and_upsert(
        self,
        collection: str,
        batch: Sequence[Chunk],
        document: Document,
        page_count: int,
    ) -> int:
        vectors = await self._embedding_provider.embed_documents([c.text for c in batch])
        points = [
            VectorPoint(
                id=chunk.point_id,
                vector=vector,
                payload={
                    "document_id": document.id,
                    "chunk_index": chunk.index,
                    "text": chunk.text,
                    "source": document.filename,
                    "tenant_id": document.tenant_id,
                    "page_count": page_count,
                    "created_at": document.created_at.isoformat(),
                },
            )
            for chunk, vector in zip(batch, vectors, strict=True)
        ]
        written = await self._vector_store.upsert(collection, points)
        logger.debug(
            "ingestion_batch_upserted",
            document_id=document.id,
            first_index=batch[0].index,
            count=written,
        )
        return written

    async def _mark_failed(self, document: Document, exc: BaseException) -> None:
        if isinstance(exc, asyncio.CancelledError):
            stage = "cancelled"
        else:
            stage = getattr(exc, "stage", "pipeline")
        logger.error(
            "ingestion_failed",
            document_id=document.id,
            tenant_id=document.tenant_id,
            stage=stage,
            error=str(exc) or type(exc).__name__,
        )
        if self._document_store is None:
            return
        try:
            await self._document_store.update_status(
                document.id,
                tenant_id=document.tenant_id,
                status=DocumentStatus.ERROR,
                error_message=str(exc) or type(exc).__name__,
            )
        except Exception:
            # The original failure is re-raised by the caller.
            logger.exception("document_status_update_failed", document_id=document.id)
