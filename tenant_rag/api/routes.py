"""FastAPI routes for document upload, retrieval and collection stats.

Service dependencies are resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern.  The caller's tenant comes from the
``X-Tenant-ID`` header, which the upstream identity layer sets after
authenticating the request; this service trusts it as given.

    Endpoint                             Method  Description
    -----------------------------------------------------------------
    /api/v1/documents                    POST    Upload and ingest a file
    /api/v1/documents                    GET     List the tenant's documents
    /api/v1/documents/{document_id}      GET     One document record
    /api/v1/documents/{document_id}      DELETE  Remove vectors and record
    /api/v1/query                        POST    Retrieve grounded context
    /api/v1/collection/stats             GET     Tenant collection stats
    /api/v1/health                       GET     Health + active providers
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, UploadFile

from tenant_rag.api.schemas import (
    CollectionStatsResponse,
    DocumentDeleteResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUploadResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
)
from tenant_rag.interfaces.document_store import IDocumentStore
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.document import Document
from tenant_rag.models.rag import QueryOptions
from tenant_rag.services.collection_manager import CollectionManager, validate_tenant_id
from tenant_rag.services.ingestion.ingestion_service import IngestionService
from tenant_rag.services.query_service import QueryService, build_context

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------


def _get_tenant_id(x_tenant_id: Annotated[str, Header(alias="X-Tenant-ID")]) -> str:
    return validate_tenant_id(x_tenant_id)


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service


def _get_collection_manager(request: Request) -> CollectionManager:
    return request.app.state.collection_manager


def _get_document_store(request: Request) -> IDocumentStore:
    return request.app.state.document_store


def _get_embedding_provider(request: Request) -> IEmbeddingProvider:
    return request.app.state.embedding_provider


def _get_vector_store(request: Request) -> IVectorStoreProvider:
    return request.app.state.vector_store


TenantDep = Annotated[str, Depends(_get_tenant_id)]
IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
QueryDep = Annotated[QueryService, Depends(_get_query_service)]
CollectionManagerDep = Annotated[CollectionManager, Depends(_get_collection_manager)]
DocumentStoreDep = Annotated[IDocumentStore, Depends(_get_document_store)]
EmbeddingDep = Annotated[IEmbeddingProvider, Depends(_get_embedding_provider)]
VectorStoreDep = Annotated[IVectorStoreProvider, Depends(_get_vector_store)]


def _document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        filename=document.filename,
        mime_type=document.mime_type,
        size_bytes=document.size_bytes,
        chunk_count=document.chunk_count,
        page_count=document.page_count,
        status=document.status,
        error_message=document.error_message,
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post("/documents", response_model=DocumentUploadResponse, status_code=201)
async def upload_document(
    file: UploadFile,
    tenant_id: TenantDep,
    ingestion_service: IngestionDep,
) -> DocumentUploadResponse:
    """Upload a pdf, docx or txt file and ingest it into the tenant's collection."""
    filename = file.filename or "upload"
    if file.size is not None:
        ingestion_service.check_upload(filename, file.size, tenant_id=tenant_id)
    data = await file.read()
    result = await ingestion_service.ingest(data, filename, tenant_id=tenant_id)
    return DocumentUploadResponse(
        document_id=result.document_id,
        filename=result.filename,
        chunk_count=result.chunk_count,
        page_count=result.page_count,
        ingestion_time=result.ingestion_time,
    )


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(
    tenant_id: TenantDep,
    document_store: DocumentStoreDep,
) -> DocumentListResponse:
    documents = await document_store.list_documents(tenant_id=tenant_id)
    return DocumentListResponse(
        documents=[_document_response(d) for d in documents],
        total=len(documents),
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    tenant_id: TenantDep,
    document_store: DocumentStoreDep,
) -> DocumentResponse:
    document = await document_store.get(document_id, tenant_id=tenant_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return _document_response(document)


@router.delete("/documents/{document_id}", response_model=DocumentDeleteResponse)
async def delete_document(
    document_id: str,
    tenant_id: TenantDep,
    ingestion_service: IngestionDep,
    document_store: DocumentStoreDep,
) -> DocumentDeleteResponse:
    """Delete a document's vectors and its metadata record."""
    if await document_store.get(document_id, tenant_id=tenant_id) is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    deleted = await ingestion_service.delete_document(document_id, tenant_id=tenant_id)
    return DocumentDeleteResponse(document_id=document_id, points_deleted=deleted)


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------


@router.post("/query", response_model=QueryResponse)
async def query_documents(
    body: QueryRequest,
    tenant_id: TenantDep,
    query_service: QueryDep,
) -> QueryResponse:
    """Return the tenant's most relevant chunks plus a rendered context block."""
    results = await query_service.query(
        body.query,
        tenant_id=tenant_id,
        options=QueryOptions(top_k=body.top_k, min_score=body.min_score),
    )
    return QueryResponse(
        query=body.query,
        results=results,
        context=build_context(results),
        total_results=len(results),
    )


@router.get("/collection/stats", response_model=CollectionStatsResponse)
async def collection_stats(
    tenant_id: TenantDep,
    collection_manager: CollectionManagerDep,
) -> CollectionStatsResponse:
    stats = await collection_manager.get_stats(tenant_id)
    return CollectionStatsResponse(**stats.model_dump())


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health(
    embedding_provider: EmbeddingDep,
    vector_store: VectorStoreDep,
) -> HealthResponse:
    healthy = await vector_store.health_check()
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=_VERSION,
        embedding_provider=embedding_provider.get_provider_name(),
        vector_store=vector_store.get_provider_name(),
        vector_store_healthy=healthy,
    )
