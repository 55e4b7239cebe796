"""Upload pipeline: extraction, chunking and the ingestion orchestrator."""

from tenant_rag.services.ingestion.chunker import TextChunker
from tenant_rag.services.ingestion.extractor import TextExtractor
from tenant_rag.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService", "TextChunker", "TextExtractor"]
