"""Text chunking with overlapping windows and paragraph boundary preservation.

Splits cleaned document text into :class:`~tenant_rag.models.rag.Chunk`
objects sized for embedding models (~512 tokens each, ~50 tokens of overlap).

Two rules shape every chunk:

1. **Paragraph-preserving** -- boundaries only ever fall on blank lines.  A
   single paragraph larger than the budget becomes one oversized chunk
   rather than being cut mid-thought.

2. **Overlapping windows** -- each new chunk starts with the tail of the
   previous one (snapped forward to a word boundary), so a sentence that
   straddles a boundary is fully contained in at least one chunk.

Token counts are estimated at a fixed characters-per-token ratio.  The
output is a pure function of the input text and the three parameters.
"""

from __future__ import annotations

import math
import re

import structlog

from tenant_rag.models.rag import Chunk

logger = structlog.get_logger(logger_name=__name__)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_PARAGRAPH_JOINER = "\n\n"


class TextChunker:
    """Splits text into overlapping chunks preserving paragraph boundaries.

    Parameters
    ----------
    chunk_size:
        Target maximum token count per chunk (default 512).
    overlap:
        Approximate number of tokens carried from the end of one chunk to
        the start of the next (default 50).
    chars_per_token:
        Characters-per-token ratio used for estimation (default 4).
    """

    def __init__(self, chunk_size: int = 512, overlap: int = 50, chars_per_token: int = 4) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(f"overlap must be in [0, chunk_size), got {overlap}")
        if chars_per_token < 1:
            raise ValueError(f"chars_per_token must be >= 1, got {chars_per_token}")
        self._chunk_size = chunk_size
        self._overlap = overlap
        self._chars_per_token = chars_per_token

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str, *, document_id: str, tenant_id: str) -> list[Chunk]:
        """Split *text* into overlapping :class:`Chunk` objects.

        Returns
        -------
        list[Chunk]
            Chunks with zero-based indexes in input order.  Empty input
            returns an empty list.
        """
        pieces = self.split(text)
        chunks = [
            Chunk(
                text=piece,
                index=index,
                document_id=document_id,
                tenant_id=tenant_id,
                token_count=self.estimate_tokens(piece),
            )
            for index, piece in enumerate(pieces)
        ]

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            avg_tokens=sum(c.token_count for c in chunks) // len(chunks) if chunks else 0,
            document_id=document_id,
        )
        return chunks

    def split(self, text: str) -> list[str]:
        """Return the chunk texts for *text* without wrapping them in models."""
        if not text or not text.strip():
            return []
        return self._accumulate_chunks(self._split_paragraphs(text))

    def estimate_tokens(self, text: str) -> int:
        """Estimate the token count of *text* as ``ceil(len / chars_per_token)``."""
        return math.ceil(len(text) / self._chars_per_token)

    def overlap_tail(self, chunk_text: str) -> str:
        """Return the overlap window that will seed the chunk after *chunk_text*.

        The window is the last ``overlap * chars_per_token`` characters,
        moved forward to the start of the next word so no word is cut.  The
        result is always a suffix of *chunk_text*.
        """
        if self._overlap == 0:
            return ""
        window = self._overlap * self._chars_per_token
        if len(chunk_text) <= window:
            return chunk_text
        start = len(chunk_text) - window
        if not chunk_text[start - 1].isspace():
            boundary = next(
                (i for i in range(start, len(chunk_text)) if chunk_text[i].isspace()),
                None,
            )
            if boundary is not None:
                start = boundary
        return chunk_text[start:].lstrip()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _split_paragraphs(text: str) -> list[str]:
        """Split *text* on blank lines, discarding empty paragraphs."""
        parts = _PARAGRAPH_BREAK.split(text)
        return [p.strip() for p in parts if p.strip()]

    def _accumulate_chunks(self, paragraphs: list[str]) -> list[str]:
        """Greedily pack paragraphs into chunks of at most *chunk_size* tokens.

        When the next paragraph would overflow the buffer, the buffer is
        closed and the next one starts with the overlap tail followed by
        that paragraph.
        """
        chunks: list[str] = []
        buffer = ""

        for para in paragraphs:
            candidate = f"{buffer}{_PARAGRAPH_JOINER}{para}" if buffer else para
            if buffer and self.estimate_tokens(candidate) > self._chunk_size:
                chunks.append(buffer)
                tail = self.overlap_tail(buffer)
                buffer = f"{tail}{_PARAGRAPH_JOINER}{para}" if tail else para
            else:
                buffer = candidate

        if buffer:
            chunks.append(buffer)

        return chunks
