"""Turn raw uploaded bytes into cleaned UTF-8 text.

Supported formats are chosen by file extension:

    pdf   PyMuPDF (fitz), page text joined by blank lines, real page count
    docx  python-docx, paragraphs and table rows joined by blank lines,
          page count estimated from text length
    txt   UTF-8 decode (undecodable bytes replaced), page count 1

Every result passes through :func:`~tenant_rag.utils.text_cleaner.clean_text`
and must keep at least ``min_content_chars`` characters.
"""

from __future__ import annotations

import io
import math
from pathlib import PurePath

import docx
import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from tenant_rag.models.rag import ExtractedText
from tenant_rag.utils.errors import EmptyContentError, ExtractionError, UnsupportedFormatError
from tenant_rag.utils.text_cleaner import clean_text

logger = structlog.get_logger(logger_name=__name__)

SUPPORTED_EXTENSIONS: dict[str, str] = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
}

# Rough characters per printed page, used when the format has no pagination.
_CHARS_PER_PAGE = 3000


def file_extension(filename: str) -> str:
    """Return the lower-cased extension of *filename* without the dot."""
    return PurePath(filename).suffix.lower().lstrip(".")


def mime_type_for(filename: str) -> str:
    return SUPPORTED_EXTENSIONS.get(file_extension(filename), "application/octet-stream")


class TextExtractor:
    """Extracts and cleans text from pdf, docx and txt uploads."""

    def __init__(self, min_content_chars: int = 10) -> None:
        self._min_content_chars = min_content_chars

    def extract(self, data: bytes, filename: str) -> ExtractedText:
        """Extract cleaned text and a page count from *data*.

        Raises
        ------
        UnsupportedFormatError
            If the extension is not pdf, docx or txt.
        ExtractionError
            If the parser cannot read the file.
        EmptyContentError
            If fewer than ``min_content_chars`` characters remain after cleaning.
        """
        extension = file_extension(filename)
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                message=(
                    f"Unsupported file type {extension or '(none)'!r}; "
                    f"expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
                )
            )

        if extension == "pdf":
            raw_text, page_count = self._extract_pdf(data)
        elif extension == "docx":
            raw_text, page_count = self._extract_docx(data)
        else:
            raw_text, page_count = data.decode("utf-8", errors="replace"), 1

        text = clean_text(raw_text)
        if len(text) < self._min_content_chars:
            raise EmptyContentError(
                message=(
                    f"{filename} yielded {len(text)} characters of text; "
                    f"at least {self._min_content_chars} are required"
                )
            )

        logger.info(
            "text_extracted",
            filename=filename,
            file_type=extension,
            pages=page_count,
            chars=len(text),
        )
        return ExtractedText(text=text, page_count=page_count, file_type=extension)

    # ------------------------------------------------------------------
    # Format handlers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_pdf(data: bytes) -> tuple[str, int]:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise ExtractionError(message=f"Could not open PDF: {exc}", provider_name="pymupdf") from exc

        try:
            pages = [doc[page_num].get_text("text").strip() for page_num in range(len(doc))]
            page_count = len(doc)
        except Exception as exc:
            raise ExtractionError(message=f"Could not read PDF text: {exc}", provider_name="pymupdf") from exc
        finally:
            doc.close()

        return "\n\n".join(p for p in pages if p), page_count

    @staticmethod
    def _extract_docx(data: bytes) -> tuple[str, int]:
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionError(
                message=f"Could not open DOCX: {exc}", provider_name="python-docx"
            ) from exc

        blocks = [p.text for p in document.paragraphs if p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    blocks.append(" | ".join(cells))

        text = "\n\n".join(blocks)
        return text, max(1, math.ceil(len(text) / _CHARS_PER_PAGE))
