"""Unit tests for the TextChunker -- paragraph-aware overlapping text chunking."""

from __future__ import annotations

import pytest

from tenant_rag.services.ingestion.chunker import TextChunker

_DOC_ID = "doc-001"
_TENANT = "acme"


def _paragraph(n: int, length: int = 400) -> str:
    """Build a paragraph of whole words, exactly *length* characters long."""
    words = f"p{n:02d} " + "lorem ipsum dolor sit amet consectetur " * (length // 20 + 1)
    text = words[:length]
    return text[:-1] + "." if text.endswith(" ") else text


def _make_chunker(chunk_size: int = 512, overlap: int = 50) -> TextChunker:
    return TextChunker(chunk_size=chunk_size, overlap=overlap, chars_per_token=4)


class TestSmallDocument:
    """A document under the budget is a single chunk."""

    def test_three_paragraphs_fit_one_chunk(self) -> None:
        text = "\n\n".join(_paragraph(n, 498) for n in range(3))
        assert 1490 <= len(text) <= 1510

        chunks = _make_chunker().chunk(text, document_id=_DOC_ID, tenant_id=_TENANT)

        assert len(chunks) == 1
        assert chunks[0].index == 0
        assert chunks[0].text == text
        assert chunks[0].document_id == _DOC_ID
        assert chunks[0].tenant_id == _TENANT
        assert chunks[0].token_count == -(-len(text) // 4)

    def test_empty_text_yields_no_chunks(self) -> None:
        chunker = _make_chunker()
        assert chunker.chunk("", document_id=_DOC_ID, tenant_id=_TENANT) == []
        assert chunker.chunk("   \n\n  ", document_id=_DOC_ID, tenant_id=_TENANT) == []


class TestLargeDocument:
    """A ~3000-token document splits into several overlapping chunks."""

    @pytest.fixture
    def long_text(self) -> str:
        return "\n\n".join(_paragraph(n) for n in range(30))

    def test_chunk_count_and_size(self, long_text: str) -> None:
        chunks = _make_chunker().chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)

        assert len(chunks) >= 5
        for chunk in chunks:
            assert len(chunk.text) <= 512 * 4
            assert chunk.token_count <= 512

    def test_indexes_are_sequential(self, long_text: str) -> None:
        chunks = _make_chunker().chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)
        assert [c.index for c in chunks] == list(range(len(chunks)))

    def test_consecutive_chunks_overlap(self, long_text: str) -> None:
        chunker = _make_chunker()
        chunks = chunker.chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)

        for previous, current in zip(chunks, chunks[1:]):
            tail = chunker.overlap_tail(previous.text)
            assert tail
            assert previous.text.endswith(tail)
            assert current.text.startswith(tail)

    def test_every_paragraph_survives(self, long_text: str) -> None:
        chunks = _make_chunker().chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)
        joined = "\n".join(c.text for c in chunks)
        for n in range(30):
            assert _paragraph(n) in joined

    def test_deterministic(self, long_text: str) -> None:
        chunker = _make_chunker()
        first = chunker.chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)
        second = chunker.chunk(long_text, document_id=_DOC_ID, tenant_id=_TENANT)
        assert first == second
        assert [c.point_id for c in first] == [c.point_id for c in second]


class TestParagraphPreservation:
    def test_oversized_paragraph_is_not_split(self) -> None:
        text = _paragraph(0, 3000)
        chunks = _make_chunker().chunk(text, document_id=_DOC_ID, tenant_id=_TENANT)
        assert len(chunks) == 1
        assert chunks[0].text == text

    def test_boundaries_fall_between_paragraphs(self) -> None:
        chunker = _make_chunker(chunk_size=120, overlap=0)
        paragraphs = [_paragraph(n, 200) for n in range(6)]
        chunks = chunker.chunk("\n\n".join(paragraphs), document_id=_DOC_ID, tenant_id=_TENANT)

        for chunk in chunks:
            for piece in chunk.text.split("\n\n"):
                assert piece in paragraphs


class TestOverlapTail:
    def test_tail_is_suffix_starting_on_word(self) -> None:
        chunker = _make_chunker(chunk_size=100, overlap=5)
        text = "alpha beta gamma delta epsilon zeta eta theta iota kappa"
        tail = chunker.overlap_tail(text)

        assert text.endswith(tail)
        assert len(tail) <= 20
        assert text[len(text) - len(tail) - 1].isspace()

    def test_zero_overlap(self) -> None:
        chunker = _make_chunker(chunk_size=100, overlap=0)
        assert chunker.overlap_tail("anything at all") == ""

    def test_short_text_is_its_own_tail(self) -> None:
        chunker = _make_chunker(chunk_size=100, overlap=10)
        assert chunker.overlap_tail("short") == "short"


class TestValidation:
    @pytest.mark.parametrize(
        ("chunk_size", "overlap", "chars_per_token"),
        [(0, 0, 4), (100, 100, 4), (100, -1, 4), (100, 10, 0)],
    )
    def test_invalid_parameters(self, chunk_size: int, overlap: int, chars_per_token: int) -> None:
        with pytest.raises(ValueError):
            TextChunker(chunk_size=chunk_size, overlap=overlap, chars_per_token=chars_per_token)

    def test_estimate_tokens_rounds_up(self) -> None:
        chunker = _make_chunker()
        assert chunker.estimate_tokens("") == 0
        assert chunker.estimate_tokens("abcd") == 1
        assert chunker.estimate_tokens("abcde") == 2
