"""Text normalization applied to every extracted document before chunking.

:func:`clean_text` is idempotent: ``clean_text(clean_text(x)) == clean_text(x)``.
Paragraph breaks (a single blank line) survive cleaning because the chunker
splits on them; every other whitespace run collapses to one space.
"""

from __future__ import annotations

import re
import unicodedata

# C0 controls except \t and \n, DEL, and the C1 block.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_LINE_ENDINGS = re.compile(r"\r\n?")
_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_SPACES_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

_QUOTE_TABLE = str.maketrans(
    {
        "\u2018": "'",
        "\u2019": "'",
        "\u201a": "'",
        "\u201b": "'",
        "\u2032": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u201f": '"',
        "\u2033": '"',
        "\u00a0": " ",
    }
)


def clean_text(text: str) -> str:
    """Normalize raw extracted text into clean, composed UTF-8.

    Steps, in order:

    1. ``\\r\\n`` and lone ``\\r`` become ``\\n``.
    2. Null and control characters are dropped (tabs and newlines kept).
    3. Unicode NFC composition.
    4. Smart quotes become ASCII quotes; non-breaking spaces become spaces.
    5. Runs of horizontal whitespace collapse to one space.
    6. Spaces hugging a line break are removed.
    7. Three or more consecutive line breaks are capped at two.
    8. Leading and trailing whitespace is trimmed.
    """
    if not text:
        return ""

    text = _LINE_ENDINGS.sub("\n", text)
    text = _CONTROL_CHARS.sub("", text)
    text = unicodedata.normalize("NFC", text)
    text = text.translate(_QUOTE_TABLE)
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _SPACES_AROUND_NEWLINE.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()
