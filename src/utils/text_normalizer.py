"""Bengali text normalization and sentence segmentation.

OCR engines (Tesseract in particular) treat each Bengali glyph cluster as a
separate "word", so extracted text is full of whitespace wedged between a
consonant and its virama (hasanta) or dependent vowel sign:

    "প্ রশ্ন"  ->  "প্রশ্ন"
    "ক ি"      ->  "কি"

:func:`normalize_bengali_text` repairs that fragmentation and cleans up the
usual OCR debris (zero-width characters, duplicated dandas, runs of
whitespace) in a fixed order.  The order matters: de-fragmentation works on
the decomposed sequences that Tesseract emits, so NFC composition has to
run after it.  NFC can also reorder marks (nukta before virama) so that a
virama lands next to whitespace again; the two steps are repeated until
the text stops changing, which keeps the function idempotent.

:func:`split_sentences` / :func:`iter_sentences` split normalized text at the
Bengali danda (``।``) and the Latin terminators ``.``, ``!`` and ``?``.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

# Bengali consonants (U+0995-U+09B9) plus the precomposed nukta forms
# ড় (U+09DC), ঢ় (U+09DD) and য় (U+09DF).
_CONSONANT = r"[ক-হড়ঢ়য়]"
_VIRAMA = "্"

# Dependent vowel signs and the length mark.  A space in front of one of
# these is always an OCR artifact: the sign cannot start a word.
_VOWEL_SIGNS = r"[ািীুূৃেৈোৌৗ]"

_ZERO_WIDTH_RE = re.compile(r"[\u200b-\u200d\ufeff]")
_LINE_ENDING_RE = re.compile(r"\r\n?")

_SPACE_AFTER_VIRAMA_RE = re.compile(_VIRAMA + r"\s+")
_SPACE_BEFORE_VIRAMA_RE = re.compile(rf"({_CONSONANT})\s+{_VIRAMA}")
_SPACE_BEFORE_VOWEL_SIGN_RE = re.compile(rf"\s+({_VOWEL_SIGNS})")

_REPEATED_DANDA_RE = re.compile(r"।(?:\s*।)+")
_REPEATED_QUESTION_RE = re.compile(r"\?(?:\s*\?)+")
_REPEATED_EXCLAMATION_RE = re.compile(r"!(?:\s*!)+")

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_EXCESS_SPACES_RE = re.compile(r"[ \t]{2,}")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([।,;:!?])")
_SPACE_BETWEEN_PUNCT_RE = re.compile(r"([।,;:!?])\s+(?=[।,;:!?])")

_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[।.!?])\s+")


# ------------------------------------------------------------------
# Normalization
# ------------------------------------------------------------------


def normalize_bengali_text(text: str) -> str:
    """Clean OCR-extracted Bengali text.

    Steps, in order:

    1. Line endings to ``\\n``; zero-width characters removed; non-breaking
       spaces turned into plain spaces.
    2. De-fragmentation: whitespace adjacent to a virama, or in front of a
       dependent vowel sign, is deleted.  Whitespace between two bare
       consonants is left alone.
    3. NFC composition.  Steps 2 and 3 repeat until neither changes the
       text.
    4. Repeated ``।``, ``?`` and ``!`` collapse to one mark.
    5. Whitespace cleanup around newlines, spaces and punctuation.

    Bengali digits (০-৯) pass through unchanged.

    Args:
        text: Raw text from OCR or a PDF text layer.

    Returns:
        The normalized text.  Never raises; empty input gives ``""``.
    """
    if not text:
        return ""

    cleaned = _LINE_ENDING_RE.sub("\n", text)
    cleaned = _ZERO_WIDTH_RE.sub("", cleaned)
    cleaned = cleaned.replace("\xa0", " ").strip()

    # Each extra round removes whitespace, so the loop terminates.
    while True:
        composed = unicodedata.normalize("NFC", _defragment(cleaned))
        if composed == cleaned:
            break
        cleaned = composed

    cleaned = _REPEATED_DANDA_RE.sub("।", cleaned)
    cleaned = _REPEATED_QUESTION_RE.sub("?", cleaned)
    cleaned = _REPEATED_EXCLAMATION_RE.sub("!", cleaned)

    cleaned = _EXCESS_NEWLINES_RE.sub("\n\n", cleaned)
    cleaned = _EXCESS_SPACES_RE.sub(" ", cleaned)
    cleaned = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", cleaned)
    cleaned = _SPACE_BETWEEN_PUNCT_RE.sub(r"\1", cleaned)
    return cleaned.strip()


def _defragment(text: str) -> str:
    """Re-attach viramas and vowel signs to their base consonant.

    Removing the space after a virama also forms conjuncts split across a
    gap (``ক্ ষ`` -> ``ক্ষ``), so no separate conjunct rule is needed.
    """
    text = _SPACE_AFTER_VIRAMA_RE.sub(_VIRAMA, text)
    text = _SPACE_BEFORE_VIRAMA_RE.sub(r"\1" + _VIRAMA, text)
    return _SPACE_BEFORE_VOWEL_SIGN_RE.sub(r"\1", text)


# ------------------------------------------------------------------
# Sentence segmentation
# ------------------------------------------------------------------


def iter_sentences(text: str) -> Iterator[str]:
    """Lazily yield sentences from *text*, split after ``।.!?`` + whitespace.

    Blank segments are skipped; each yielded sentence is stripped.
    """
    start = 0
    for match in _SENTENCE_BOUNDARY_RE.finditer(text):
        segment = text[start : match.start()].strip()
        if segment:
            yield segment
        start = match.end()

    tail = text[start:].strip()
    if tail:
        yield tail


def split_sentences(text: str) -> list[str]:
    """Return every sentence of *text* as a list (see :func:`iter_sentences`)."""
    return list(iter_sentences(text))


# ------------------------------------------------------------------
# Display helpers
# ------------------------------------------------------------------


def excerpt(text: str, limit: int) -> str:
    """Return the first *limit* characters of *text* followed by ``"..."``."""
    return text[:limit] + "..."
