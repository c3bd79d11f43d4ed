"""Sentence-based text chunking with word overlap and page attribution.

Splits normalized OCR text into :class:`~src.models.rag.DocumentChunk`
objects of roughly ``chunk_size`` characters.

The strategy:

1. **Sentence-preserving** -- text is segmented at ``।``, ``.``, ``!`` and
   ``?`` and sentences are accumulated greedily, so a chunk never starts or
   ends mid-sentence.  A single sentence longer than ``chunk_size`` is
   emitted intact.

2. **Overlapping windows** -- each new chunk starts with the last
   ``overlap // 6`` words of the previous one (about six characters per
   word), so a statement spanning a boundary is retrievable from either
   side.

3. **Page attribution** -- each page's normalized text is keyed by its first
   100 characters; a sentence is attributed to the first page whose key
   contains the sentence's first 50 characters.  This only recognises
   sentences near the top of a page, which is enough to give most chunks a
   lowest-page hint.

Indices are assigned before short chunks are dropped and are not renumbered,
so the stored ``chunk_index`` values may skip.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.models.document import PageText
from src.models.rag import DEFAULT_SOURCE, DocumentChunk
from src.utils.text_normalizer import normalize_bengali_text, split_sentences

logger = structlog.get_logger(logger_name=__name__)

_PAGE_KEY_CHARS = 100
_SENTENCE_PROBE_CHARS = 50
# Average characters per word used to turn the overlap budget into words.
_CHARS_PER_WORD = 6


class TextChunker:
    """Splits text into overlapping sentence-aligned chunks.

    Parameters
    ----------
    chunk_size:
        Target maximum characters per chunk (default 1000).
    overlap:
        Overlap budget in characters between consecutive chunks (default 200).
    min_chunk_size:
        Chunks shorter than this are dropped (default 50).
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        overlap: int = 200,
        min_chunk_size: int = 50,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if overlap < 0 or min_chunk_size < 0:
            raise ValueError("overlap and min_chunk_size must not be negative")
        self._chunk_size = chunk_size
        self._overlap = overlap
        self._min_chunk_size = min_chunk_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(
        self,
        text: str,
        page_info: Sequence[PageText] = (),
        source: str = DEFAULT_SOURCE,
    ) -> list[DocumentChunk]:
        """Split *text* into :class:`DocumentChunk` objects.

        Parameters
        ----------
        text:
            Extracted document text; it is normalized here.
        page_info:
            Per-page texts used to attribute sentences to pages.  May be
            empty, in which case every chunk has ``page=None``.
        source:
            Document identifier copied into every chunk.

        Returns
        -------
        list[DocumentChunk]
            Chunks in document order.  Empty input returns an empty list.
        """
        sentences = [s.strip() for s in split_sentences(normalize_bengali_text(text))]
        sentences = [s for s in sentences if s]
        if not sentences:
            return []

        page_map = self._build_page_map(page_info)

        raw: list[tuple[str, int | None, int]] = []
        buffer = ""
        pages: list[int] = []
        index = 0

        for sentence in sentences:
            sentence_page = self._find_page(sentence, page_map)

            if buffer and len(buffer) + len(sentence) > self._chunk_size:
                if buffer.strip():
                    raw.append((buffer.strip(), min(pages) if pages else None, index))
                    index += 1
                overlap = self._overlap_text(buffer)
                buffer = overlap + (" " if overlap else "") + sentence
                pages = [sentence_page] if sentence_page is not None else []
            else:
                buffer = f"{buffer} {sentence}" if buffer else sentence
                if sentence_page is not None and sentence_page not in pages:
                    pages.append(sentence_page)

        if buffer.strip():
            raw.append((buffer.strip(), min(pages) if pages else None, index))

        chunks = [
            DocumentChunk(content=content, source=source, page=page, chunk_index=idx)
            for content, page, idx in raw
            if len(content) >= self._min_chunk_size
        ]

        logger.info(
            "chunking_complete",
            source=source,
            sentences=len(sentences),
            chunks_before_filter=len(raw),
            chunks=len(chunks),
            avg_chars=self._avg_chars(chunks),
        )
        return chunks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _build_page_map(page_info: Sequence[PageText]) -> dict[str, int]:
        """Map the first 100 normalized characters of each page to its number."""
        page_map: dict[str, int] = {}
        for page in page_info:
            cleaned = normalize_bengali_text(page.text)
            if cleaned.strip():
                page_map[cleaned[:_PAGE_KEY_CHARS]] = page.page
        return page_map

    @staticmethod
    def _find_page(sentence: str, page_map: dict[str, int]) -> int | None:
        probe = sentence[:_SENTENCE_PROBE_CHARS]
        for key, page in page_map.items():
            if probe in key:
                return page
        return None

    def _overlap_text(self, buffer: str) -> str:
        """Return the last ``overlap // 6`` words of *buffer*."""
        n_words = self._overlap // _CHARS_PER_WORD
        if n_words == 0:
            return ""
        return " ".join(buffer.split()[-n_words:])

    @staticmethod
    def _avg_chars(chunks: list[DocumentChunk]) -> int:
        if not chunks:
            return 0
        return round(sum(c.char_count for c in chunks) / len(chunks))
