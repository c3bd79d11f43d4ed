"""Turns the source PDF into chunks: convert -> OCR -> chunk.

Two extraction strategies are supported:

* ``"ocr"`` (default) -- render pages with :class:`PageImageConverter`, read
  them with :class:`OCRExtractor`.  Required for the scanned textbook.
* ``"text"`` -- read an embedded text layer with :class:`TextLayerExtractor`.

Either way the extracted text goes through :class:`TextChunker`.  The OCR
engine and the rendered page images are released in a ``finally`` block
whether or not processing succeeds.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Literal

import structlog

from src.models.document import ExtractedText, PageRange, ProcessingStats
from src.models.rag import DEFAULT_SOURCE, DocumentChunk
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.ocr_extractor import OCRExtractor
from src.services.ingestion.page_converter import PageImageConverter
from src.services.ingestion.text_layer_extractor import TextLayerExtractor
from src.utils.errors import DocumentProcessingError
from src.utils.text_normalizer import excerpt

logger = structlog.get_logger(logger_name=__name__)

# Below this many extracted characters the document is treated as unreadable.
_MIN_DOCUMENT_CHARS = 100

ExtractionStrategy = Literal["ocr", "text"]


class DocumentProcessor:
    """Runs the extraction pipeline for one document.

    Parameters
    ----------
    converter:
        Page rasterizer for the OCR strategy.
    extractor:
        OCR runner for the OCR strategy.
    chunker:
        Chunk builder applied to the extracted text.
    text_layer:
        Extractor for the ``"text"`` strategy; a default one is created
        when omitted.
    """

    def __init__(
        self,
        converter: PageImageConverter,
        extractor: OCRExtractor,
        chunker: TextChunker,
        text_layer: TextLayerExtractor | None = None,
    ) -> None:
        self._converter = converter
        self._extractor = extractor
        self._chunker = chunker
        self._text_layer = text_layer or TextLayerExtractor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def process(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None = None,
        languages: str = "ben+eng",
        source: str = DEFAULT_SOURCE,
        strategy: ExtractionStrategy = "ocr",
    ) -> list[DocumentChunk]:
        """Extract and chunk *document_path*.

        Raises
        ------
        DocumentProcessingError
            If the file is missing, no page could be rendered, or fewer
            than 100 characters of text were extracted.
        DocumentConversionError
            If the PDF cannot be opened.
        OCRExtractionError
            If the OCR engine cannot be started.
        """
        if not Path(document_path).is_file():
            raise DocumentProcessingError(message=f"PDF file not found: {document_path}")

        logger.info(
            "document_processing_started",
            file_path=document_path,
            strategy=strategy,
            page_ranges=[r.model_dump() for r in page_ranges or []],
        )

        try:
            if strategy == "text":
                extracted = await self._text_layer.extract(document_path, page_ranges)
            else:
                extracted = await self._extract_with_ocr(document_path, page_ranges, languages)

            if len(extracted.text) < _MIN_DOCUMENT_CHARS:
                raise DocumentProcessingError(message="Insufficient text extracted from PDF")

            chunks = self._chunker.chunk(extracted.text, extracted.page_info, source=source)
        finally:
            await self._cleanup()

        logger.info(
            "document_processing_complete",
            file_path=document_path,
            characters=len(extracted.text),
            chunks=len(chunks),
            sample=excerpt(chunks[0].content, 200) if chunks else "",
        )
        return chunks

    @staticmethod
    def get_processing_stats(chunks: Sequence[DocumentChunk]) -> ProcessingStats:
        """Summarize *chunks*: counts, average size and distinct pages."""
        total_characters = sum(c.char_count for c in chunks)
        average = round(total_characters / len(chunks)) if chunks else 0
        pages = {c.page for c in chunks if c.page is not None}
        return ProcessingStats(
            total_chunks=len(chunks),
            total_characters=total_characters,
            average_chunk_size=average,
            pages_processed=len(pages),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _extract_with_ocr(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None,
        languages: str,
    ) -> ExtractedText:
        images = await self._converter.convert(document_path, page_ranges)
        if not images:
            raise DocumentProcessingError(message="No images were generated from the PDF")
        return await self._extractor.extract(images, languages=languages)

    async def _cleanup(self) -> None:
        """Release the OCR engine and delete rendered pages; failures only warn."""
        try:
            await self._extractor.release()
            self._converter.cleanup()
        except Exception as exc:
            logger.warning("document_cleanup_failed", error=str(exc))
