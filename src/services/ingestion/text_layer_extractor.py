"""Reads an embedded PDF text layer directly, without rendering or OCR.

Only useful for PDFs that already carry a usable Unicode text layer; the
scanned textbook does not, which is why the OCR path is the default.
Output has the same shape as :class:`OCRExtractor`'s so the chunker can
consume either.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

import fitz  # PyMuPDF
import structlog

from src.models.document import ExtractedText, PageRange, PageText, pages_in_ranges
from src.utils.errors import DocumentConversionError
from src.utils.text_normalizer import normalize_bengali_text

logger = structlog.get_logger(logger_name=__name__)


class TextLayerExtractor:
    """Extracts per-page text with ``page.get_text("text")``."""

    def __init__(self, min_page_chars: int = 50) -> None:
        self._min_page_chars = min_page_chars

    async def extract(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None = None,
    ) -> ExtractedText:
        """Return the normalized text layer of the selected pages.

        Raises
        ------
        DocumentConversionError
            If the file is missing or cannot be opened.
        """
        if not Path(document_path).is_file():
            raise DocumentConversionError(message=f"PDF file not found: {document_path}")
        return await asyncio.to_thread(self._extract_pages, document_path, page_ranges)

    def _extract_pages(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None,
    ) -> ExtractedText:
        try:
            doc = fitz.open(document_path)
        except Exception as exc:
            logger.error("pdf_open_failed", file_path=document_path, error=str(exc))
            raise DocumentConversionError(
                message=f"Failed to open PDF {document_path}: {exc}"
            ) from exc

        parts: list[str] = []
        page_info: list[PageText] = []
        try:
            page_count = len(doc)
            requested = (
                pages_in_ranges(page_ranges) if page_ranges else range(1, page_count + 1)
            )
            for page_number in requested:
                if page_number > page_count:
                    continue
                cleaned = normalize_bengali_text(doc[page_number - 1].get_text("text"))
                if len(cleaned) <= self._min_page_chars:
                    continue
                page_info.append(PageText(page=page_number, text=cleaned))
                parts.append(cleaned + "\n\n")
        finally:
            doc.close()

        if not page_info:
            logger.warning("pdf_no_text_extracted", file_path=document_path)
        else:
            logger.info("pdf_text_layer_extracted", file_path=document_path, pages=len(page_info))
        return ExtractedText(text="".join(parts), page_info=page_info)
