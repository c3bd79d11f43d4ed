"""Runs OCR over rendered page images and assembles the document text."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from src.models.document import ExtractedText, PageImage, PageText
from src.utils.errors import OCRExtractionError
from src.utils.text_normalizer import excerpt, normalize_bengali_text

if TYPE_CHECKING:
    from src.interfaces.ocr_provider import IOCRProvider

logger = structlog.get_logger(logger_name=__name__)


class OCRExtractor:
    """Recognizes each page image in order and keeps the pages with real text.

    Pages whose normalized text is ``min_page_chars`` characters or fewer
    (blank pages, page furniture only) are dropped.  A page whose
    recognition fails is logged and skipped; only an engine that cannot be
    started aborts the run.
    """

    def __init__(self, provider: IOCRProvider, min_page_chars: int = 50) -> None:
        self._provider = provider
        self._min_page_chars = min_page_chars
        self._running = False

    async def extract(
        self,
        images: Sequence[PageImage],
        languages: str = "ben+eng",
    ) -> ExtractedText:
        """OCR *images* and return the combined and per-page text.

        Raises
        ------
        OCRExtractionError
            If the recognition engine cannot be started.
        """
        try:
            await self._provider.start(languages)
        except OCRExtractionError:
            raise
        except Exception as exc:
            raise OCRExtractionError(
                message=f"Failed to initialize OCR engine: {exc}",
                provider_name=self._provider.get_provider_name(),
            ) from exc
        self._running = True

        parts: list[str] = []
        page_info: list[PageText] = []
        try:
            for image in sorted(images, key=lambda i: i.page):
                try:
                    raw = await self._provider.recognize(image.image_path)
                except Exception as exc:
                    logger.error("ocr_page_failed", page=image.page, error=str(exc))
                    continue

                cleaned = normalize_bengali_text(raw)
                if len(cleaned) <= self._min_page_chars:
                    logger.warning("ocr_page_skipped", page=image.page, chars=len(cleaned))
                    continue

                page_info.append(PageText(page=image.page, text=cleaned))
                parts.append(cleaned + "\n\n")
                logger.debug(
                    "ocr_page_extracted",
                    page=image.page,
                    chars=len(cleaned),
                    sample=excerpt(cleaned, 100),
                )
        finally:
            await self.release()

        logger.info("ocr_complete", pages_in=len(images), pages_kept=len(page_info))
        return ExtractedText(text="".join(parts), page_info=page_info)

    async def release(self) -> None:
        """Stop the engine if it is still running; a no-op otherwise."""
        if not self._running:
            return
        self._running = False
        await self._provider.stop()
