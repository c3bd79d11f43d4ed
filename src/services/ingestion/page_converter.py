"""Rasterizes PDF pages to PNG images for OCR.

Uses PyMuPDF (fitz) to render each requested page at 300 DPI into a
scratch directory (``temp-pdf-images`` by default).  The directory is wiped
and recreated on every :meth:`PageImageConverter.convert` call and removed by
:meth:`PageImageConverter.cleanup`, so two conversions must not run at the
same time against the same directory.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Sequence
from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from src.models.document import PageImage, PageRange, pages_in_ranges
from src.utils.errors import DocumentConversionError

logger = structlog.get_logger(logger_name=__name__)


class PageImageConverter:
    """Converts document pages into :class:`PageImage` files.

    Parameters
    ----------
    temp_dir:
        Scratch directory for rendered pages.
    dpi:
        Render resolution; 300 DPI keeps Bengali conjuncts legible to
        Tesseract.
    """

    def __init__(self, temp_dir: str = "temp-pdf-images", dpi: int = 300) -> None:
        self._temp_dir = Path(temp_dir)
        self._dpi = dpi

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def convert(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None = None,
    ) -> list[PageImage]:
        """Render the selected pages of *document_path*.

        Parameters
        ----------
        document_path:
            Path to the PDF.
        page_ranges:
            Pages to render; ``None`` or empty renders every page.
            Overlapping ranges are rendered once; pages past the end of
            the document are skipped with a warning.

        Returns
        -------
        list[PageImage]
            Rendered pages sorted by page number.  A page that fails to
            render is logged and left out.

        Raises
        ------
        DocumentConversionError
            If the file is missing or cannot be opened as a PDF.
        """
        if not Path(document_path).is_file():
            raise DocumentConversionError(message=f"PDF file not found: {document_path}")

        self._reset_temp_dir()
        return await asyncio.to_thread(self._render_pages, document_path, page_ranges)

    def cleanup(self) -> None:
        """Remove the scratch directory and every image in it."""
        if self._temp_dir.exists():
            shutil.rmtree(self._temp_dir)
            logger.info("page_images_cleaned", temp_dir=str(self._temp_dir))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset_temp_dir(self) -> None:
        if self._temp_dir.exists():
            shutil.rmtree(self._temp_dir)
        self._temp_dir.mkdir(parents=True, exist_ok=True)

    def _render_pages(
        self,
        document_path: str,
        page_ranges: Sequence[PageRange] | None,
    ) -> list[PageImage]:
        try:
            doc = fitz.open(document_path)
        except Exception as exc:
            logger.error("pdf_open_failed", file_path=document_path, error=str(exc))
            raise DocumentConversionError(
                message=f"Failed to open PDF {document_path}: {exc}"
            ) from exc

        images: list[PageImage] = []
        try:
            page_count = len(doc)
            if page_ranges:
                requested = pages_in_ranges(page_ranges)
            else:
                requested = list(range(1, page_count + 1))

            for page_number in requested:
                if page_number > page_count:
                    logger.warning(
                        "page_out_of_range",
                        page=page_number,
                        page_count=page_count,
                    )
                    continue
                try:
                    image_path = self._temp_dir / f"page-{page_number}.png"
                    pixmap = doc[page_number - 1].get_pixmap(dpi=self._dpi)
                    pixmap.save(str(image_path))
                    images.append(PageImage(page=page_number, image_path=str(image_path)))
                except Exception as exc:
                    logger.warning("page_render_failed", page=page_number, error=str(exc))
        finally:
            doc.close()

        images.sort(key=lambda image: image.page)
        logger.info(
            "pdf_pages_converted",
            file_path=document_path,
            requested=len(requested),
            converted=len(images),
            dpi=self._dpi,
        )
        return images
