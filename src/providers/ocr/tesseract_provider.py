"""Tesseract OCR provider for scanned Bengali pages.

Wraps pytesseract.  Recognition needs the ``ben`` traineddata (and ``eng``
for the Latin text mixed into textbook pages); :meth:`start` verifies the
requested languages are installed before any page is read.
"""

from __future__ import annotations

import asyncio

from PIL import Image

from src.interfaces.ocr_provider import IOCRProvider
from src.utils.errors import OCRExtractionError
from src.utils.logging import get_logger

# The app can start without the pytesseract wrapper installed;
# is_available() then returns False and start() raises.
try:
    import pytesseract

    _PYTESSERACT_AVAILABLE = True
except ImportError:
    pytesseract = None  # type: ignore[assignment]
    _PYTESSERACT_AVAILABLE = False

# Automatic page segmentation; scanned textbook pages mix columns and headings.
_DEFAULT_CONFIG = "--psm 3"


class TesseractOCRProvider(IOCRProvider):
    """OCR provider backed by Google Tesseract via pytesseract.

    Tesseract itself is stateless between calls, so "starting" the engine
    means checking the binary and language data and remembering the
    language string.  Recognition runs in a worker thread so the event loop
    stays responsive during long pages.
    """

    def __init__(self, tesseract_cmd: str = "", config: str = _DEFAULT_CONFIG) -> None:
        self._logger = get_logger(__name__)
        self._config = config
        self._languages: str | None = None
        if tesseract_cmd and _PYTESSERACT_AVAILABLE:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    # ------------------------------------------------------------------
    # IOCRProvider interface
    # ------------------------------------------------------------------

    async def start(self, languages: str = "ben+eng") -> None:
        if not _PYTESSERACT_AVAILABLE:
            raise OCRExtractionError(
                message="pytesseract is not installed",
                provider_name=self.get_provider_name(),
            )
        try:
            installed = set(await asyncio.to_thread(pytesseract.get_languages, config=""))
        except Exception as exc:
            raise OCRExtractionError(
                message=f"Tesseract is not available: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        missing = [lang for lang in languages.split("+") if lang and lang not in installed]
        if missing:
            raise OCRExtractionError(
                message=f"Tesseract language data not installed: {', '.join(missing)}",
                provider_name=self.get_provider_name(),
            )

        self._languages = languages
        self._logger.info("ocr_engine_started", provider="tesseract", languages=languages)

    async def recognize(self, image_path: str) -> str:
        if self._languages is None:
            raise OCRExtractionError(
                message="OCR engine not started",
                provider_name=self.get_provider_name(),
            )
        try:
            return await asyncio.to_thread(self._run_tesseract, image_path, self._languages)
        except Exception as exc:
            raise OCRExtractionError(
                message=f"Recognition failed for {image_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def stop(self) -> None:
        if self._languages is not None:
            self._logger.info("ocr_engine_stopped", provider="tesseract")
        self._languages = None

    def get_provider_name(self) -> str:
        return "tesseract"

    def is_available(self) -> bool:
        """Check that pytesseract is installed and the Tesseract binary exists."""
        if not _PYTESSERACT_AVAILABLE:
            return False
        try:
            pytesseract.get_tesseract_version()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_tesseract(self, image_path: str, languages: str) -> str:
        with Image.open(image_path) as image:
            return pytesseract.image_to_string(image, lang=languages, config=self._config)
