"""Abstract base class for OCR service providers.

Defines the contract for the recognition engine that reads rendered page
images.  The engine has an explicit lifecycle: :meth:`start` once per
document, :meth:`recognize` per page, :meth:`stop` when done (the OCR
extractor always calls it from a ``finally`` block).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: TesseractOCRProvider (src/providers/ocr/)
class IOCRProvider(ABC):
    """Contract for OCR engines used by the ingestion pipeline."""

    @abstractmethod
    async def start(self, languages: str = "ben+eng") -> None:
        """Initialise the engine for *languages*.

        Parameters
        ----------
        languages:
            ``+``-joined language codes, e.g. ``"ben+eng"``.

        Raises
        ------
        src.utils.errors.OCRExtractionError
            If the engine or a language model is unavailable.
        """

    @abstractmethod
    async def recognize(self, image_path: str) -> str:
        """Return the raw text recognized in the image at *image_path*.

        Raises
        ------
        src.utils.errors.OCRExtractionError
            If recognition of this image fails.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Release the engine.  Safe to call when never started."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this OCR provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the engine binary is installed."""
