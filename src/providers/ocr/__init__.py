"""OCR provider implementations for scanned page images.

TesseractOCRProvider is the only engine; it reads Bengali (``ben``) and
English (``eng``) from the 300 DPI page renders produced during ingestion.
"""

from src.providers.ocr.tesseract_provider import TesseractOCRProvider

__all__ = ["TesseractOCRProvider"]
