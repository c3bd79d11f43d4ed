"""Document ingestion pipeline for the banglaRAG knowledge base.

Orchestrates the full pipeline: **convert -> OCR -> chunk -> embed -> store**.

1. **Convert** (page_converter.py / PageImageConverter) -- renders the
   selected PDF pages to 300 DPI PNGs in a scratch directory.

2. **OCR** (ocr_extractor.py / OCRExtractor) -- reads each page with the
   Bengali+English recognition engine and normalizes the text.  The
   alternative text_layer_extractor.py reads an embedded text layer instead.

3. **Chunk** (chunker.py / TextChunker) -- sentence-aligned windows of
   ~1000 characters with word overlap and page attribution.

4. **Embed / Store** (ingestion_service.py / IngestionService) -- embeds
   chunks in batches of 10 and upserts them into the vector index.

document_processor.py wires steps 1-3 together and always cleans up the
OCR engine and the rendered images.
"""

from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.document_processor import DocumentProcessor
from src.services.ingestion.ingestion_service import IngestionService
from src.services.ingestion.ocr_extractor import OCRExtractor
from src.services.ingestion.page_converter import PageImageConverter
from src.services.ingestion.text_layer_extractor import TextLayerExtractor

__all__ = [
    "DocumentProcessor",
    "IngestionService",
    "OCRExtractor",
    "PageImageConverter",
    "TextChunker",
    "TextLayerExtractor",
]
