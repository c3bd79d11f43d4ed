"""Utility modules for banglaRAG.

Available utility modules (all re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at BanglaRAGError; each stage of
  ingestion and querying raises its own subclass, and each class carries the
  HTTP status the API maps it to.
- **concurrency** -- asyncio semaphore throttling for batch embedding.
- **language** -- Bengali-script ratio detection, keyword runs and the
  language-matched system prompts.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **similarity** -- cosine similarity and score rounding helpers (numpy).
- **text_normalizer** -- Bengali OCR de-fragmentation, punctuation cleanup
  and sentence segmentation.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    BanglaRAGError,
    ConfigurationError,
    DocumentConversionError,
    DocumentProcessingError,
    IndexNotFoundError,
    IndexTimeoutError,
    IngestionError,
    LLMError,
    OCRExtractionError,
    RAGError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import throttled_gather

# -- Language detection -----------------------------------------------------
from src.utils.language import extract_bengali_keywords, is_bengali, system_prompt_for

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Similarity math --------------------------------------------------------
from src.utils.similarity import cosine_similarity

# -- Bengali text normalization ---------------------------------------------
from src.utils.text_normalizer import normalize_bengali_text, split_sentences

__all__ = [
    "BanglaRAGError",
    "ConfigurationError",
    "DocumentConversionError",
    "DocumentProcessingError",
    "IndexNotFoundError",
    "IndexTimeoutError",
    "IngestionError",
    "LLMError",
    "OCRExtractionError",
    "RAGError",
    "configure_logging",
    "cosine_similarity",
    "extract_bengali_keywords",
    "get_logger",
    "is_bengali",
    "normalize_bengali_text",
    "split_sentences",
    "system_prompt_for",
    "throttled_gather",
]
