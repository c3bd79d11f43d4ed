"""banglaRAG domain models — re-exports all public model classes.

The models are organized across three submodules by concern:
    - chat.py      — Chat turns and streamed reply events
    - document.py  — Page ranges, rendered page images, OCR page text
    - rag.py       — Chunks, vector records, retrieval and evaluation results
"""

from __future__ import annotations

from src.models.chat import ChatEvent, ChatMessage
from src.models.document import (
    ExtractedText,
    PageImage,
    PageRange,
    PageText,
    ProcessingStats,
    pages_in_ranges,
)
from src.models.rag import (
    DEFAULT_SOURCE,
    DocumentChunk,
    EvaluationMetadata,
    GroundednessEvaluation,
    IndexStats,
    IngestionResult,
    RAGEvaluation,
    RelevanceEvaluation,
    RetrievalMetrics,
    RetrievalResult,
    VectorMatch,
    VectorRecord,
)

__all__ = [
    "DEFAULT_SOURCE",
    "ChatEvent",
    "ChatMessage",
    "DocumentChunk",
    "EvaluationMetadata",
    "ExtractedText",
    "GroundednessEvaluation",
    "IndexStats",
    "IngestionResult",
    "PageImage",
    "PageRange",
    "PageText",
    "ProcessingStats",
    "RAGEvaluation",
    "RelevanceEvaluation",
    "RetrievalMetrics",
    "RetrievalResult",
    "VectorMatch",
    "VectorRecord",
    "pages_in_ranges",
]
