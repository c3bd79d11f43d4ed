"""Pydantic request/response schemas for the banglaRAG API.

Defines the public contract for the REST endpoints: chat, evaluation,
ingestion, index management, page configuration, the OCR smoke test and
health.  Request schemas end with ``Request``, response schemas with
``Response``; invalid request bodies are rejected by FastAPI with 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.chat import ChatMessage
from src.models.document import PageRange


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """One user message plus the client-held conversation so far."""

    message: str = Field(..., min_length=1)
    chat_history: list[ChatMessage] = Field(default_factory=list)
    session_id: str | None = Field(
        default=None, description="Echoed in every event; generated when omitted"
    )


class ChatClearedResponse(BaseModel):
    """Acknowledgement for clearing a conversation (history lives on the client)."""

    message: str = "Chat history cleared successfully"


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class EvaluateRequest(BaseModel):
    """A question/answer pair to score, with optional caller-supplied contexts."""

    query: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    contexts: list[str] | None = None


# ---------------------------------------------------------------------------
# Ingestion & index management
# ---------------------------------------------------------------------------


class IngestRequest(BaseModel):
    """Optional page selection; omitted or empty uses the configured ranges."""

    page_ranges: list[PageRange] | None = None


class IndexStatsResponse(BaseModel):
    """Record count and vector dimension of the index."""

    total_vectors: int
    dimension: int


class IngestResponse(BaseModel):
    """Result of an ingestion run."""

    message: str = "Document ingestion completed successfully"
    chunks_processed: int
    index_stats: IndexStatsResponse
    ingestion_time: float


class IndexOperationResponse(BaseModel):
    """Result of a create/recreate index request."""

    message: str
    index_name: str
    created: bool
    dimension: int | None = None


class PageConfigsResponse(BaseModel):
    """Active static page ranges and the named presets."""

    active: list[PageRange]
    predefined: dict[str, list[PageRange]]


# ---------------------------------------------------------------------------
# OCR smoke test
# ---------------------------------------------------------------------------


class SampleChunk(BaseModel):
    """Preview of one chunk produced by the OCR test."""

    page: int | None
    chunk_index: int
    char_count: int
    content_preview: str


class OCRTestResponse(BaseModel):
    """Summary of OCR-ing the configured test pages."""

    message: str = "OCR test completed successfully"
    chunks_created: int
    sample_chunks: list[SampleChunk]
    total_characters: int
