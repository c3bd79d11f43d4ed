"""FastAPI API routes for banglaRAG.

Provides the chat stream, answer evaluation, document ingestion, index
management, page configuration, the OCR smoke test and health.  Service
dependencies are resolved from ``app.state`` via FastAPI's ``Depends``
using the ``Annotated`` pattern.

Endpoint                     Method  Description
---------------------------  ------  ------------------------------------------
/api/v1/health               GET     Health check + provider status
/api/v1/chat                 POST    Streamed answer (server-sent events)
/api/v1/chat                 DELETE  Acknowledge history clear (client-held)
/api/v1/evaluate             POST    Score a question/answer pair
/api/v1/evaluate             GET     Metric documentation
/api/v1/ingest               POST    OCR, chunk, embed and store the document
/api/v1/index/create         POST    Create the index if absent
/api/v1/index/recreate       POST    Delete and recreate the index
/api/v1/index/stats          GET     Record count and dimension
/api/v1/page-configs         GET     Active page ranges and presets
/api/v1/ocr/test             POST    OCR the test pages and preview the chunks
"""

from __future__ import annotations

import contextlib
import json
import time
import uuid
from collections.abc import AsyncIterator
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from src.api.schemas import (
    ChatClearedResponse,
    ChatRequest,
    ErrorResponse,
    EvaluateRequest,
    HealthResponse,
    IndexOperationResponse,
    IndexStatsResponse,
    IngestRequest,
    IngestResponse,
    OCRTestResponse,
    PageConfigsResponse,
    SampleChunk,
)
from src.config.loader import (
    ocr_test_page_ranges,
    predefined_page_configs,
    resolve_page_ranges,
)
from src.config.settings import Settings
from src.models.rag import RAGEvaluation
from src.services.chat_service import ChatService
from src.services.index_service import IndexService
from src.services.ingestion.document_processor import DocumentProcessor
from src.services.ingestion.ingestion_service import IngestionService
from src.services.rag_evaluator import EVALUATION_GUIDE, RAGEvaluator
from src.utils.errors import BanglaRAGError
from src.utils.logging import get_logger
from src.utils.text_normalizer import excerpt

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_SAMPLE_CHUNKS = 3
_PREVIEW_CHARS = 200


# ---------------------------------------------------------------------------
# Dependency injection helpers — resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_evaluator(request: Request) -> RAGEvaluator:
    return request.app.state.evaluator


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_index_service(request: Request) -> IndexService:
    return request.app.state.index_service


def _get_document_processor(request: Request) -> DocumentProcessor:
    return request.app.state.document_processor


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_config(request: Request) -> dict[str, Any]:
    return request.app.state.config


ChatServiceDep = Annotated[ChatService, Depends(_get_chat_service)]
EvaluatorDep = Annotated[RAGEvaluator, Depends(_get_evaluator)]
IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
IndexServiceDep = Annotated[IndexService, Depends(_get_index_service)]
ProcessorDep = Annotated[DocumentProcessor, Depends(_get_document_processor)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_config)]


def _new_session_id() -> str:
    return f"chat_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _sse(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    # Actively verify the index is present and populated
    vector_store = getattr(request.app.state, "vector_store", None)
    if vector_store is not None:
        try:
            stats = await vector_store.describe_stats()
            providers["index"] = stats.total_record_count > 0
            providers["index_vectors"] = stats.total_record_count
        except Exception:
            providers["index"] = False
            providers["index_vectors"] = 0

    critical_ok = all(
        providers.get(name, False) for name in ("llm", "embedding", "vector_store")
    )
    if critical_ok and providers.get("index", False):
        status = "healthy"
    elif critical_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(
        status=status,
        version=getattr(request.app.state, "version", "0.1.0"),
        providers=providers,
    )


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@router.post(
    "/chat",
    summary="Answer a message from the textbook (server-sent events)",
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def chat(body: ChatRequest, chat_service: ChatServiceDep) -> StreamingResponse:
    """Stream the answer token by token, then a final event with the evaluation.

    Each event is a ``data:`` line holding JSON: ``{"content": ...}`` per
    token and ``{"done": true, ...}`` at the end.  A failure after the
    stream has started is reported as a final ``{"error": ...}`` event.
    """
    session_id = body.session_id or _new_session_id()

    async def _events() -> AsyncIterator[str]:
        stream = chat_service.stream_reply(body.message, body.chat_history)
        try:
            async with contextlib.aclosing(stream):
                async for event in stream:
                    if event.type == "token":
                        yield _sse({"content": event.content, "session_id": session_id})
                        continue
                    yield _sse(
                        {
                            "done": True,
                            "session_id": session_id,
                            "user_message": event.user_message.model_dump(mode="json"),
                            "assistant_message": event.assistant_message.model_dump(
                                mode="json"
                            ),
                            "evaluation": event.evaluation.model_dump(mode="json"),
                        }
                    )
        except BanglaRAGError as exc:
            _logger.error(
                "chat_stream_failed",
                session_id=session_id,
                error_type=type(exc).__name__,
                message=exc.message,
            )
            yield _sse(
                {"error": type(exc).__name__, "detail": exc.message, "session_id": session_id}
            )
        except Exception as exc:
            _logger.exception(
                "chat_stream_failed", session_id=session_id, error_type=type(exc).__name__
            )
            yield _sse(
                {
                    "error": "InternalServerError",
                    "detail": "Failed to process chat request",
                    "session_id": session_id,
                }
            )

    return StreamingResponse(
        _events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.delete(
    "/chat",
    response_model=ChatClearedResponse,
    summary="Clear chat history",
)
async def clear_chat() -> ChatClearedResponse:
    """History is stored by the client; nothing is held server-side."""
    return ChatClearedResponse()


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


@router.post(
    "/evaluate",
    response_model=RAGEvaluation,
    responses={500: {"model": ErrorResponse}},
    summary="Evaluate groundedness and relevance of an answer",
)
async def evaluate(body: EvaluateRequest, evaluator: EvaluatorDep) -> RAGEvaluation:
    """Score *answer* against the supplied contexts, or against a fresh retrieval."""
    return await evaluator.evaluate(body.query, body.answer, contexts=body.contexts)


@router.get("/evaluate", summary="Describe the evaluation metrics")
async def evaluation_docs() -> dict[str, Any]:
    """Return the metric definitions and scoring guidelines."""
    return EVALUATION_GUIDE


# ---------------------------------------------------------------------------
# Ingestion & index management
# ---------------------------------------------------------------------------


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ingest the textbook into the vector index",
)
async def ingest(
    service: IngestionServiceDep,
    body: IngestRequest | None = None,
) -> IngestResponse:
    """OCR the selected pages, chunk, embed and upsert them.

    Without ``page_ranges`` the configured static ranges are used, or every
    page when none are configured.  Fails with 400 if the index is missing.
    """
    page_ranges = body.page_ranges if body is not None else None
    result = await service.ingest(page_ranges)
    return IngestResponse(
        chunks_processed=result.chunks_processed,
        index_stats=IndexStatsResponse(
            total_vectors=result.index_stats.total_record_count,
            dimension=result.index_stats.dimension,
        ),
        ingestion_time=result.ingestion_time,
    )


@router.post(
    "/index/create",
    response_model=IndexOperationResponse,
    responses={504: {"model": ErrorResponse}},
    summary="Create the vector index if it does not exist",
)
async def create_index(service: IndexServiceDep) -> IndexOperationResponse:
    """Create the index and wait until it is ready; an existing index is left alone."""
    return IndexOperationResponse(**await service.create_index())


@router.post(
    "/index/recreate",
    response_model=IndexOperationResponse,
    responses={504: {"model": ErrorResponse}},
    summary="Delete and recreate the vector index",
)
async def recreate_index(service: IndexServiceDep) -> IndexOperationResponse:
    """Drop every stored vector and start from an empty index."""
    return IndexOperationResponse(**await service.recreate_index())


@router.get(
    "/index/stats",
    response_model=IndexStatsResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Vector index statistics",
)
async def index_stats(service: IndexServiceDep) -> IndexStatsResponse:
    stats = await service.describe_stats()
    return IndexStatsResponse(
        total_vectors=stats.total_record_count,
        dimension=stats.dimension,
    )


@router.get(
    "/page-configs",
    response_model=PageConfigsResponse,
    summary="Configured and predefined page ranges",
)
async def page_configs(config: ConfigDep) -> PageConfigsResponse:
    return PageConfigsResponse(
        active=resolve_page_ranges(config),
        predefined=predefined_page_configs(config),
    )


# ---------------------------------------------------------------------------
# OCR smoke test
# ---------------------------------------------------------------------------


@router.post(
    "/ocr/test",
    response_model=OCRTestResponse,
    responses={500: {"model": ErrorResponse}},
    summary="OCR the test pages without touching the index",
)
async def ocr_test(
    processor: ProcessorDep,
    app_settings: SettingsDep,
    config: ConfigDep,
) -> OCRTestResponse:
    """Run convert, OCR and chunking on the test pages and preview the result."""
    chunks = await processor.process(
        app_settings.document_path,
        page_ranges=ocr_test_page_ranges(config),
        languages=app_settings.ocr_languages,
        source=app_settings.document_source,
    )
    _logger.info("ocr_test_complete", chunks=len(chunks))

    return OCRTestResponse(
        chunks_created=len(chunks),
        sample_chunks=[
            SampleChunk(
                page=c.page,
                chunk_index=c.chunk_index,
                char_count=c.char_count,
                content_preview=excerpt(c.content, _PREVIEW_CHARS),
            )
            for c in chunks[:_SAMPLE_CHUNKS]
        ],
        total_characters=sum(c.char_count for c in chunks),
    )
