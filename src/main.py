"""banglaRAG FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and exposes the chat, evaluation, ingestion and index
management API.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config, resolve_page_ranges
from src.config.settings import Settings
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.ocr.tesseract_provider import TesseractOCRProvider
from src.providers.vector_store.chromadb_provider import ChromaDBProvider
from src.services.chat_service import ChatService
from src.services.context_retriever import ContextRetriever
from src.services.index_service import IndexService
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.document_processor import DocumentProcessor
from src.services.ingestion.ingestion_service import IngestionService
from src.services.ingestion.ocr_extractor import OCRExtractor
from src.services.ingestion.page_converter import PageImageConverter
from src.services.rag_evaluator import RAGEvaluator
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)

_VERSION = str((config.get("app") or {}).get("version", "0.1.0"))


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)

    # -- Providers --
    embedding_provider = OpenAIEmbeddingProvider(settings=app_settings, http_client=http_client)
    llm = OpenAILLMProvider(settings=app_settings, http_client=http_client)
    vector_store = ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        index_name=app_settings.index_name,
    )
    ocr_provider = TesseractOCRProvider(tesseract_cmd=app_settings.tesseract_cmd)

    # -- Ingestion --
    processor = DocumentProcessor(
        converter=PageImageConverter(
            temp_dir=app_settings.ocr_temp_dir, dpi=app_settings.ocr_render_dpi
        ),
        extractor=OCRExtractor(ocr_provider, min_page_chars=app_settings.ocr_min_page_chars),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            overlap=app_settings.chunk_overlap,
            min_chunk_size=app_settings.min_chunk_size,
        ),
    )
    ingestion_service = IngestionService(
        processor=processor,
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        document_path=app_settings.document_path,
        source=app_settings.document_source,
        languages=app_settings.ocr_languages,
        default_page_ranges=resolve_page_ranges(app_config),
        batch_size=app_settings.ingest_batch_size,
        batch_delay=app_settings.ingest_batch_delay,
    )
    index_service = IndexService(
        vector_store=vector_store,
        dimension=app_settings.embedding_dimension,
        metric=app_settings.index_metric,
        poll_interval=app_settings.index_poll_interval,
        max_ready_attempts=app_settings.index_max_ready_attempts,
        max_delete_attempts=app_settings.index_max_delete_attempts,
    )

    # -- Retrieval, evaluation, chat --
    retriever = ContextRetriever(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        top_k=app_settings.retrieval_top_k,
        threshold=app_settings.retrieval_threshold,
        fallback_threshold=app_settings.retrieval_fallback_threshold,
    )
    evaluator = RAGEvaluator(embedding_provider=embedding_provider, retriever=retriever)
    chat_service = ChatService(
        llm=llm,
        retriever=retriever,
        evaluator=evaluator,
        history_window=app_settings.chat_history_window,
        temperature=app_settings.chat_temperature,
        max_tokens=app_settings.chat_max_tokens,
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, bool] = {
        "llm": llm.is_available(),
        "embedding": embedding_provider.is_available(),
        "vector_store": vector_store.is_available(),
        "ocr": ocr_provider.is_available(),
    }

    return {
        "http_client": http_client,
        "settings": app_settings,
        "config": app_config,
        "version": _VERSION,
        "provider_registry": provider_registry,
        "vector_store": vector_store,
        "document_processor": processor,
        "ingestion_service": ingestion_service,
        "index_service": index_service,
        "retriever": retriever,
        "evaluator": evaluator,
        "chat_service": chat_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        index_name=settings.index_name,
        providers=components["provider_registry"],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="banglaRAG API",
        version=_VERSION,
        description=(
            "Question answering over a scanned Bengali textbook: OCR ingestion "
            "into a vector index, retrieval-augmented streaming chat, and "
            "groundedness/relevance evaluation of answers."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
