"""Orchestrator for the full document ingestion pipeline.

Pipeline stages: **process -> embed -> store**.

The :class:`IngestionService` coordinates three collaborators (document
processor, embedding provider, vector store) without any of them knowing
about each other:

    1. DocumentProcessor -- renders, OCRs, normalizes and chunks the PDF
    2. IEmbeddingProvider -- embeds every chunk of a batch concurrently
    3. IVectorStoreProvider -- upserts the batch by record id

Batches run one after another with a short pause between them to stay
under the embedding API's rate limits.  A failing batch aborts the run;
batches already written stay in the index, and because records are
upserted by id a rerun simply overwrites them.

All dependencies are injected via the constructor, so providers can be
swapped without changing this class.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from src.models.document import PageRange
from src.models.rag import DEFAULT_SOURCE, DocumentChunk, IngestionResult, VectorRecord
from src.utils.concurrency import throttled_gather
from src.utils.errors import IndexNotFoundError, IngestionError

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider
    from src.services.ingestion.document_processor import (
        DocumentProcessor,
        ExtractionStrategy,
    )

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Orchestrates the ingestion pipeline: process -> embed -> store.

    Parameters
    ----------
    processor:
        Produces chunks from the source document.
    embedding_provider:
        Embeds chunk text.
    vector_store:
        Target vector index; it must already exist.
    document_path:
        Path of the PDF to ingest.
    source:
        Document identifier stored with every chunk.
    languages:
        OCR language string.
    default_page_ranges:
        Ranges used when a request names none; empty means all pages.
    batch_size:
        Chunks embedded and upserted per batch.
    batch_delay:
        Seconds to wait between batches (not after the last one).
    strategy:
        Extraction strategy handed to the processor.
    """

    def __init__(
        self,
        processor: DocumentProcessor,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        document_path: str,
        source: str = DEFAULT_SOURCE,
        languages: str = "ben+eng",
        default_page_ranges: Sequence[PageRange] = (),
        batch_size: int = 10,
        batch_delay: float = 1.0,
        strategy: ExtractionStrategy = "ocr",
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._processor = processor
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._document_path = document_path
        self._source = source
        self._languages = languages
        self._default_page_ranges = list(default_page_ranges)
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._strategy = strategy

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_page_ranges(
        self, page_ranges: Sequence[PageRange] | None = None
    ) -> list[PageRange]:
        """Request ranges if given, else the configured ranges, else ``[]`` (all pages)."""
        if page_ranges:
            return list(page_ranges)
        return list(self._default_page_ranges)

    async def ingest(self, page_ranges: Sequence[PageRange] | None = None) -> IngestionResult:
        """Process the document and write every chunk to the index.

        Raises
        ------
        IndexNotFoundError
            If the vector index has not been created.
        IngestionError
            If embedding or upserting a batch fails.
        """
        start = time.monotonic()
        ranges = self.resolve_page_ranges(page_ranges)

        if not await self._vector_store.index_exists():
            raise IndexNotFoundError(
                message=(
                    f'Index "{self._vector_store.get_index_name()}" does not exist. '
                    "Please create it first"
                ),
                provider_name=self._vector_store.get_provider_name(),
            )

        chunks = await self._processor.process(
            self._document_path,
            page_ranges=ranges,
            languages=self._languages,
            source=self._source,
            strategy=self._strategy,
        )

        stored = await self._embed_and_store(chunks)
        stats = await self._vector_store.describe_stats()

        elapsed = time.monotonic() - start
        result = IngestionResult(
            chunks_processed=stored,
            index_stats=stats,
            ingestion_time=round(elapsed, 2),
        )

        logger.info(
            "ingestion_complete",
            source=self._source,
            chunks=stored,
            total_vectors=stats.total_record_count,
            time_s=result.ingestion_time,
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _embed_and_store(self, chunks: list[DocumentChunk]) -> int:
        total = len(chunks)
        total_batches = (total + self._batch_size - 1) // self._batch_size
        stored = 0

        for batch_number, offset in enumerate(range(0, total, self._batch_size), start=1):
            batch = chunks[offset : offset + self._batch_size]
            records = await self._embed_batch(batch, batch_number)

            try:
                stored += await self._vector_store.upsert(records)
            except Exception as exc:
                raise self._batch_error(batch, batch_number, exc) from exc

            logger.info(
                "ingestion_batch_upserted",
                batch=batch_number,
                total_batches=total_batches,
                processed=stored,
                total=total,
            )

            if offset + self._batch_size < total:
                await asyncio.sleep(self._batch_delay)

        return stored

    async def _embed_batch(
        self, batch: list[DocumentChunk], batch_number: int
    ) -> list[VectorRecord]:
        """Embed each chunk of *batch* concurrently and pair the vectors back by position."""
        results = await throttled_gather(
            [self._embedding_provider.embed_single(c.content) for c in batch],
            semaphore=asyncio.Semaphore(self._batch_size),
        )
        for result in results:
            if isinstance(result, BaseException):
                raise self._batch_error(batch, batch_number, result) from result

        return [
            VectorRecord(id=chunk.record_id, values=vector, metadata=chunk.to_metadata())
            for chunk, vector in zip(batch, results, strict=True)
        ]

    @staticmethod
    def _batch_error(
        batch: list[DocumentChunk], batch_number: int, exc: BaseException
    ) -> IngestionError:
        first, last = batch[0].record_id, batch[-1].record_id
        logger.error(
            "ingestion_batch_failed",
            batch=batch_number,
            first_record=first,
            last_record=last,
            error=str(exc),
        )
        return IngestionError(
            message=f"Batch {batch_number} ({first} .. {last}) failed: {exc}",
        )
