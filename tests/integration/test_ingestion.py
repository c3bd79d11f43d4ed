"""Integration tests for the ingestion pipeline: process -> embed -> store.

Uses the in-memory mock vector store and deterministic embedder from
conftest.py, with a mocked document processor producing known chunks.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.document import PageRange
from src.models.rag import DocumentChunk
from src.services.context_retriever import ContextRetriever
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.document_processor import DocumentProcessor
from src.services.ingestion.ingestion_service import IngestionService
from src.services.ingestion.ocr_extractor import OCRExtractor
from src.services.ingestion.page_converter import PageImageConverter
from src.utils.errors import IndexNotFoundError, IngestionError, RAGError


def _chunks(count: int, gap_at: int | None = None) -> list[DocumentChunk]:
    indices = [i if gap_at is None or i < gap_at else i + 1 for i in range(count)]
    return [
        DocumentChunk(content=f"অধ্যায় {i}: অনুপমের গল্পের অংশ।", page=3, chunk_index=i)
        for i in indices
    ]


def _processor(chunks: list[DocumentChunk]) -> MagicMock:
    processor = MagicMock(spec=DocumentProcessor)
    processor.process = AsyncMock(return_value=chunks)
    return processor


def _service(
    processor: MagicMock,
    embedder: Any,
    store: Any,
    **kwargs: object,
) -> IngestionService:
    return IngestionService(
        processor=processor,
        embedding_provider=embedder,
        vector_store=store,
        document_path="data/hsc26.pdf",
        batch_delay=0,
        **kwargs,  # type: ignore[arg-type]
    )


class TestIngest:
    @pytest.mark.asyncio
    async def test_every_chunk_stored(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        chunks = _chunks(23)
        service = _service(_processor(chunks), mock_embedding_provider, mock_vector_store)

        result = await service.ingest()

        assert result.chunks_processed == 23
        assert result.index_stats.total_record_count == 23
        assert result.index_stats.dimension == 64
        assert result.ingestion_time >= 0.0
        assert set(mock_vector_store.records) == {c.record_id for c in chunks}
        record = mock_vector_store.records["hsc26.pdf_chunk_5"]
        assert record.metadata == chunks[5].to_metadata()

    @pytest.mark.asyncio
    async def test_vectors_paired_with_their_chunks(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        chunks = _chunks(12)
        service = _service(_processor(chunks), mock_embedding_provider, mock_vector_store)
        await service.ingest()

        for chunk in chunks:
            stored = mock_vector_store.records[chunk.record_id]
            assert stored.values == await mock_embedding_provider.embed_single(chunk.content)

    @pytest.mark.asyncio
    async def test_index_gaps_kept(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        service = _service(
            _processor(_chunks(3, gap_at=1)), mock_embedding_provider, mock_vector_store
        )
        await service.ingest()
        assert sorted(mock_vector_store.records) == [
            "hsc26.pdf_chunk_0",
            "hsc26.pdf_chunk_2",
            "hsc26.pdf_chunk_3",
        ]

    @pytest.mark.asyncio
    async def test_rerun_overwrites(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        service = _service(_processor(_chunks(5)), mock_embedding_provider, mock_vector_store)
        await service.ingest()
        result = await service.ingest()
        assert result.index_stats.total_record_count == 5

    @pytest.mark.asyncio
    async def test_no_chunks(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        service = _service(_processor([]), mock_embedding_provider, mock_vector_store)
        result = await service.ingest()
        assert result.chunks_processed == 0
        assert mock_embedding_provider.calls == []


class TestPageRanges:
    @pytest.mark.asyncio
    async def test_request_ranges_win(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        processor = _processor(_chunks(1))
        configured = [PageRange(start=1, end=2)]
        requested = [PageRange(start=10, end=25)]
        service = _service(
            processor,
            mock_embedding_provider,
            mock_vector_store,
            default_page_ranges=configured,
        )

        await service.ingest(requested)

        assert processor.process.call_args.kwargs["page_ranges"] == requested

    @pytest.mark.asyncio
    async def test_configured_ranges_are_default(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        processor = _processor(_chunks(1))
        configured = [PageRange(start=1, end=2)]
        service = _service(
            processor,
            mock_embedding_provider,
            mock_vector_store,
            default_page_ranges=configured,
        )

        await service.ingest()

        kwargs = processor.process.call_args.kwargs
        assert kwargs["page_ranges"] == configured
        assert kwargs["languages"] == "ben+eng"
        assert kwargs["source"] == "hsc26.pdf"
        assert kwargs["strategy"] == "ocr"

    def test_nothing_configured_means_all_pages(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        service = _service(_processor([]), mock_embedding_provider, mock_vector_store)
        assert service.resolve_page_ranges(None) == []
        assert service.resolve_page_ranges([]) == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_index(
        self, mock_embedding_provider: Any, missing_index_store: Any
    ) -> None:
        processor = _processor(_chunks(3))
        service = _service(processor, mock_embedding_provider, missing_index_store)

        with pytest.raises(IndexNotFoundError, match="Please create it first"):
            await service.ingest()
        processor.process.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_batch_aborts_run(
        self, mock_embedding_provider: Any, mock_vector_store: Any
    ) -> None:
        store = mock_vector_store
        original_upsert = store.upsert
        calls = 0

        async def _flaky_upsert(records):  # noqa: ANN001, ANN202
            nonlocal calls
            calls += 1
            if calls == 2:
                raise RAGError(message="upsert rejected", provider_name="mock-store")
            return await original_upsert(records)

        store.upsert = _flaky_upsert  # type: ignore[method-assign]
        service = _service(_processor(_chunks(25)), mock_embedding_provider, store)

        with pytest.raises(IngestionError) as exc_info:
            await service.ingest()

        message = exc_info.value.message
        assert "Batch 2" in message
        assert "hsc26.pdf_chunk_10" in message
        assert "hsc26.pdf_chunk_19" in message
        # batch 1 stays written, batch 3 never runs
        assert len(store.records) == 10

    @pytest.mark.asyncio
    async def test_embedding_failure_names_batch(self, mock_vector_store: Any) -> None:
        embedder = MagicMock()
        embedder.embed_single = AsyncMock(side_effect=RAGError(message="rate limited"))
        service = _service(_processor(_chunks(4)), embedder, mock_vector_store)

        with pytest.raises(IngestionError, match="Batch 1"):
            await service.ingest()
        assert mock_vector_store.records == {}

    def test_invalid_batch_size(
        self,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        with pytest.raises(ValueError):
            _service(_processor([]), mock_embedding_provider, mock_vector_store, batch_size=0)


class TestIngestThenRetrieve:
    @pytest.mark.asyncio
    async def test_text_layer_document_is_searchable(
        self,
        sample_pdf: Path,
        tmp_path: Path,
        mock_embedding_provider: Any,
        mock_vector_store: Any,
    ) -> None:
        processor = DocumentProcessor(
            converter=PageImageConverter(temp_dir=str(tmp_path / "pages")),
            extractor=OCRExtractor(MagicMock()),
            chunker=TextChunker(chunk_size=200, overlap=0, min_chunk_size=20),
        )
        service = IngestionService(
            processor=processor,
            embedding_provider=mock_embedding_provider,
            vector_store=mock_vector_store,
            document_path=str(sample_pdf),
            source="sample.pdf",
            batch_delay=0,
            strategy="text",
        )

        result = await service.ingest()
        assert result.chunks_processed > 1

        stored = next(iter(mock_vector_store.records.values()))
        retriever = ContextRetriever(mock_embedding_provider, mock_vector_store, threshold=0.1)
        retrieval = await retriever.retrieve(stored.metadata["content"])

        assert retrieval.contexts[0] == stored.metadata["content"]
        assert retrieval.scores[0] == pytest.approx(1.0)
