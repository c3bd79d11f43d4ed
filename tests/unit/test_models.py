"""Unit tests for banglaRAG Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models.chat import ChatEvent, ChatMessage
from src.models.document import PageRange, pages_in_ranges
from src.models.rag import (
    DocumentChunk,
    GroundednessEvaluation,
    RetrievalResult,
    VectorMatch,
)


class TestPageRange:
    def test_single_page(self) -> None:
        page_range = PageRange(start=7, end=7)
        assert list(page_range.pages()) == [7]

    def test_inclusive_range(self) -> None:
        assert list(PageRange(start=10, end=13).pages()) == [10, 11, 12, 13]

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PageRange(start=5, end=4)

    def test_zero_page_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PageRange(start=0, end=2)

    def test_is_frozen(self) -> None:
        page_range = PageRange(start=1, end=2)
        with pytest.raises(ValidationError):
            page_range.start = 3  # type: ignore[misc]

    def test_pages_in_ranges_unions_and_sorts(self) -> None:
        ranges = [PageRange(start=5, end=6), PageRange(start=1, end=2), PageRange(start=6, end=7)]
        assert pages_in_ranges(ranges) == [1, 2, 5, 6, 7]

    def test_pages_in_no_ranges(self) -> None:
        assert pages_in_ranges([]) == []


class TestDocumentChunk:
    def test_record_id_and_char_count(self) -> None:
        chunk = DocumentChunk(content="অনুপমের বয়স সাতাশ বছর।", chunk_index=4)
        assert chunk.record_id == "hsc26.pdf_chunk_4"
        assert chunk.char_count == len("অনুপমের বয়স সাতাশ বছর।")

    def test_metadata(self) -> None:
        chunk = DocumentChunk(content="কল্যাণী", source="book.pdf", page=12, chunk_index=0)
        assert chunk.to_metadata() == {
            "content": "কল্যাণী",
            "source": "book.pdf",
            "chunk_index": 0,
            "char_count": 7,
        }

    def test_empty_content_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DocumentChunk(content="", chunk_index=0)

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DocumentChunk(content="x", chunk_index=-1)


class TestVectorMatch:
    def test_content_from_metadata(self) -> None:
        match = VectorMatch(id="a", score=0.5, metadata={"content": "শম্ভুনাথ"})
        assert match.content == "শম্ভুনাথ"

    def test_missing_content(self) -> None:
        assert VectorMatch(id="a", score=0.5).content == ""

    def test_score_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            VectorMatch(id="a", score=1.5)


class TestRetrievalResult:
    def test_empty(self) -> None:
        result = RetrievalResult.empty()
        assert result.contexts == []
        assert result.scores == []
        assert result.metrics.total_retrieved == 0
        assert result.metrics.above_threshold == 0
        assert result.metrics.average_similarity == 0.0


class TestEvaluationModels:
    def test_groundedness_score_bounded(self) -> None:
        with pytest.raises(ValidationError):
            GroundednessEvaluation(score=1.2, explanation="too high")

    def test_at_most_three_pieces_of_evidence(self) -> None:
        with pytest.raises(ValidationError):
            GroundednessEvaluation(
                score=0.9, explanation="x", supporting_evidence=["a", "b", "c", "d"]
            )


class TestChatModels:
    def test_message_timestamp_defaults(self) -> None:
        message = ChatMessage(role="user", content="হ্যালো")
        assert message.timestamp.tzinfo is not None

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChatMessage(role="system", content="x")  # type: ignore[arg-type]

    def test_token_event(self) -> None:
        event = ChatEvent(type="token", content="অনু")
        assert event.evaluation is None
        assert event.user_message is None
