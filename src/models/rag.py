"""RAG pipeline data models for the banglaRAG knowledge base.

Defines Pydantic v2 models for document chunks, vector records, retrieval
results, evaluation scores and ingestion summaries.  All models use frozen
config so a value handed from one pipeline stage to the next cannot be
mutated behind the caller's back.

Flow of values through the system:

    1. INGESTION: OCR text is split into :class:`DocumentChunk` objects.
    2. STORAGE: each chunk is embedded and written as a :class:`VectorRecord`
       whose id is ``{source}_chunk_{chunk_index}``.
    3. RETRIEVAL: a query returns :class:`VectorMatch` objects, which the
       context retriever condenses into a :class:`RetrievalResult`.
    4. EVALUATION: the evaluator scores an answer against those contexts
       and produces a :class:`RAGEvaluation`.

See src/services/ingestion/ for the ingestion pipeline and
src/providers/vector_store/ for the ChromaDB integration.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_SOURCE = "hsc26.pdf"


# ---------------------------------------------------------------------------
# DocumentChunk — the fundamental unit of the RAG knowledge base.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A chunk of normalized text from the source document.

    Chunks are created by src/services/ingestion/chunker.py.  ``chunk_index``
    is assigned before small chunks are filtered out, so the surviving
    indices may have gaps; they still increase in document order.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1, description="Normalized chunk text.")
    source: str = Field(
        default=DEFAULT_SOURCE,
        description="Identifier of the originating document.",
    )
    # Lowest page number that contributed a sentence to this chunk.
    page: int | None = Field(
        default=None,
        ge=1,
        description="Lowest contributing page number, if one could be attributed.",
    )
    chunk_index: int = Field(ge=0, description="Position of this chunk within one ingestion run.")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def char_count(self) -> int:
        """Length of ``content`` in characters."""
        return len(self.content)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def record_id(self) -> str:
        """Vector record id, ``{source}_chunk_{chunk_index}``."""
        return f"{self.source}_chunk_{self.chunk_index}"

    def to_metadata(self) -> dict[str, Any]:
        """Metadata stored next to the vector in the index."""
        return {
            "content": self.content,
            "source": self.source,
            "chunk_index": self.chunk_index,
            "char_count": self.char_count,
        }


# ---------------------------------------------------------------------------
# Vector index records.
# ---------------------------------------------------------------------------
class VectorRecord(BaseModel):
    """One embedded chunk as written to the vector index."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Record id; upserting an existing id overwrites it.")
    values: list[float] = Field(description="Embedding vector.")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Stored chunk metadata.")


class VectorMatch(BaseModel):
    """A record returned by a similarity query."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = Field(ge=0.0, le=1.0, description="Cosine similarity to the query vector.")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def content(self) -> str:
        """The chunk text stored in metadata, or ``""``."""
        value = self.metadata.get("content")
        return value if isinstance(value, str) else ""


class IndexStats(BaseModel):
    """Size of the vector index."""

    model_config = ConfigDict(frozen=True)

    total_record_count: int = Field(default=0, ge=0, description="Number of stored vectors.")
    dimension: int = Field(default=0, ge=0, description="Vector dimension of the index.")


# ---------------------------------------------------------------------------
# Retrieval.
# ---------------------------------------------------------------------------
class RetrievalMetrics(BaseModel):
    """Summary numbers describing a single retrieval."""

    model_config = ConfigDict(frozen=True)

    total_retrieved: int = Field(default=0, ge=0, description="Raw number of matches returned.")
    above_threshold: int = Field(
        default=0, ge=0, description="Number of contexts kept after filtering."
    )
    average_similarity: float = Field(
        default=0.0, description="Mean score of all raw matches, two decimals."
    )


class RetrievalResult(BaseModel):
    """Contexts retrieved for one query.

    ``contexts`` is deduplicated and keeps query order; ``scores`` is
    parallel to it.
    """

    model_config = ConfigDict(frozen=True)

    contexts: list[str] = Field(default_factory=list)
    scores: list[float] = Field(default_factory=list)
    metrics: RetrievalMetrics = Field(default_factory=RetrievalMetrics)

    @classmethod
    def empty(cls) -> RetrievalResult:
        """The result returned when nothing could be retrieved."""
        return cls()


# ---------------------------------------------------------------------------
# Evaluation.
# ---------------------------------------------------------------------------
class GroundednessEvaluation(BaseModel):
    """How well an answer is supported by the contexts it was given."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0)
    explanation: str
    supporting_evidence: list[str] = Field(
        default_factory=list,
        max_length=3,
        description="Up to three context excerpts highly similar to the answer.",
    )


class RelevanceEvaluation(BaseModel):
    """How relevant the retrieved documents were to the query."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0)
    explanation: str
    top_scores: list[float] = Field(default_factory=list, max_length=5)
    average_score: float = 0.0


class EvaluationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    query_length: int = Field(default=0, ge=0)
    answer_length: int = Field(default=0, ge=0)


class RAGEvaluation(BaseModel):
    """Full evaluation of one question/answer pair."""

    model_config = ConfigDict(frozen=True)

    groundedness: GroundednessEvaluation
    relevance: RelevanceEvaluation
    context_used: list[str] = Field(
        default_factory=list,
        description="Excerpts (first 150 characters) of each context evaluated against.",
    )
    retrieval_metrics: RetrievalMetrics = Field(default_factory=RetrievalMetrics)
    metadata: EvaluationMetadata = Field(default_factory=EvaluationMetadata)


# ---------------------------------------------------------------------------
# IngestionResult — output of the ingestion pipeline for one run.
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of a single ingestion run.

    Returned by :class:`~src.services.ingestion.ingestion_service.IngestionService`
    and printed by the CLI (src/cli/ingest.py).
    """

    model_config = ConfigDict(frozen=True)

    chunks_processed: int = Field(default=0, ge=0, description="Chunks embedded and stored.")
    index_stats: IndexStats = Field(
        default_factory=IndexStats, description="Index size after the run."
    )
    ingestion_time: float = Field(
        default=0.0,
        ge=0.0,
        description="Wall-clock time in seconds for the ingestion run.",
    )
