"""Groundedness and relevance scoring for question/answer pairs.

**Groundedness** asks whether the answer is supported by the contexts it
was generated from: the answer and every context are embedded, and the
mean cosine similarity of the three closest contexts (boosted by 1.2) is
the score.

**Relevance** asks whether retrieval found good documents: the mean of the
first five search scores, boosted by 1.1.

Both scores are clamped to ``[0, 1]``, rounded to two decimals, and given a
fixed explanation band (Excellent / Good / Fair / Poor).
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from src.models.rag import (
    EvaluationMetadata,
    GroundednessEvaluation,
    RAGEvaluation,
    RelevanceEvaluation,
    RetrievalMetrics,
    RetrievalResult,
)
from src.utils.concurrency import throttled_gather
from src.utils.similarity import clamp_unit, cosine_similarity, mean, round_score
from src.utils.text_normalizer import excerpt

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.services.context_retriever import ContextRetriever

logger = structlog.get_logger(logger_name=__name__)

_EVIDENCE_SIMILARITY = 0.7
_MAX_EVIDENCE = 3
_GROUNDEDNESS_TOP_N = 3
_GROUNDEDNESS_BOOST = 1.2
_RELEVANCE_TOP_N = 5
_RELEVANCE_BOOST = 1.1
_EVIDENCE_EXCERPT = 200
_CONTEXT_EXCERPT = 150

_GROUNDEDNESS_BANDS = (
    (0.8, "Excellent: Answer is strongly supported by retrieved context"),
    (0.6, "Good: Answer has reasonable support from context"),
    (0.4, "Fair: Answer has some support but may include unsupported information"),
    (0.0, "Poor: Answer appears to have limited support from retrieved context"),
)

_RELEVANCE_BANDS = (
    (0.8, "Excellent: Retrieved documents are highly relevant to the query"),
    (0.6, "Good: Retrieved documents are reasonably relevant"),
    (0.4, "Fair: Some retrieved documents are relevant but quality varies"),
    (0.0, "Poor: Retrieved documents have low relevance to the query"),
)

MANUAL_CONTEXTS_EXPLANATION = (
    "Contexts were manually provided - cannot evaluate retrieval relevance"
)

EVALUATION_GUIDE: dict[str, Any] = {
    "description": (
        "RAG Evaluation API - Evaluate groundedness and relevance of question-answer pairs"
    ),
    "endpoints": {
        "POST /api/v1/evaluate": {
            "description": "Evaluate a query-answer pair for groundedness and relevance",
            "parameters": {
                "query": "The user's question (required)",
                "answer": "The system's response (required)",
                "contexts": (
                    "Array of context strings (optional - if not provided, will be retrieved)"
                ),
            },
            "example": {
                "query": "অনুপমের ভাষায় সুপুরুষ কাকে বলা হয়েছে?",
                "answer": "অনুপমের ভাষায় সুপুরুষ বলা হয়েছে তাকে যে...",
                "contexts": ["context1", "context2"],
            },
        },
    },
    "metrics": {
        "groundedness": {
            "description": "Measures how well the answer is supported by retrieved context",
            "range": "0.0 to 1.0",
            "calculation": "Cosine similarity between answer and context embeddings",
        },
        "relevance": {
            "description": "Measures how well retrieved documents match the query",
            "range": "0.0 to 1.0",
            "calculation": "Average of top similarity scores from vector search",
        },
    },
    "scoring_guidelines": {
        "excellent": "0.8 - 1.0",
        "good": "0.6 - 0.8",
        "fair": "0.4 - 0.6",
        "poor": "0.0 - 0.4",
    },
}


def _band(score: float, bands: tuple[tuple[float, str], ...]) -> str:
    for floor, label in bands:
        if score >= floor:
            return label
    return bands[-1][1]


class RAGEvaluator:
    """Scores answers against their contexts and retrieval quality."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        retriever: ContextRetriever,
        max_concurrency: int = 10,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._retriever = retriever
        self._max_concurrency = max_concurrency

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def evaluate_groundedness(
        self, answer: str, contexts: Sequence[str]
    ) -> GroundednessEvaluation:
        """Score how well *answer* is supported by *contexts*.  Never raises."""
        if not contexts:
            return GroundednessEvaluation(
                score=0.0,
                explanation="No context retrieved to support the answer",
                supporting_evidence=[],
            )

        try:
            answer_vector = await self._embedding_provider.embed_single(answer)
            context_vectors = await throttled_gather(
                [self._embedding_provider.embed_single(c) for c in contexts],
                semaphore=asyncio.Semaphore(self._max_concurrency),
                return_exceptions=False,
            )
        except Exception as exc:
            logger.error("groundedness_embedding_failed", error=str(exc))
            return GroundednessEvaluation(
                score=0.0,
                explanation="Error calculating groundedness score",
                supporting_evidence=[],
            )

        similarities = [cosine_similarity(answer_vector, v) for v in context_vectors]

        ranked = sorted(range(len(similarities)), key=lambda i: similarities[i], reverse=True)
        evidence = [
            excerpt(contexts[i], _EVIDENCE_EXCERPT)
            for i in ranked
            if similarities[i] > _EVIDENCE_SIMILARITY
        ][:_MAX_EVIDENCE]

        top = [similarities[i] for i in ranked[:_GROUNDEDNESS_TOP_N]]
        score = round_score(clamp_unit(mean(top) * _GROUNDEDNESS_BOOST))

        return GroundednessEvaluation(
            score=score,
            explanation=_band(score, _GROUNDEDNESS_BANDS),
            supporting_evidence=evidence,
        )

    def evaluate_relevance(self, search_scores: Sequence[float]) -> RelevanceEvaluation:
        """Score retrieval quality from the search scores, in retrieval order."""
        if not search_scores:
            return RelevanceEvaluation(
                score=0.0,
                explanation="No documents retrieved",
                top_scores=[],
                average_score=0.0,
            )

        top = list(search_scores[:_RELEVANCE_TOP_N])
        score = round_score(clamp_unit(mean(top) * _RELEVANCE_BOOST))
        return RelevanceEvaluation(
            score=score,
            explanation=_band(score, _RELEVANCE_BANDS),
            top_scores=[round_score(s) for s in top],
            average_score=round_score(mean(list(search_scores))),
        )

    async def evaluate(
        self,
        query: str,
        answer: str,
        contexts: Sequence[str] | None = None,
        retrieval: RetrievalResult | None = None,
    ) -> RAGEvaluation:
        """Evaluate *answer* to *query*.

        Parameters
        ----------
        query, answer:
            The question and the generated answer.
        contexts:
            Contexts supplied by the caller.  When present, relevance cannot
            be measured and is reported as 1.0.  ``None`` or empty means
            "retrieve them".
        retrieval:
            An already-computed retrieval for *query* (the chat endpoint
            passes the one it answered from) to avoid searching twice.
        """
        if contexts:
            used = list(contexts)
            relevance = RelevanceEvaluation(
                score=1.0,
                explanation=MANUAL_CONTEXTS_EXPLANATION,
                top_scores=[],
                average_score=1.0,
            )
            metrics = RetrievalMetrics(
                total_retrieved=len(used),
                above_threshold=len(used),
                average_similarity=1.0,
            )
        else:
            if retrieval is None:
                retrieval = await self._retriever.retrieve(query)
            used = list(retrieval.contexts)
            relevance = self.evaluate_relevance(retrieval.scores)
            metrics = retrieval.metrics

        groundedness = await self.evaluate_groundedness(answer, used)

        evaluation = RAGEvaluation(
            groundedness=groundedness,
            relevance=relevance,
            context_used=[excerpt(c, _CONTEXT_EXCERPT) for c in used],
            retrieval_metrics=metrics,
            metadata=EvaluationMetadata(query_length=len(query), answer_length=len(answer)),
        )
        logger.info(
            "evaluation_complete",
            groundedness=groundedness.score,
            relevance=relevance.score,
            contexts_used=len(used),
        )
        return evaluation
