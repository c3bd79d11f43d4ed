"""Context retrieval for question answering.

Embeds the query, runs a nearest-neighbour search, and keeps the matches
that clear a similarity threshold.  Bengali queries that come back with
fewer than two contexts get a second, broader search (twice as many
candidates at a lower threshold) filtered down to candidates containing
one of the query's Bengali words.  The broader result is used only when it
actually adds contexts.

Retrieval never raises: a failing embedding or primary index call is logged and
an empty :class:`~src.models.rag.RetrievalResult` is returned, so the chat
endpoint can still answer ("I don't know") instead of erroring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.models.rag import RetrievalMetrics, RetrievalResult, VectorMatch
from src.utils.language import extract_bengali_keywords, is_bengali
from src.utils.similarity import mean, round_score
from src.utils.text_normalizer import excerpt

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

# Below this many contexts a Bengali query triggers the keyword fallback.
_MIN_CONTEXTS = 2


class ContextRetriever:
    """Retrieves scored contexts for a query.

    Parameters
    ----------
    embedding_provider:
        Embeds the query text.
    vector_store:
        Index to search.
    top_k:
        Default number of matches requested.
    threshold:
        Matches must score strictly above this to be kept.
    fallback_threshold:
        Threshold for the broader keyword-fallback search.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        top_k: int = 10,
        threshold: float = 0.1,
        fallback_threshold: float = 0.05,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._top_k = top_k
        self._threshold = threshold
        self._fallback_threshold = fallback_threshold

    async def retrieve(self, query: str, top_k: int | None = None) -> RetrievalResult:
        """Return the contexts relevant to *query*; empty if the primary search fails."""
        k = top_k or self._top_k
        try:
            vector = await self._embedding_provider.embed_single(query)
            matches = await self._vector_store.query(vector, top_k=k, include_metadata=True)
            pairs = self._filter(matches, self._threshold)
            result = self._build_result(pairs, matches, above_threshold=len(pairs))
        except Exception as exc:
            logger.error("retrieval_failed", query_length=len(query), error=str(exc))
            return RetrievalResult.empty()

        if len(pairs) < _MIN_CONTEXTS and is_bengali(query):
            # A failed re-query leaves the primary contexts in place.
            try:
                fallback = await self._keyword_fallback(query, vector, k, pairs)
            except Exception as exc:
                logger.warning("retrieval_keyword_fallback_failed", error=str(exc))
                fallback = None
            if fallback is not None and len(fallback.contexts) > len(result.contexts):
                logger.info(
                    "retrieval_keyword_fallback_adopted",
                    primary=len(result.contexts),
                    fallback=len(fallback.contexts),
                )
                result = fallback

        logger.info(
            "retrieval_complete",
            query_length=len(query),
            contexts=len(result.contexts),
            total_retrieved=result.metrics.total_retrieved,
            average_similarity=result.metrics.average_similarity,
            sample=excerpt(result.contexts[0], 100) if result.contexts else "",
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _keyword_fallback(
        self,
        query: str,
        vector: list[float],
        top_k: int,
        primary: list[tuple[str, float]],
    ) -> RetrievalResult | None:
        keywords = extract_bengali_keywords(query)
        matches = await self._vector_store.query(vector, top_k=top_k * 2, include_metadata=True)
        broad = self._filter(matches, self._fallback_threshold)

        keyword_hits = [
            (content, score)
            for content, score in broad
            if any(word in content for word in keywords)
        ]
        logger.debug(
            "retrieval_keyword_fallback",
            keywords=len(keywords),
            candidates=len(broad),
            keyword_hits=len(keyword_hits),
        )

        merged = self._dedupe([*primary, *keyword_hits])
        return self._build_result(merged, matches, above_threshold=len(merged))

    @classmethod
    def _filter(cls, matches: list[VectorMatch], threshold: float) -> list[tuple[str, float]]:
        """Keep matches above *threshold* with non-empty content, deduplicated."""
        return cls._dedupe(
            [(m.content, m.score) for m in matches if m.score > threshold and m.content]
        )

    @staticmethod
    def _dedupe(pairs: list[tuple[str, float]]) -> list[tuple[str, float]]:
        seen: set[str] = set()
        unique: list[tuple[str, float]] = []
        for content, score in pairs:
            if content in seen:
                continue
            seen.add(content)
            unique.append((content, score))
        return unique

    @staticmethod
    def _build_result(
        pairs: list[tuple[str, float]],
        matches: list[VectorMatch],
        above_threshold: int,
    ) -> RetrievalResult:
        return RetrievalResult(
            contexts=[content for content, _ in pairs],
            scores=[score for _, score in pairs],
            metrics=RetrievalMetrics(
                total_retrieved=len(matches),
                above_threshold=above_threshold,
                average_similarity=round_score(mean([m.score for m in matches])),
            ),
        )
