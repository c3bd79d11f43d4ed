"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
One named index maps to one Chroma collection created in cosine space.
Fully local; data persists under ``CHROMADB_PERSIST_DIR``.
"""

from __future__ import annotations

import os
from typing import Any

# Disable ChromaDB telemetry before importing chromadb.  Its bundled
# PostHog client breaks against newer posthog releases, so telemetry is
# switched off through the env var, the SDK flag and client Settings.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.rag import IndexStats, VectorMatch, VectorRecord
from src.utils.errors import IndexNotFoundError, RAGError

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    Every vector is computed by the embedding provider and passed
    explicitly, so ChromaDB's default ONNX model is never needed.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "banglaRAG uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector index backed by a persistent ChromaDB collection.

    The collection is opened lazily and cached; deleting the index drops
    the cache.  The index dimension is recorded in the collection
    metadata at creation so :meth:`describe_stats` can report it and
    :meth:`upsert` can reject mismatched vectors before they reach Chroma.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        index_name: str = "hsc26-bangla",
    ) -> None:
        self._persist_directory = persist_directory
        self._index_name = index_name
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        self._collection: Any = None

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    async def index_exists(self) -> bool:
        try:
            return self._index_name in self._collection_names()
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB list_collections failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def create_index(self, dimension: int, metric: str = "cosine") -> None:
        try:
            self._collection = self._client.create_collection(
                name=self._index_name,
                metadata={"hnsw:space": metric, "dimension": dimension},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB create_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info(
            "chromadb_index_created",
            index_name=self._index_name,
            dimension=dimension,
            metric=metric,
        )

    async def delete_index(self) -> None:
        self._collection = None
        try:
            self._client.delete_collection(name=self._index_name)
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB delete_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_index_deleted", index_name=self._index_name)

    async def is_index_ready(self) -> bool:
        """Return ``True`` when the collection can be opened and counted."""
        try:
            self._get_collection().count()
            return True
        except IndexNotFoundError:
            return False

    async def describe_stats(self) -> IndexStats:
        collection = self._get_collection()
        try:
            count = collection.count()
            metadata = collection.metadata or {}
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return IndexStats(
            total_record_count=count,
            dimension=int(metadata.get("dimension", 0)),
        )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or overwrite *records*; the chunk text is stored as the document."""
        if not records:
            return 0

        collection = self._get_collection()
        expected_dim = int((collection.metadata or {}).get("dimension", 0))
        if expected_dim:
            for record in records:
                if len(record.values) != expected_dim:
                    raise RAGError(
                        message=(
                            f"Vector for {record.id} has dimension {len(record.values)}, "
                            f"index expects {expected_dim}"
                        ),
                        provider_name=self.get_provider_name(),
                    )

        try:
            collection.upsert(
                ids=[r.id for r in records],
                embeddings=[r.values for r in records],
                documents=[str(r.metadata.get("content", "")) for r in records],
                metadatas=[r.metadata for r in records],
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("chromadb_upsert", index_name=self._index_name, count=len(records))
        return len(records)

    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Nearest-neighbour search; cosine distance is converted to similarity."""
        collection = self._get_collection()
        try:
            count = collection.count()
            if count == 0 or top_k <= 0:
                return []

            include = ["distances", "metadatas"] if include_metadata else ["distances"]
            results = collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, count),
                include=include,
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = results["ids"][0] if results.get("ids") else []
        distances = results["distances"][0] if results.get("distances") else [0.0] * len(ids)
        metadatas = (
            results["metadatas"][0]
            if include_metadata and results.get("metadatas")
            else [{}] * len(ids)
        )

        matches = [
            VectorMatch(
                id=record_id,
                score=max(0.0, min(1.0, 1.0 - distance)),
                metadata=dict(meta or {}),
            )
            for record_id, distance, meta in zip(ids, distances, metadatas, strict=True)
        ]

        logger.debug(
            "chromadb_query",
            index_name=self._index_name,
            results_count=len(matches),
            top_score=matches[0].score if matches else 0.0,
        )
        return matches

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def get_index_name(self) -> str:
        return self._index_name

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB client responds to a heartbeat."""
        try:
            self._client.heartbeat()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _collection_names(self) -> set[str]:
        # Older chromadb returns Collection objects, newer returns names.
        return {getattr(c, "name", c) for c in self._client.list_collections()}

    def _get_collection(self) -> Any:
        """Return the cached collection, opening it on first use."""
        if self._collection is not None:
            return self._collection

        try:
            if self._index_name not in self._collection_names():
                raise IndexNotFoundError(
                    message=f'Index "{self._index_name}" does not exist. Please create it first',
                    provider_name=self.get_provider_name(),
                )
            try:
                self._collection = self._client.get_collection(
                    name=self._index_name,
                    embedding_function=_NoopEmbeddingFunction(),
                )
            except ValueError:
                # Persisted with a different embedding function; vectors are
                # always supplied explicitly, so the persisted one is never used.
                self._collection = self._client.get_collection(name=self._index_name)
        except RAGError:
            raise
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB get_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return self._collection
