"""Abstract base class for vector-index service providers.

Defines the contract for managing one named vector index and storing and
querying embedded chunks in it.  The lifecycle operations (exists, create,
delete, ready) are what the index service polls during create/recreate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.rag import IndexStats, VectorMatch, VectorRecord


# Concrete implementation: ChromaDBProvider (src/providers/vector_store/)
# Data persists to disk at CHROMADB_PERSIST_DIR; one collection per index.
class IVectorStoreProvider(ABC):
    """Contract for the vector index used by the RAG pipeline.

    All index methods are async so network-backed stores do not block the
    event loop.  Every failure surfaces as
    :class:`~src.utils.errors.RAGError`; operations that need an existing
    index raise :class:`~src.utils.errors.IndexNotFoundError` when it is
    missing.
    """

    # -- Index lifecycle ---------------------------------------------------

    @abstractmethod
    async def index_exists(self) -> bool:
        """Return ``True`` if the configured index is present."""

    @abstractmethod
    async def create_index(self, dimension: int, metric: str = "cosine") -> None:
        """Create the configured index.

        Parameters
        ----------
        dimension:
            Vector dimension every record must have.
        metric:
            Distance metric; ``"cosine"`` is the only one scores are
            calibrated for.
        """

    @abstractmethod
    async def delete_index(self) -> None:
        """Delete the configured index and every record in it."""

    @abstractmethod
    async def is_index_ready(self) -> bool:
        """Return ``True`` once the index accepts reads and writes."""

    @abstractmethod
    async def describe_stats(self) -> IndexStats:
        """Return the record count and dimension of the index."""

    # -- Records -----------------------------------------------------------

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or overwrite records by id.

        Returns
        -------
        int
            The number of records written.
        """

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Return up to *top_k* nearest records, best match first.

        Parameters
        ----------
        vector:
            Query embedding.
        top_k:
            Maximum number of matches.
        include_metadata:
            When ``False`` the matches carry empty metadata.

        Returns
        -------
        list[VectorMatch]
            Matches whose ``score`` is cosine similarity in ``[0, 1]``.
        """

    # -- Identity ----------------------------------------------------------

    @abstractmethod
    def get_index_name(self) -> str:
        """Return the name of the configured index."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this vector store."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backing store can be reached."""
