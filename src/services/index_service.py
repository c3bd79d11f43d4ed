"""Vector index lifecycle: create, recreate, and wait for readiness.

Index creation and deletion are asynchronous on hosted vector stores, so
both operations poll until the index reaches the expected state.  Each
poll that raises counts as a failed attempt; once the attempt budget is
spent :class:`~src.utils.errors.IndexTimeoutError` is raised.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog

from src.models.rag import IndexStats
from src.utils.errors import IndexTimeoutError

if TYPE_CHECKING:
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IndexService:
    """Creates, recreates and inspects the configured vector index.

    Parameters
    ----------
    vector_store:
        The store that owns the index.
    dimension:
        Vector dimension of new indexes (1536 for ``text-embedding-ada-002``).
    metric:
        Distance metric of new indexes.
    poll_interval:
        Seconds between readiness/deletion polls.
    max_ready_attempts:
        Polls allowed while waiting for a new index to become ready.
    max_delete_attempts:
        Polls allowed while waiting for a deleted index to disappear.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        dimension: int = 1536,
        metric: str = "cosine",
        poll_interval: float = 10.0,
        max_ready_attempts: int = 60,
        max_delete_attempts: int = 30,
    ) -> None:
        self._vector_store = vector_store
        self._dimension = dimension
        self._metric = metric
        self._poll_interval = poll_interval
        self._max_ready_attempts = max_ready_attempts
        self._max_delete_attempts = max_delete_attempts

    @property
    def index_name(self) -> str:
        return self._vector_store.get_index_name()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_index(self) -> dict[str, Any]:
        """Create the index unless it already exists.

        Returns
        -------
        dict
            ``{"created": bool, "index_name": str, "message": str}``.
        """
        name = self.index_name
        if await self._vector_store.index_exists():
            logger.info("index_already_exists", index_name=name)
            return {
                "created": False,
                "index_name": name,
                "message": f'Index "{name}" already exists.',
            }

        await self._create_and_wait()
        return {
            "created": True,
            "index_name": name,
            "message": f'Index "{name}" created successfully and is ready.',
        }

    async def recreate_index(self) -> dict[str, Any]:
        """Delete the index (if present) and create it again, empty.

        Raises
        ------
        IndexTimeoutError
            If deletion or creation does not finish within the attempt budget.
        """
        name = self.index_name
        if await self._vector_store.index_exists():
            logger.info("index_deleting", index_name=name)
            await self._vector_store.delete_index()
            await self.wait_until_deleted()

        await self._create_and_wait()
        return {
            "created": True,
            "index_name": name,
            "dimension": self._dimension,
            "message": (
                f'Index "{name}" recreated successfully with '
                f"{self._dimension} dimensions and is ready."
            ),
        }

    async def describe_stats(self) -> IndexStats:
        """Return record count and dimension of the index."""
        return await self._vector_store.describe_stats()

    async def wait_until_ready(self) -> None:
        """Poll until the index reports ready."""
        for attempt in range(1, self._max_ready_attempts + 1):
            try:
                if await self._vector_store.is_index_ready():
                    logger.info("index_ready", index_name=self.index_name, attempts=attempt)
                    return
            except Exception as exc:
                logger.debug("index_ready_poll_failed", attempt=attempt, error=str(exc))
            await asyncio.sleep(self._poll_interval)

        raise IndexTimeoutError(
            message="Index creation timed out",
            provider_name=self._vector_store.get_provider_name(),
        )

    async def wait_until_deleted(self) -> None:
        """Poll until the index no longer exists."""
        for attempt in range(1, self._max_delete_attempts + 1):
            try:
                if not await self._vector_store.index_exists():
                    logger.info("index_deleted", index_name=self.index_name, attempts=attempt)
                    return
            except Exception as exc:
                logger.debug("index_delete_poll_failed", attempt=attempt, error=str(exc))
            await asyncio.sleep(self._poll_interval)

        raise IndexTimeoutError(
            message="Index deletion timed out",
            provider_name=self._vector_store.get_provider_name(),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _create_and_wait(self) -> None:
        logger.info(
            "index_creating",
            index_name=self.index_name,
            dimension=self._dimension,
            metric=self._metric,
        )
        await self._vector_store.create_index(self._dimension, self._metric)
        await self.wait_until_ready()
