"""Unit tests for IndexService — create, recreate and readiness polling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.services.index_service import IndexService
from src.utils.errors import IndexTimeoutError, RAGError


def _store(exists: bool = False) -> MagicMock:
    store = MagicMock(spec=IVectorStoreProvider)
    store.get_index_name.return_value = "hsc26-bangla"
    store.get_provider_name.return_value = "chromadb"
    store.index_exists = AsyncMock(return_value=exists)
    store.create_index = AsyncMock()
    store.delete_index = AsyncMock()
    store.is_index_ready = AsyncMock(return_value=True)
    return store


def _service(store: MagicMock, **kwargs: int) -> IndexService:
    return IndexService(store, poll_interval=0, **kwargs)


class TestCreateIndex:
    @pytest.mark.asyncio
    async def test_creates_when_missing(self) -> None:
        store = _store(exists=False)
        result = await _service(store).create_index()

        assert result == {
            "created": True,
            "index_name": "hsc26-bangla",
            "message": 'Index "hsc26-bangla" created successfully and is ready.',
        }
        store.create_index.assert_awaited_once_with(1536, "cosine")
        store.is_index_ready.assert_awaited()

    @pytest.mark.asyncio
    async def test_existing_index_left_alone(self) -> None:
        store = _store(exists=True)
        result = await _service(store).create_index()

        assert result["created"] is False
        assert result["message"] == 'Index "hsc26-bangla" already exists.'
        store.create_index.assert_not_awaited()


class TestRecreateIndex:
    @pytest.mark.asyncio
    async def test_deletes_then_creates(self) -> None:
        store = _store()
        # exists before delete, gone on the first deletion poll
        store.index_exists = AsyncMock(side_effect=[True, False])

        result = await _service(store).recreate_index()

        store.delete_index.assert_awaited_once()
        store.create_index.assert_awaited_once_with(1536, "cosine")
        assert result["dimension"] == 1536
        assert result["message"] == (
            'Index "hsc26-bangla" recreated successfully with 1536 dimensions and is ready.'
        )

    @pytest.mark.asyncio
    async def test_missing_index_just_created(self) -> None:
        store = _store(exists=False)
        await _service(store).recreate_index()
        store.delete_index.assert_not_awaited()
        store.create_index.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deletion_timeout(self) -> None:
        store = _store(exists=True)
        with pytest.raises(IndexTimeoutError, match="Index deletion timed out"):
            await _service(store, max_delete_attempts=3).recreate_index()
        # one existence check before deleting, then three polls
        assert store.index_exists.await_count == 4
        store.create_index.assert_not_awaited()


class TestWaitUntilReady:
    @pytest.mark.asyncio
    async def test_ready_after_some_polls(self) -> None:
        store = _store()
        store.is_index_ready = AsyncMock(side_effect=[False, False, True])
        await _service(store).wait_until_ready()
        assert store.is_index_ready.await_count == 3

    @pytest.mark.asyncio
    async def test_timeout_after_attempt_budget(self) -> None:
        store = _store()
        store.is_index_ready = AsyncMock(return_value=False)
        with pytest.raises(IndexTimeoutError, match="Index creation timed out") as exc_info:
            await _service(store, max_ready_attempts=5).wait_until_ready()
        assert store.is_index_ready.await_count == 5
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_poll_errors_count_as_attempts(self) -> None:
        store = _store()
        store.is_index_ready = AsyncMock(
            side_effect=[RAGError(message="flaky"), RAGError(message="flaky"), True]
        )
        await _service(store, max_ready_attempts=3).wait_until_ready()
        assert store.is_index_ready.await_count == 3

    @pytest.mark.asyncio
    async def test_poll_errors_exhaust_budget(self) -> None:
        store = _store()
        store.is_index_ready = AsyncMock(side_effect=RAGError(message="down"))
        with pytest.raises(IndexTimeoutError):
            await _service(store, max_ready_attempts=2).wait_until_ready()


def test_index_name_from_store() -> None:
    assert _service(_store()).index_name == "hsc26-bangla"
