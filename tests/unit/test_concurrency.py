"""Unit tests for the throttled gather helper."""

from __future__ import annotations

import asyncio

import pytest

from src.utils.concurrency import throttled_gather


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_preserves_order(self) -> None:
        async def _value(v: int, delay: float) -> int:
            await asyncio.sleep(delay)
            return v

        results = await throttled_gather([_value(1, 0.03), _value(2, 0.0), _value(3, 0.01)])
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_respects_semaphore(self) -> None:
        active = 0
        peak = 0

        async def _work() -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await throttled_gather([_work() for _ in range(6)], semaphore=asyncio.Semaphore(2))
        assert peak == 2

    @pytest.mark.asyncio
    async def test_returns_exceptions_by_default(self) -> None:
        async def _fail() -> None:
            raise ValueError("boom")

        results = await throttled_gather([_fail()])
        assert isinstance(results[0], ValueError)

    @pytest.mark.asyncio
    async def test_raises_when_asked(self) -> None:
        async def _fail() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await throttled_gather([_fail()], return_exceptions=False)
