"""Shared concurrency primitives for batch embedding.

Ingestion embeds every chunk of a batch at once and the evaluator embeds
all retrieved contexts at once.  :func:`throttled_gather` is a drop-in
replacement for ``asyncio.gather`` that wraps each awaitable in a
semaphore acquire/release so those fan-outs stay under the embedding
provider's request limits.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")

# Default ceiling on in-flight embedding requests when the caller does not
# pass its own semaphore.  One ingestion batch (10 chunks) fits in it.
_EMBEDDING_CONCURRENCY = 10


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with optional semaphore throttling.

    Each coroutine is wrapped so it acquires the semaphore before executing
    and releases it afterward.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore for concurrency control.  A fresh semaphore of
        ``_EMBEDDING_CONCURRENCY`` slots is created per call when omitted.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(_EMBEDDING_CONCURRENCY)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
