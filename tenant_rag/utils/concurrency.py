"""Shared concurrency primitives for the embedding and ingestion pipelines.

Two patterns are exposed:

1. **gather_in_batches** -- split items into fixed-size batches and run a
   batch worker over them one batch at a time, pausing between batches.
   Used by the embedding adapters to stay under upstream rate limits.
   Output order always equals input order, and the first failure
   propagates, so callers never see a partial result.

2. **bounded_task_group** -- run a list of coroutine factories under an
   :class:`asyncio.TaskGroup` with a semaphore cap.  The first failure
   cancels the siblings and is re-raised unwrapped.  Used when ingestion
   batches are allowed to upsert concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

from tenant_rag.utils.logging import get_logger

_T = TypeVar("_T")
_R = TypeVar("_R")

_logger: structlog.BoundLogger = get_logger(__name__)


def chunked(items: Sequence[_T], size: int) -> list[Sequence[_T]]:
    """Split *items* into consecutive slices of at most *size* elements."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    return [items[start : start + size] for start in range(0, len(items), size)]


async def gather_in_batches(
    items: Sequence[_T],
    worker: Callable[[Sequence[_T]], Awaitable[list[_R]]],
    batch_size: int,
    delay_seconds: float = 0.0,
) -> list[_R]:
    """Run *worker* over consecutive batches of *items*.

    Batches run sequentially with *delay_seconds* between consecutive
    batches (never before the first or after the last).  The worker decides
    whether a batch is one upstream call or a concurrent fan-out.

    Returns
    -------
    list[_R]
        The workers' outputs concatenated in batch order.

    Raises
    ------
    Exception
        Whatever the first failing *worker* call raised.
    """
    results: list[_R] = []
    batches = chunked(items, batch_size)
    for batch_number, batch in enumerate(batches):
        if batch_number > 0 and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        batch_results = await worker(batch)
        results.extend(batch_results)
        _logger.debug(
            "batch_completed",
            batch=batch_number + 1,
            total_batches=len(batches),
            batch_size=len(batch),
        )
    return results


async def bounded_task_group(
    factories: Sequence[Callable[[], Awaitable[_R]]],
    limit: int,
) -> list[_R]:
    """Run coroutine *factories* with at most *limit* in flight.

    A factory is only invoked once its task holds a semaphore slot, so
    work cancelled after a sibling fails is never started.

    Returns
    -------
    list[_R]
        Results in the same order as *factories*.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(factory: Callable[[], Awaitable[_R]]) -> _R:
        async with semaphore:
            return await factory()

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_wrapped(f)) for f in factories]
    except BaseExceptionGroup as exc_group:
        first = exc_group.exceptions[0]
        _logger.warning(
            "task_group_failed",
            failures=len(exc_group.exceptions),
            error=str(first),
        )
        raise first from first.__cause__
    return [task.result() for task in tasks]
