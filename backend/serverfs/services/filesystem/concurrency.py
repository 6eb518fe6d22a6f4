"""Bounded fan-out for batch filesystem operations."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from serverfs.core.config import settings

T = TypeVar("T")
R = TypeVar("R")


async def map_limit(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int | None = None,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order. Once a worker fails no further items are
    admitted; the call returns after every admitted worker has settled and then
    re-raises the first failure. Work that already completed is not undone.
    """
    semaphore = asyncio.Semaphore(limit or settings.batch_concurrency)
    results: list[Any] = [None] * len(items)
    errors: list[Exception] = []

    async def run(index: int, item: T) -> None:
        async with semaphore:
            if errors:
                return
            try:
                results[index] = await worker(item)
            except Exception as e:
                errors.append(e)

    await asyncio.gather(*(run(index, item) for index, item in enumerate(items)))

    if errors:
        raise errors[0]
    return results


async def each_limit(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[Any]],
    limit: int | None = None,
) -> None:
    await map_limit(items, worker, limit)
