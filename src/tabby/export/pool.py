"""Bounded-concurrency task runner shared by the export phases."""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

# Returned in place of a result by items skipped after a failure.
_SKIPPED: Any = object()


async def run_bounded[T, R](
    items: Iterable[T],
    limit: int,
    worker: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order.  Once any worker raises, no further
    item is started.  Workers already running are allowed to finish (a
    worker blocked in ``asyncio.to_thread`` cannot be interrupted anyway),
    and only then does the first exception propagate, unchanged.  Nothing
    started by this call is still running once it returns or raises.

    If the caller itself is cancelled, every task is cancelled and awaited
    before the ``CancelledError`` propagates.

    """
    semaphore = asyncio.Semaphore(limit)
    failed = False

    async def _run(item: T) -> R:
        nonlocal failed
        async with semaphore:
            if failed:
                return _SKIPPED
            try:
                return await worker(item)
            except BaseException:
                failed = True
                raise

    tasks = [asyncio.ensure_future(_run(item)) for item in items]
    if not tasks:
        return []
    try:
        return await asyncio.gather(*tasks)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    except BaseException:
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def resolve[T](value: T | Awaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value
