"""Bounded concurrency for per-file analysis."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


class WorkerPool:
    """Run coroutines with at most `limit` in flight.

    Each per-file analysis spawns up to two git processes, so the limit
    bounds process and descriptor usage. All tasks belong to one
    TaskGroup: cancelling the caller cancels every running task and
    drops the ones still waiting for a slot.
    """

    def __init__(self, limit: int = 10):
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.active = 0
        self.peak = 0

    async def _run(self, fn: Callable[[T], Awaitable[R]], item: T) -> R:
        async with self._semaphore:
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                return await fn(item)
            finally:
                self.active -= 1

    async def map(
        self, fn: Callable[[T], Awaitable[R]], items: Iterable[T]
    ) -> list[R]:
        """Apply fn to every item; results keep the input order.

        An exception escaping fn cancels the remaining tasks and is
        re-raised as itself.
        """
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._run(fn, item)) for item in items
                ]
        except BaseExceptionGroup as eg:
            if len(eg.exceptions) == 1:
                raise eg.exceptions[0] from None
            raise
        return [task.result() for task in tasks]
