"""
shellfix — async helpers for rule fan-out and output capture.

File: src/shellfix/utils/concurrency.py

Purpose
- ``WorkerPool`` evaluates a blocking callable over a batch of items on
  worker threads, never more than ``max_concurrency`` at once.
- ``run_with_timeout`` bounds how long a captured command may run.

Functional requirements
- ``map_blocking`` returns results in input order, whatever order the
  threads finish in.
- The first failure cancels calls that have not started yet and propagates.
- A coroutine handed to ``run_with_timeout`` is always awaited or closed.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

T = TypeVar("T")
ItemT = TypeVar("ItemT")


@dataclass(slots=True)
class WorkerPool(Generic[T]):
    """Bounded thread fan-out for synchronous work such as rule evaluation."""

    max_concurrency: int
    _slots: asyncio.Semaphore = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        self._slots = asyncio.Semaphore(self.max_concurrency)

    async def map_blocking(
        self,
        func: Callable[[ItemT], T],
        items: Sequence[ItemT],
    ) -> list[T]:
        if not items:
            return []
        tasks = [asyncio.create_task(self._call(func, item)) for item in items]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _call(self, func: Callable[[ItemT], T], item: ItemT) -> T:
        async with self._slots:
            return await asyncio.to_thread(func, item)


async def run_with_timeout(coroutine: Awaitable[T], timeout_seconds: float) -> T:
    """Await ``coroutine``; raise ``TimeoutError`` once ``timeout_seconds`` pass."""

    if timeout_seconds <= 0:
        if inspect.iscoroutine(coroutine):
            coroutine.close()
        raise ValueError("timeout_seconds must be > 0")

    try:
        async with asyncio.timeout(timeout_seconds):
            return await coroutine
    except TimeoutError:
        raise TimeoutError(f"timed out after {timeout_seconds} seconds") from None


__all__ = ["WorkerPool", "run_with_timeout"]
