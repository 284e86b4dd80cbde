"""Work queue abstraction for batch migration."""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class WorkQueue(abc.ABC):
    """Runs a worker over items and collects results in item order.

    The worker handles one item and isolates its own failures. ``cancel``
    stops further items from being started; an item already running
    finishes.
    """

    def __init__(self):
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    @abc.abstractmethod
    async def run(self, items: Iterable[T], worker: Callable[[T], Awaitable[R]]) -> list[R]:
        """Process items, returning one result per processed item."""


class SequentialQueue(WorkQueue):
    """One item at a time, awaiting each before starting the next."""

    async def run(self, items: Iterable[T], worker: Callable[[T], Awaitable[R]]) -> list[R]:
        results: list[R] = []
        for item in items:
            if self.cancelled:
                logger.info("Migration cancelled after %d items", len(results))
                break
            results.append(await worker(item))
        return results
