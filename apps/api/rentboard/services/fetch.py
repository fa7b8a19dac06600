"""Last-request-wins guard for overlapping fetches of one view."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from ..core.errors import StaleResultError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestRequest(Generic[T]):
    """Runs fetches so that only the most recently started one can apply.

    Starting a new fetch cancels the one in flight; whoever awaited the
    superseded fetch gets ``StaleResultError`` instead of a result.
    """

    def __init__(self, name: str = "fetch") -> None:
        self.name = name
        self._generation = 0
        self._task: asyncio.Task[T] | None = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        self._generation += 1
        generation = self._generation
        if self.in_flight:
            logger.debug("%s: superseding request %s", self.name, generation - 1)
            self._task.cancel()

        task: asyncio.Task[T] = asyncio.ensure_future(factory())
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                raise StaleResultError(f"{self.name}: request {generation} was superseded") from None
            raise
        finally:
            if self._task is task:
                self._task = None

        if generation != self._generation:
            raise StaleResultError(f"{self.name}: request {generation} was superseded")
        return result

    def cancel(self) -> None:
        """Drop whatever is in flight, e.g. when the view goes away."""

        self._generation += 1
        if self.in_flight:
            self._task.cancel()
        self._task = None
