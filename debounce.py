from __future__ import annotations
import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Coalesce rapid pushes into one callback after a quiet period.

    Each push() cancels the pending timer and starts a new one; the callback
    only ever sees the last value pushed before the input went quiet.
    """

    def __init__(self, delay: float, callback: Callable[[T], None]) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, value: T) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire_later(value))

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def _fire_later(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        logger.debug("DEBOUNCE FIRED → value=%r", value)
        self._callback(value)
