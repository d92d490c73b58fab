"""Fire-and-forget queue for indexing work that must not block a response."""

import asyncio
from typing import Awaitable, Set

from common.logging_config import get_logger

logger = get_logger(__name__)


class IndexingQueue:
    """
    Runs coroutines as background tasks.

    Tasks are held until they finish so they are not garbage collected
    mid-flight. A failure is logged and otherwise ignored.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def enqueue(self, coro: Awaitable, description: str = "indexing") -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        task.set_name(description)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Background task cancelled: {task.get_name()}")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background task failed: {task.get_name()}: {exc}", exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every queued task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            await asyncio.sleep(0)
