"""Per-session retrieval state: page cursors and background tasks."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# (page_size, page) → (name, id) of the last document on that page.
CursorKey = tuple[int, int]
Cursor = tuple[str, str]


@dataclass
class PagingContext:
    """Explicit state for one session / request chain.

    Holds the store cursors of pages already visited so later pages can
    resume without re-walking, and the background tasks started on its
    behalf so callers can wait for them before shutting down.
    """

    cursors: dict[CursorKey, Cursor] = field(default_factory=dict)
    _tasks: set[asyncio.Task[Any]] = field(default_factory=set, repr=False)

    def cursor_for(self, page_size: int, page: int) -> Cursor | None:
        return self.cursors.get((page_size, page))

    def remember(self, page_size: int, page: int, cursor: Cursor) -> None:
        self.cursors[(page_size, page)] = cursor

    def nearest_cursor(self, page_size: int, page: int) -> tuple[int, Cursor | None]:
        """Closest cached (page, cursor) at or before ``page``; (0, None) if none."""
        for p in range(page, 0, -1):
            cursor = self.cursors.get((page_size, p))
            if cursor is not None:
                return p, cursor
        return 0, None

    def reset_cursors(self) -> None:
        self.cursors.clear()

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Schedule ``coro`` without awaiting it; the context keeps a reference."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every background task started through this context."""
        while self._tasks:
            tasks = list(self._tasks)
            results = await asyncio.gather(*tasks, return_exceptions=True)
            self._tasks.difference_update(tasks)
            for result in results:
                if isinstance(result, BaseException):
                    logger.warning("Background task failed: %r", result)
