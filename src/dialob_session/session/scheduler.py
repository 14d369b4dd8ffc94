"""Pending-action queue with a trailing-edge debounce timer.

Every ``enqueue()`` (re)arms one timer on the running event loop.  When the
caller stays quiet for a full ``delay`` the timer fires, the queue is swept
(captured and replaced in one step) and the batch is handed to the flush
callback in a detached task.  Actions enqueued while that task awaits the
network start a new batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .models import Action

logger = logging.getLogger(__name__)

FlushCallback = Callable[[list[Action]], Awaitable[Any]]

DEFAULT_DEBOUNCE = 0.5


class DebouncedScheduler:
    """Buffer actions and flush them after a quiet period.

    Args:
        flush_callback: Coroutine function receiving the swept batch.
        delay: Quiet period in seconds.
    """

    def __init__(
        self,
        flush_callback: FlushCallback,
        delay: float = DEFAULT_DEBOUNCE,
    ) -> None:
        if delay < 0:
            raise ValueError(f"Debounce delay must be >= 0, got {delay}")
        self._flush_callback = flush_callback
        self.delay = delay
        self._queue: list[Action] = []
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> tuple[Action, ...]:
        """Actions waiting for the next flush."""
        return tuple(self._queue)

    @property
    def armed(self) -> bool:
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        """Number of detached flush tasks still running."""
        return len(self._tasks)

    def enqueue(self, action: Action) -> None:
        """Queue *action* and restart the quiet-period timer.

        Must be called from a running event loop.
        """
        self._queue.append(action)
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._on_timer)

    def cancel(self) -> None:
        """Disarm the timer.  No-op when no timer is armed."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def sweep(self) -> list[Action]:
        """Take every pending action, leaving an empty queue behind."""
        batch, self._queue = self._queue, []
        return batch

    async def flush(self) -> Any:
        """Flush right away instead of waiting for the timer.

        Returns:
            The flush callback's result, or ``None`` when nothing was
            pending.  Errors from the callback propagate to the caller.
        """
        self.cancel()
        batch = self.sweep()
        if not batch:
            return None
        return await self._flush_callback(batch)

    async def aclose(self) -> None:
        """Disarm the timer and wait for in-flight flushes to settle."""
        self.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_timer(self) -> None:
        self._timer = None
        batch = self.sweep()
        if not batch:
            return
        logger.debug("Debounce elapsed, flushing %d action(s)", len(batch))
        task = asyncio.ensure_future(self._flush_callback(batch))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Already routed to the error listeners by the coordinator.
            logger.debug("Detached flush failed: %s", exc)
