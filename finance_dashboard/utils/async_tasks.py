"""Scheduling helpers for deferred dashboard work.

Deferred work (the post-commit resync of a defective tire sale) goes through
a Scheduler so tests can drive virtual time instead of sleeping:

- AsyncioScheduler runs callbacks on the running event loop after a real
  delay.
- ManualScheduler keeps a virtual clock; `advance(seconds)` runs whatever
  became due, in due order.

Scheduled callbacks are single-shot and cannot be cancelled by the caller.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Any, Awaitable, Callable, List, Protocol, Set, Tuple

from finance_dashboard.utils.logging import logger

AsyncCallback = Callable[[], Awaitable[Any]]


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: AsyncCallback) -> None: ...


class AsyncioScheduler:
    """Schedule coroutines on the running loop after `delay` seconds."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()
        self._timers = 0

    @property
    def pending(self) -> int:
        """Timers not yet fired plus callbacks still running."""
        return self._timers + len(self._tasks)

    def call_later(self, delay: float, callback: AsyncCallback) -> None:
        loop = asyncio.get_running_loop()
        self._timers += 1
        loop.call_later(max(delay, 0.0), self._spawn, loop, callback)

    def _spawn(self, loop: asyncio.AbstractEventLoop, callback: AsyncCallback) -> None:
        self._timers -= 1
        task = loop.create_task(callback())
        # Hold a reference until done; the loop only keeps weak ones.
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Scheduled task failed: %r", task.exception())

    async def drain(self) -> None:
        """Wait for callbacks already running (timers not yet fired excluded)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class ManualScheduler:
    """Virtual-time scheduler for tests and deterministic replays."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, AsyncCallback]] = []
        self._seq = itertools.count()
        self.fired: List[float] = []

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_later(self, delay: float, callback: AsyncCallback) -> None:
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._seq), callback))

    async def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback that became due.

        Returns the number of callbacks run.
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self.now = due
            self.fired.append(due)
            await callback()
            ran += 1
        self.now = target
        return ran
