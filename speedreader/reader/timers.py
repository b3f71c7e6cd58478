"""One-shot timer sources for the pacing engine.

The engine only needs ``call_later(delay_ms, callback) -> handle`` and
``handle.cancel()``.  :class:`ManualScheduler` runs on a virtual clock that
the caller advances explicitly; :class:`AsyncioScheduler` defers to an
event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class ManualTimer:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now_ms + max(0, int(delay_ms)), callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def next_due(self) -> int | None:
        """Absolute due time of the earliest live timer."""
        for due, _, timer in sorted(self._queue):
            if not timer.cancelled:
                return due
        return None

    def advance(self, ms: int) -> None:
        """Move the clock forward *ms*, firing timers in due order."""
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = due
            timer.callback()
        self.now_ms = target

    def run_until_idle(self, limit: int = 100_000) -> None:
        """Fire timers until none remain (bounded by *limit* firings)."""
        for _ in range(limit):
            due = self.next_due()
            if due is None:
                return
            self.advance(due - self.now_ms)
        raise RuntimeError("scheduler did not go idle")


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)
