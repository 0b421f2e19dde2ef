# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Schedulable callbacks for timer driven state such as throttle restoration.

- `AsyncioScheduler`: runs callbacks on the running asyncio event loop, if any.
- `ManualScheduler`: a virtual clock that only moves when `advance()` is called,
  used to make timer driven behavior deterministic in tests.

Both measure time in milliseconds and return handles with a `cancel()` method.
"""
from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds."""

    @abstractmethod
    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> TimerHandle | None:
        """Run `callback` once after `delay` milliseconds, None if it can not be scheduled."""


class AsyncioScheduler(Scheduler):
    """
    Schedules callbacks on the running event loop.

    Outside of a running loop nothing is scheduled and `call_later` returns
    None; callers catch up on elapsed time themselves.
    """

    def now(self) -> float:
        return time.monotonic() * 1000

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_later(max(delay, 0) / 1000, callback)


class ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    A scheduler driven by a virtual clock.

    Example:
        scheduler = ManualScheduler()
        scheduler.call_later(1000, callback)
        scheduler.advance(1000)  # callback runs here
    """

    def __init__(self, start: float = 0):
        self._now = start
        self._counter = itertools.count()
        self._queue: list[tuple[float, int, ManualTimer]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + max(delay, 0), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, duration: float) -> None:
        """Move the clock forward, running every callback that becomes due in order."""
        target = self._now + duration
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.callback()
        self._now = target
