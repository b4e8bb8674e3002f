"""
Schedulers for delayed callbacks.

Timers tick and the wake word loop restarts through a ``Scheduler`` rather
than ambient global timers, so the owner can cancel every pending task and
tests can drive time by hand.

    LoopScheduler   - asyncio event loop (``loop.call_later``)
    ManualScheduler - virtual clock advanced explicitly with ``advance()``

Usage:
    scheduler = ManualScheduler()
    handle = scheduler.call_later(1.0, tick)
    scheduler.advance(1.0)   # runs tick()
    handle.cancel()
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Handle: ...

    def now(self) -> float: ...


class LoopScheduler:
    """Schedules callbacks on an asyncio event loop.

    The loop is resolved lazily so the scheduler can be built before the
    loop starts running.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback, *args)

    def now(self) -> float:
        return self.loop.time()


class ManualHandle:
    """Cancellable entry in a ManualScheduler queue."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Nothing runs until ``advance()`` moves time forward.

    Callbacks run in due-time order; ties run in scheduling order. A callback
    that schedules another one inside the advanced window sees it run within
    the same ``advance()`` call, like a real loop would.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks not yet run or cancelled."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns:
            Number of callbacks run
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")

        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = when
            handle.callback(*handle.args)
            ran += 1
        self._now = target
        return ran


__all__ = [
    "Handle",
    "LoopScheduler",
    "ManualHandle",
    "ManualScheduler",
    "Scheduler",
]
