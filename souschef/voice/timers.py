"""
Cooking timers.

Each running timer owns one scheduled tick, re-armed every second until it
reaches zero. Pausing cancels the tick; resuming arms a new one. A timer that
reaches zero fires its completion signal once and stays listed until removed.

Usage:
    from souschef.voice.timers import TimerManager

    timers = TimerManager(on_complete=lambda t: print(f"{t.name} done"))
    timer_id = timers.create_timer("Step 3", 10)
    timers.pause(timer_id)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable

from souschef.config_models import HapticsConfig
from souschef.scheduling import Handle, LoopScheduler, Scheduler
from souschef.voice.models import CookingTimer
from souschef.voice.speech import Haptics, buzz

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0

TimerCallback = Callable[[CookingTimer], Any]


def _new_timer_id() -> str:
    return f"timer_{uuid.uuid4().hex[:12]}"


class TimerManager:
    """Owns the cooking timers of one cooking session."""

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        haptics: Haptics | None = None,
        on_complete: TimerCallback | None = None,
        id_factory: Callable[[], str] = _new_timer_id,
        haptics_config: HapticsConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._scheduler = scheduler or LoopScheduler()
        self._haptics = haptics
        self._on_complete = on_complete
        self._id_factory = id_factory
        self._done_pattern = list((haptics_config or HapticsConfig()).timer_done_ms)
        self._clock = clock
        self._timers: dict[str, CookingTimer] = {}
        self._ticks: dict[str, Handle] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, timer_id: str) -> CookingTimer | None:
        return self._timers.get(timer_id)

    @property
    def timers(self) -> list[CookingTimer]:
        return list(self._timers.values())

    @property
    def active_timers(self) -> list[CookingTimer]:
        return [t for t in self._timers.values() if t.remaining_seconds > 0]

    @property
    def completed_timers(self) -> list[CookingTimer]:
        return [t for t in self._timers.values() if t.remaining_seconds == 0]

    @property
    def active_count(self) -> int:
        return len(self.active_timers)

    def is_ticking(self, timer_id: str) -> bool:
        return timer_id in self._ticks

    def snapshot(self) -> list[dict[str, Any]]:
        """Serializable copy of every timer, for host persistence."""
        return [t.to_dict() for t in self._timers.values()]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_timer(self, name: str, minutes: float) -> str:
        """Start a new running timer and return its id."""
        if minutes <= 0:
            raise ValueError(f"Timer minutes must be positive, got {minutes}")

        total = int(round(minutes * 60))
        now = self._clock()
        timer = CookingTimer(
            id=self._id_factory(),
            name=name,
            total_seconds=total,
            remaining_seconds=total,
            is_running=True,
            created_at=now,
            end_time=now + timedelta(seconds=total),
        )
        self._timers[timer.id] = timer
        self._arm(timer.id)
        logger.info("Timer created", extra={"timer_id": timer.id, "name": name, "seconds": total})
        return timer.id

    def pause(self, timer_id: str) -> bool:
        """Stop the countdown. False if unknown or already paused."""
        timer = self._timers.get(timer_id)
        if timer is None or not timer.is_running:
            return False
        self._disarm(timer_id)
        timer.is_running = False
        timer.end_time = None
        return True

    def resume(self, timer_id: str) -> bool:
        """Continue the countdown. False if unknown, running or finished."""
        timer = self._timers.get(timer_id)
        if timer is None or timer.is_running or timer.remaining_seconds <= 0:
            return False
        timer.is_running = True
        timer.end_time = self._clock() + timedelta(seconds=timer.remaining_seconds)
        self._arm(timer_id)
        return True

    def remove(self, timer_id: str) -> bool:
        self._disarm(timer_id)
        return self._timers.pop(timer_id, None) is not None

    def clear_all(self) -> None:
        for timer_id in list(self._ticks):
            self._disarm(timer_id)
        self._timers.clear()

    def restore(self, timers: Iterable[CookingTimer | dict[str, Any]]) -> int:
        """Replace all timers with saved ones, re-arming those still running.

        Returns the number of timers that resumed ticking.
        """
        self.clear_all()
        armed = 0
        now = self._clock()
        for item in timers:
            timer = CookingTimer.from_dict(item if isinstance(item, dict) else item.to_dict())
            self._timers[timer.id] = timer
            if timer.is_running:
                timer.end_time = now + timedelta(seconds=timer.remaining_seconds)
                self._arm(timer.id)
                armed += 1
        logger.debug("Restored %d timers (%d running)", len(self._timers), armed)
        return armed

    def close(self) -> None:
        """Cancel every pending tick. Timers stay queryable."""
        for timer_id in list(self._ticks):
            self._disarm(timer_id)

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def _arm(self, timer_id: str) -> None:
        self._disarm(timer_id)
        self._ticks[timer_id] = self._scheduler.call_later(TICK_SECONDS, self._tick, timer_id)

    def _disarm(self, timer_id: str) -> None:
        handle = self._ticks.pop(timer_id, None)
        if handle is not None:
            handle.cancel()

    def _tick(self, timer_id: str) -> None:
        self._ticks.pop(timer_id, None)
        timer = self._timers.get(timer_id)
        if timer is None or not timer.is_running:
            return

        timer.remaining_seconds = max(0, timer.remaining_seconds - 1)
        if timer.remaining_seconds > 0:
            self._arm(timer_id)
            return

        timer.is_running = False
        self._complete(timer)

    def _complete(self, timer: CookingTimer) -> None:
        logger.info("Timer complete", extra={"timer_id": timer.id, "name": timer.name})
        buzz(self._haptics, self._done_pattern)
        if self._on_complete is None:
            return
        try:
            self._on_complete(timer)
        except Exception as e:
            logger.warning("Timer completion callback failed: %s", e, exc_info=True)
