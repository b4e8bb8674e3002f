"""Tests for cooking timers on the virtual clock."""

import itertools
from datetime import datetime

import pytest

from souschef.config_models import HapticsConfig
from souschef.voice.models import CookingTimer
from souschef.voice.timers import TimerManager

FIXED_NOW = datetime(2026, 3, 14, 18, 0, 0)


@pytest.fixture
def completed():
    return []


@pytest.fixture
def timers(scheduler, haptics, completed):
    counter = itertools.count(1)
    manager = TimerManager(
        scheduler=scheduler,
        haptics=haptics,
        on_complete=completed.append,
        id_factory=lambda: f"timer_{next(counter)}",
        clock=lambda: FIXED_NOW,
    )
    yield manager
    manager.close()


class TestCreateTimer:
    def test_new_timer_is_running(self, timers):
        timer_id = timers.create_timer("Step 2", 2)
        timer = timers.get(timer_id)
        assert timer.total_seconds == 120
        assert timer.remaining_seconds == 120
        assert timer.is_running
        assert timer.end_time == datetime(2026, 3, 14, 18, 2, 0)
        assert timers.is_ticking(timer_id)

    def test_fractional_minutes(self, timers):
        timer_id = timers.create_timer("Rest", 1.5)
        assert timers.get(timer_id).total_seconds == 90

    @pytest.mark.parametrize("minutes", [0, -1])
    def test_non_positive_minutes_rejected(self, timers, minutes):
        with pytest.raises(ValueError):
            timers.create_timer("Bad", minutes)
        assert timers.timers == []

    def test_ids_are_unique(self, scheduler):
        manager = TimerManager(scheduler=scheduler)
        ids = {manager.create_timer("t", 1) for _ in range(20)}
        assert len(ids) == 20
        assert all(i.startswith("timer_") for i in ids)
        manager.close()


class TestCountdown:
    def test_ticks_once_per_second(self, timers, scheduler):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(10)
        assert timers.get(timer_id).remaining_seconds == 50

    def test_completion_fires_once(self, timers, scheduler, completed, haptics):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(60)

        timer = timers.get(timer_id)
        assert timer.remaining_seconds == 0
        assert not timer.is_running
        assert [t.id for t in completed] == [timer_id]
        assert haptics.patterns == [HapticsConfig().timer_done_ms]

        scheduler.advance(120)
        assert len(completed) == 1
        assert not timers.is_ticking(timer_id)
        assert scheduler.pending == 0

    def test_completed_timer_stays_listed(self, timers, scheduler):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(60)
        assert [t.id for t in timers.completed_timers] == [timer_id]
        assert timers.active_count == 0

    def test_independent_timers(self, timers, scheduler, completed):
        short = timers.create_timer("Pasta", 1)
        long = timers.create_timer("Sauce", 2)
        scheduler.advance(60)
        assert [t.id for t in completed] == [short]
        assert timers.get(long).remaining_seconds == 60
        assert timers.active_count == 1

    def test_callback_errors_are_contained(self, scheduler):
        def boom(_timer):
            raise RuntimeError("speaker gone")

        manager = TimerManager(scheduler=scheduler, on_complete=boom)
        timer_id = manager.create_timer("t", 1)
        scheduler.advance(60)
        assert manager.get(timer_id).remaining_seconds == 0

    def test_no_haptics_is_fine(self, scheduler):
        manager = TimerManager(scheduler=scheduler)
        manager.create_timer("t", 1)
        scheduler.advance(60)
        assert manager.active_count == 0


class TestPauseResume:
    def test_pause_freezes_remaining(self, timers, scheduler):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(5)
        assert timers.pause(timer_id)
        scheduler.advance(30)

        timer = timers.get(timer_id)
        assert timer.remaining_seconds == 55
        assert not timer.is_running
        assert timer.end_time is None
        assert not timers.is_ticking(timer_id)

    def test_pause_is_idempotent(self, timers):
        timer_id = timers.create_timer("Step 1", 1)
        assert timers.pause(timer_id)
        assert timers.pause(timer_id) is False

    def test_resume_continues(self, timers, scheduler, completed):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(5)
        timers.pause(timer_id)
        scheduler.advance(100)
        assert timers.resume(timer_id)
        assert timers.resume(timer_id) is False
        scheduler.advance(55)
        assert [t.id for t in completed] == [timer_id]

    def test_resume_finished_timer(self, timers, scheduler):
        timer_id = timers.create_timer("Step 1", 1)
        scheduler.advance(60)
        assert timers.resume(timer_id) is False

    def test_unknown_id(self, timers):
        assert timers.pause("timer_missing") is False
        assert timers.resume("timer_missing") is False
        assert timers.remove("timer_missing") is False


class TestRemoval:
    def test_remove_cancels_tick(self, timers, scheduler, completed):
        timer_id = timers.create_timer("Step 1", 1)
        assert timers.remove(timer_id)
        scheduler.advance(120)
        assert timers.get(timer_id) is None
        assert completed == []

    def test_clear_all(self, timers, scheduler):
        timers.create_timer("a", 1)
        timers.create_timer("b", 2)
        timers.clear_all()
        assert timers.timers == []
        assert scheduler.pending == 0

    def test_close_keeps_timers(self, timers, scheduler):
        timer_id = timers.create_timer("a", 1)
        timers.close()
        scheduler.advance(30)
        assert timers.get(timer_id).remaining_seconds == 60
        assert not timers.is_ticking(timer_id)


class TestRestore:
    def test_snapshot_and_restore(self, timers, scheduler, completed):
        running = timers.create_timer("Sauce", 1)
        paused = timers.create_timer("Rest", 2)
        scheduler.advance(20)
        timers.pause(paused)
        saved = timers.snapshot()
        timers.clear_all()

        assert timers.restore(saved) == 1
        assert timers.get(running).remaining_seconds == 40
        assert timers.is_ticking(running)
        assert not timers.is_ticking(paused)

        scheduler.advance(40)
        assert [t.id for t in completed] == [running]

    def test_restore_accepts_timer_objects(self, timers):
        timer = CookingTimer(id="timer_x", name="x", total_seconds=30, remaining_seconds=10)
        assert timers.restore([timer]) == 1
        assert timers.get("timer_x").end_time == datetime(2026, 3, 14, 18, 0, 10)

    def test_restore_clamps_bad_values(self, timers):
        timers.restore([{"id": "t", "name": "t", "total_seconds": 60, "remaining_seconds": 500, "is_running": False}])
        assert timers.get("t").remaining_seconds == 60

    def test_finished_timer_not_rearmed(self, timers):
        armed = timers.restore(
            [{"id": "t", "name": "t", "total_seconds": 60, "remaining_seconds": 0, "is_running": True}]
        )
        assert armed == 0
        assert not timers.get("t").is_running
