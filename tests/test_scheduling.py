"""
Tests for the scheduler and the clocks
"""

import pytest

from benchmcp.common.scheduling import MonotonicClock, Scheduler, VirtualClock


class TestVirtualClock:
    """Virtual clock"""

    def test_advance(self):
        clock = VirtualClock()
        start = clock.now()
        clock.advance(90)
        assert clock.monotonic() == 90
        assert (clock.now() - start).total_seconds() == 90

    def test_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            VirtualClock().advance(-1)


class TestScheduler:
    """Scheduler"""

    def test_runs_due_tasks_in_deadline_order(self, clock, scheduler):
        fired = []
        scheduler.call_later(30, lambda: fired.append("b"))
        scheduler.call_later(10, lambda: fired.append("a"))
        scheduler.call_later(60, lambda: fired.append("c"))

        clock.advance(30)
        assert scheduler.run_due() == 2
        assert fired == ["a", "b"]
        assert scheduler.pending() == 1

    def test_nothing_due(self, clock, scheduler):
        fired = []
        scheduler.call_later(10, lambda: fired.append(1))
        clock.advance(9.9)
        assert scheduler.run_due() == 0
        assert fired == []

    def test_cancelled_task_does_not_fire(self, clock, scheduler):
        fired = []
        task = scheduler.call_later(5, lambda: fired.append(1))
        task.cancel()
        clock.advance(10)
        assert scheduler.run_due() == 0
        assert fired == []
        assert scheduler.next_deadline() is None

    def test_task_fires_once(self, clock, scheduler):
        fired = []
        scheduler.call_later(1, lambda: fired.append(1))
        clock.advance(2)
        scheduler.run_due()
        scheduler.run_due()
        assert fired == [1]

    def test_failing_callback_is_logged(self, clock, scheduler, caplog):
        fired = []

        def boom():
            raise RuntimeError("boom")

        scheduler.call_later(1, boom)
        scheduler.call_later(2, lambda: fired.append(1))
        clock.advance(5)

        assert scheduler.run_due() == 2
        assert fired == [1]
        assert "boom" in caplog.text

    def test_time_until_next(self, clock, scheduler):
        assert scheduler.time_until_next() is None
        scheduler.call_later(10, lambda: None)
        clock.advance(4)
        assert scheduler.time_until_next() == pytest.approx(6)
        clock.advance(10)
        assert scheduler.time_until_next() == 0.0

    def test_clear(self, clock, scheduler):
        fired = []
        scheduler.call_later(1, lambda: fired.append(1))
        scheduler.clear()
        clock.advance(5)
        assert scheduler.run_due() == 0
        assert scheduler.pending() == 0

    def test_default_clock_is_monotonic(self):
        assert isinstance(Scheduler().clock, MonotonicClock)
