"""
benchmcp scheduled tasks

Deadline-based callbacks driven by an injectable clock. The server drives
``Scheduler.run_due()`` from its event loop; tests drive it with a
``VirtualClock`` instead of waiting on the wall clock.
"""

import heapq
import itertools
import logging
import time
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Clock:
    """Time source used by the scheduler and the session registry"""

    def monotonic(self) -> float:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class MonotonicClock(Clock):
    """Real clock"""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now()


class VirtualClock(Clock):
    """Manually advanced clock for tests

    Args:
        start: wall-clock time reported at monotonic zero
    """

    def __init__(self, start: Optional[datetime] = None):
        self._start = start or datetime(2024, 1, 1)
        self._elapsed = 0.0

    def monotonic(self) -> float:
        return self._elapsed

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        self._elapsed += seconds


class ScheduledTask:
    """A callback due at a monotonic deadline"""

    __slots__ = ("deadline", "callback", "cancelled")

    def __init__(self, deadline: float, callback: Callable[[], None]):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"<ScheduledTask deadline={self.deadline:.3f} {state}>"


class Scheduler:
    """Min-heap of scheduled tasks

    Cancelled tasks stay in the heap until they reach the top and are
    discarded there.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or MonotonicClock()
        self._heap: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def call_at(self, deadline: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(deadline, callback)
        heapq.heappush(self._heap, (deadline, next(self._counter), task))
        return task

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        return self.call_at(self.clock.monotonic() + delay, callback)

    def cancel(self, task: Optional[ScheduledTask]) -> None:
        if task is not None:
            task.cancel()

    def _discard_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)

    def run_due(self) -> int:
        """Run every task whose deadline has passed

        Returns:
            number of callbacks that were invoked
        """
        fired = 0
        now = self.clock.monotonic()
        while True:
            self._discard_cancelled()
            if not self._heap or self._heap[0][0] > now:
                break
            _, _, task = heapq.heappop(self._heap)
            task.cancelled = True
            fired += 1
            try:
                task.callback()
            except Exception as e:
                logger.error(f"Scheduled callback failed: {e}", exc_info=True)
        return fired

    def next_deadline(self) -> Optional[float]:
        self._discard_cancelled()
        return self._heap[0][0] if self._heap else None

    def time_until_next(self) -> Optional[float]:
        deadline = self.next_deadline()
        if deadline is None:
            return None
        return max(0.0, deadline - self.clock.monotonic())

    def pending(self) -> int:
        return sum(1 for _, _, task in self._heap if not task.cancelled)

    def clear(self) -> None:
        for _, _, task in self._heap:
            task.cancel()
        self._heap.clear()
