"""Virtual-clock scheduler.

Timers fire only when the clock is advanced, in due-time order, which
makes timing behaviour reproducible without sleeping.
"""

import heapq
import itertools
import logging
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class ManualTimerHandle:
    """Handle returned by ``ManualScheduler.call_later``."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self._callback = callback
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    def _run(self) -> None:
        self._fired = True
        self._callback()


class ManualScheduler:
    """Single-threaded event queue driven by an explicit clock."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._counter = itertools.count()
        self._queue: List[Tuple[float, int, ManualTimerHandle]] = []

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimerHandle:
        handle = ManualTimerHandle(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every timer that came due.

        Timers scheduled by a running callback also fire if they fall
        inside the window. Returns the number of callbacks run.
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self._now = when
            try:
                handle._run()
            except Exception as e:
                logger.error(f"Scheduled callback failed: {e}", exc_info=True)
            ran += 1
        self._now = target
        return ran

    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())
