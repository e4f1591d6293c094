"""Timer scheduling protocol.

All timers run on the same single logical thread as event handlers; a
callback never runs concurrently with the code that scheduled it.
"""

from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        """Cancel the callback. Safe to call repeatedly and after it fired."""
        ...


class Scheduler(Protocol):
    """Posts delayed callbacks onto the event queue."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def time(self) -> float:
        """Current time on the scheduler clock, in seconds."""
        ...
