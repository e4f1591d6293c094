"""
Debounced write-back of shared containers.

Participants change a shared container many times in quick succession.
Instead of writing the whole container on every change, each change
(re)starts a quiet-period timer for its session and the container is
written once the timer runs out. Closing the container view writes it
immediately and cancels the timer, so no stale write fires afterwards.
"""

import logging
from typing import Callable, Dict, Iterable

from endershare.domain.errors import ConfigurationError
from endershare.domain.sessions.models import ShareSession
from endershare.interfaces.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_DELAY = 1.0


class DebounceCoordinator:
    """
    Coalesces mutation notifications into one write per quiet period.

    Pending timers are keyed by ``session_id``. At most one timer exists per
    session at any time.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        flush: Callable[[ShareSession], None],
        delay: float = DEFAULT_DEBOUNCE_DELAY,
    ):
        """
        Args:
            scheduler: Event-queue scheduler the timers are posted to
            flush: Writes the full current state of a session
            delay: Quiet period in seconds
        """
        if delay <= 0:
            raise ConfigurationError("Debounce delay must be positive", code="INVALID_DEBOUNCE_DELAY")
        self._scheduler = scheduler
        self._flush = flush
        self._delay = delay
        self._scheduled: Dict[str, TimerHandle] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def has_pending(self, session_id: str) -> bool:
        return session_id in self._scheduled

    def pending_count(self) -> int:
        return len(self._scheduled)

    def notify_mutation(self, session: ShareSession) -> None:
        """Restart the quiet period for a session."""
        self._cancel(session.session_id)
        session_id = session.session_id
        handle: TimerHandle

        def fire() -> None:
            # A newer timer may have replaced this one; only the current one writes
            if self._scheduled.get(session_id) is not handle:
                return
            del self._scheduled[session_id]
            logger.debug(f"Quiet period elapsed for session {session_id}, saving")
            self._flush(session)

        handle = self._scheduler.call_later(self._delay, fire)
        self._scheduled[session_id] = handle

    def notify_close(self, session: ShareSession) -> None:
        """Cancel the pending write and save right away."""
        self._cancel(session.session_id)
        logger.debug(f"Container closed for session {session.session_id}, saving now")
        self._flush(session)

    def discard(self, session_id: str) -> bool:
        """Drop the pending write of a session without saving.

        Returns True if a write was pending.
        """
        return self._cancel(session_id)

    def flush_all(self, sessions: Iterable[ShareSession]) -> int:
        """Cancel every pending write and save each given session once."""
        written = 0
        for session in sessions:
            self._cancel(session.session_id)
            self._flush(session)
            written += 1
        for session_id in list(self._scheduled):
            logger.warning(f"Dropping pending write for unknown session {session_id}")
            self._cancel(session_id)
        return written

    def _cancel(self, session_id: str) -> bool:
        handle = self._scheduled.pop(session_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True
