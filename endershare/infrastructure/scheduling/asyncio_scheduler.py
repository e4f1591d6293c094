"""Scheduler backed by an asyncio event loop."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    """
    Posts timers onto an asyncio event loop.

    Callbacks run on the loop thread, the same thread that delivers events,
    so they never interleave with a running handler. ``asyncio.TimerHandle``
    cancellation is idempotent, including after the callback ran.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), self._guarded, callback)

    def time(self) -> float:
        return self.loop.time()

    @staticmethod
    def _guarded(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}", exc_info=True)
