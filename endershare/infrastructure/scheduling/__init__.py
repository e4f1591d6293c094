"""Timer scheduling adapters."""

from .asyncio_scheduler import AsyncioScheduler
from .manual_scheduler import ManualScheduler

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
]
