"""In-memory host adapters."""

from .in_memory import InMemoryHost, SentMessage, SlotContainer

__all__ = [
    "InMemoryHost",
    "SentMessage",
    "SlotContainer",
]
