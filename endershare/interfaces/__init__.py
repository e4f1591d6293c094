"""Interfaces layer - protocols and contracts."""

from .containers import Container
from .participants import MessageLevel, ParticipantGateway
from .scheduling import Scheduler, TimerHandle
from .sessions import ItemCodec, SessionStore

__all__ = [
    "Container",
    "MessageLevel",
    "ParticipantGateway",
    "Scheduler",
    "TimerHandle",
    "ItemCodec",
    "SessionStore",
]
