"""Participant gateway protocol."""

from enum import Enum
from typing import Optional, Protocol
from uuid import UUID

from .containers import Container


class MessageLevel(str, Enum):
    """Tone of a message shown to a participant."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    PROMPT = "prompt"


class ParticipantGateway(Protocol):
    """
    Port to the host environment's participants.

    Everything the sharing core needs to know about a participant goes
    through here: reachability, display names, private containers, and
    container views.
    """

    def is_online(self, participant: UUID) -> bool:
        """Return True if the participant can receive live updates right now."""
        ...

    def find_online(self, name: str) -> Optional[UUID]:
        """Resolve an online participant by display name."""
        ...

    def display_name(self, participant: UUID) -> str:
        """Best known display name, also for offline participants."""
        ...

    def send_message(self, participant: UUID, text: str, level: MessageLevel = MessageLevel.INFO) -> None:
        ...

    def private_container(self, participant: UUID) -> Container:
        """The participant's own 27-slot container. Only valid while online."""
        ...

    def create_container(self, size: int, title: str) -> Container:
        ...

    def open_container(self, participant: UUID, container: Container) -> None:
        ...

    def close_container(self, participant: UUID) -> None:
        """Close whatever container view the participant has open."""
        ...
