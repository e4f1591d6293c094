"""In-memory host environment.

Implements the container and participant gateway protocols without a real
host, for embedding the sharing core in other processes and for tests.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Set
from uuid import UUID, uuid4

from endershare.domain.sessions.containers import PRIVATE_SLOTS
from endershare.interfaces.containers import Container
from endershare.interfaces.participants import MessageLevel

logger = logging.getLogger(__name__)

CloseListener = Callable[[UUID, Container], None]


class SlotContainer:
    """List-backed fixed-size container."""

    def __init__(self, size: int, title: str = ""):
        if size <= 0:
            raise ValueError("Container size must be positive")
        self._slots: List[Optional[Any]] = [None] * size
        self.title = title

    @property
    def size(self) -> int:
        return len(self._slots)

    def _check(self, slot: int) -> None:
        if not 0 <= slot < len(self._slots):
            raise IndexError(f"Slot {slot} out of range for container of size {len(self._slots)}")

    def get_item(self, slot: int) -> Optional[Any]:
        self._check(slot)
        return self._slots[slot]

    def set_item(self, slot: int, item: Optional[Any]) -> None:
        self._check(slot)
        self._slots[slot] = item

    def get_contents(self) -> List[Optional[Any]]:
        return list(self._slots)

    def set_contents(self, items: Sequence[Optional[Any]]) -> None:
        if len(items) > len(self._slots):
            raise ValueError(f"{len(items)} items do not fit in {len(self._slots)} slots")
        for slot, item in enumerate(items):
            self._slots[slot] = item

    def clear(self) -> None:
        self._slots = [None] * len(self._slots)

    def __repr__(self) -> str:
        filled = sum(1 for item in self._slots if item is not None)
        return f"SlotContainer(size={len(self._slots)}, filled={filled}, title={self.title!r})"


@dataclass
class SentMessage:
    """A message delivered to a participant."""
    participant: UUID
    text: str
    level: MessageLevel


class InMemoryHost:
    """Participant gateway keeping every participant in process memory."""

    def __init__(self, private_slots: int = PRIVATE_SLOTS):
        self._private_slots = private_slots
        self._names: Dict[UUID, str] = {}
        self._online: Set[UUID] = set()
        self._containers: Dict[UUID, SlotContainer] = {}
        self._open_views: Dict[UUID, Container] = {}
        self._close_listeners: List[CloseListener] = []
        self.messages: List[SentMessage] = []

    # ----- Host-side controls -----

    def register(self, name: str, participant: Optional[UUID] = None, online: bool = True) -> UUID:
        """Add a participant known to the host."""
        participant = participant or uuid4()
        self._names[participant] = name
        self._containers.setdefault(participant, SlotContainer(self._private_slots, f"{name}'s chest"))
        if online:
            self._online.add(participant)
        return participant

    def connect(self, participant: UUID) -> None:
        self._online.add(participant)

    def disconnect(self, participant: UUID) -> None:
        """Take a participant offline; their open view closes silently."""
        self._online.discard(participant)
        self._open_views.pop(participant, None)

    def add_close_listener(self, listener: CloseListener) -> None:
        self._close_listeners.append(listener)

    def open_view(self, participant: UUID) -> Optional[Container]:
        return self._open_views.get(participant)

    def messages_for(self, participant: UUID) -> List[str]:
        return [m.text for m in self.messages if m.participant == participant]

    # ----- ParticipantGateway -----

    def is_online(self, participant: UUID) -> bool:
        return participant in self._online

    def find_online(self, name: str) -> Optional[UUID]:
        lowered = name.lower()
        for participant, known in self._names.items():
            if known.lower() == lowered and participant in self._online:
                return participant
        return None

    def display_name(self, participant: UUID) -> str:
        return self._names.get(participant, str(participant))

    def send_message(self, participant: UUID, text: str, level: MessageLevel = MessageLevel.INFO) -> None:
        if participant not in self._online:
            logger.debug(f"Dropping message for offline participant {participant}")
            return
        self.messages.append(SentMessage(participant, text, level))

    def private_container(self, participant: UUID) -> SlotContainer:
        if participant not in self._containers:
            raise KeyError(f"Unknown participant {participant}")
        return self._containers[participant]

    def create_container(self, size: int, title: str) -> SlotContainer:
        return SlotContainer(size, title)

    def open_container(self, participant: UUID, container: Container) -> None:
        if participant not in self._online:
            return
        if participant in self._open_views:
            self.close_container(participant)
        self._open_views[participant] = container

    def close_container(self, participant: UUID) -> None:
        container = self._open_views.pop(participant, None)
        if container is None:
            return
        for listener in list(self._close_listeners):
            listener(participant, container)
