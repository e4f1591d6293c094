"""Domain models for sharing sessions."""

from dataclasses import dataclass, field
from typing import Any, Dict
from uuid import UUID, uuid4

from endershare.interfaces.containers import Container


@dataclass(eq=False)
class ShareSession:
    """An active sharing arrangement between two participants.

    Sessions compare and hash by ``session_id`` so that a session reloaded
    from storage is the same logical session as the one that was saved.
    """
    participant_a: UUID
    participant_b: UUID
    shared_container: Container
    session_id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        if self.participant_a == self.participant_b:
            raise ValueError("A session needs two distinct participants")

    @property
    def participants(self) -> tuple:
        return (self.participant_a, self.participant_b)

    def has_participant(self, participant: UUID) -> bool:
        return participant in self.participants

    def counterpart(self, participant: UUID) -> UUID:
        """Return the other participant of this session."""
        if participant == self.participant_a:
            return self.participant_b
        if participant == self.participant_b:
            return self.participant_a
        raise ValueError(f"{participant} is not part of session {self.session_id}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShareSession):
            return NotImplemented
        return self.session_id == other.session_id

    def __hash__(self) -> int:
        return hash(self.session_id)


@dataclass
class SessionRecord:
    """Durable form of a session as read back from storage."""
    session_id: str
    participant_a: UUID
    participant_b: UUID
    slots: Dict[int, Any] = field(default_factory=dict)


@dataclass(eq=False)
class PendingInvitation:
    """An unconsummated offer to start a session.

    ``created_at`` is expressed on the scheduler clock, in seconds.
    Invitations compare by identity: a superseding invitation between the
    same two participants is a different invitation.
    """
    inviter: UUID
    invitee: UUID
    created_at: float

    def __post_init__(self) -> None:
        if self.inviter == self.invitee:
            raise ValueError("Inviter and invitee must differ")

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float, timeout_seconds: float) -> bool:
        """An invitation whose age reached the timeout is no longer valid."""
        return self.age(now) >= timeout_seconds
