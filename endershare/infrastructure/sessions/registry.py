"""In-memory session registry."""

import logging
from typing import Dict, Optional, Set
from uuid import UUID

from endershare.domain.errors import SessionConflictError
from endershare.domain.sessions.models import ShareSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Participant -> active session mapping.

    Every session is stored under both of its participants, so lookups by
    either side are direct. This is the single source of truth for whether
    a participant is currently sharing.
    """

    def __init__(self):
        """Initialize empty session storage."""
        self._sessions: Dict[UUID, ShareSession] = {}

    def is_active(self, participant: UUID) -> bool:
        """Check if a participant is currently in a session."""
        return participant in self._sessions

    def get(self, participant: UUID) -> Optional[ShareSession]:
        """Retrieve the session of a participant."""
        return self._sessions.get(participant)

    def add(self, session: ShareSession) -> ShareSession:
        """Register a session under both participants."""
        for participant in session.participants:
            existing = self._sessions.get(participant)
            if existing is not None and existing.session_id != session.session_id:
                raise SessionConflictError(
                    f"Participant {participant} is already in session {existing.session_id}",
                    code="PARTICIPANT_ALREADY_SHARING",
                )
        self._sessions[session.participant_a] = session
        self._sessions[session.participant_b] = session
        logger.info(
            f"Registered session {session.session_id} for "
            f"{session.participant_a} and {session.participant_b}"
        )
        return session

    def remove(self, participant: UUID) -> Optional[ShareSession]:
        """Remove the session of a participant under both identities."""
        session = self._sessions.get(participant)
        if session is None:
            return None
        self._sessions.pop(session.participant_a, None)
        self._sessions.pop(session.participant_b, None)
        logger.info(f"Removed session {session.session_id}")
        return session

    def find_by_session_id(self, session_id: str) -> Optional[ShareSession]:
        for session in self._sessions.values():
            if session.session_id == session_id:
                return session
        return None

    def all(self) -> Set[ShareSession]:
        """Snapshot of the active sessions, each appearing once."""
        return set(self._sessions.values())

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self.all())
