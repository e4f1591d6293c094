"""Session store interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from endershare.domain.sessions.models import SessionRecord, ShareSession


class ItemCodec(Protocol):
    """Converts host items to and from a YAML-safe representation.

    ``decode(encode(item))`` must reproduce the item exactly.
    """

    def encode(self, item: Any) -> Any:
        ...

    def decode(self, data: Any) -> Any:
        ...


class SessionStore(Protocol):
    """
    Port for durable session and restoration storage.

    Abstracts persistence from the application layer, allowing different
    storage implementations (YAML files, a database, etc.).
    """

    def load_all_sessions(self) -> List[SessionRecord]:
        """
        Read every stored session.

        Malformed records are skipped, not raised.

        Returns:
            One record per readable session
        """
        ...

    def save_session(self, session: ShareSession) -> None:
        """
        Create or replace the durable record of a session.

        Args:
            session: Session to persist, including every non-empty slot

        Raises:
            StorageError: If the record cannot be written
        """
        ...

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session record.

        Args:
            session_id: ID of the session to delete

        Returns:
            True if deleted, False if there was no record
        """
        ...

    def load_pending_restorations(self) -> Dict[UUID, str]:
        """
        Read the restoration document.

        Returns:
            Participant identity -> serialized slot array
        """
        ...

    def save_pending_restorations(self, pending: Dict[UUID, str]) -> None:
        """
        Overwrite the restoration document in full.

        Args:
            pending: Participant identity -> serialized slot array
        """
        ...

    @property
    def codec(self) -> ItemCodec:
        """Codec used for items in session records and restorations."""
        ...
