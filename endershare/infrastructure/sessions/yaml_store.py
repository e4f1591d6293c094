"""YAML file storage for sharing sessions and pending restorations.

Layout under the data directory:

    chestdata/<session_id>.yml
        session_id: <id>
        player1: <uuid>
        player2: <uuid>
        inventory:
          "0": <item>
          "31": <item>

    pendingRestorations.yml
        <uuid>: <serialized 27-slot array>

Only non-empty slots are written. Items pass through an ``ItemCodec`` so
the host decides how an item looks on disk.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import yaml

from endershare.domain.errors import RecordFormatError, StorageError
from endershare.domain.sessions.models import SessionRecord, ShareSession
from endershare.interfaces.sessions import ItemCodec

logger = logging.getLogger(__name__)

SESSION_DIR_NAME = "chestdata"
SESSION_FILE_SUFFIX = ".yml"
PENDING_RESTORATIONS_FILE = "pendingRestorations.yml"

_SESSION_ID_RE = re.compile(r'^[A-Za-z0-9_-]+$')


class PassthroughItemCodec:
    """Codec for items that are already YAML-native values."""

    def encode(self, item: Any) -> Any:
        return item

    def decode(self, data: Any) -> Any:
        return data


def _parse_participant(value: Any, field_name: str) -> UUID:
    if not isinstance(value, str):
        raise RecordFormatError(f"Missing or non-text {field_name}", code="BAD_PARTICIPANT")
    try:
        return UUID(value)
    except ValueError as e:
        raise RecordFormatError(f"Invalid {field_name} '{value}': {e}", code="BAD_PARTICIPANT") from e


class YamlSessionStore:
    """Durable store keeping one YAML file per session.

    Writes go to a temporary file first and are renamed into place, so a
    crash mid-write leaves the previous version intact.
    """

    def __init__(self, data_dir: Union[str, Path], codec: Optional[ItemCodec] = None):
        """Initialize the store.

        Args:
            data_dir: Root directory for all persisted sharing state
            codec: Item codec; defaults to passing YAML-native items through
        """
        self._data_dir = Path(data_dir)
        self._session_dir = self._data_dir / SESSION_DIR_NAME
        self._pending_file = self._data_dir / PENDING_RESTORATIONS_FILE
        self._codec = codec or PassthroughItemCodec()
        try:
            self._session_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create session directory {self._session_dir}: {e}",
                code="DATA_DIR_UNAVAILABLE",
            ) from e

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _session_file(self, session_id: str) -> Path:
        if not _SESSION_ID_RE.match(session_id):
            raise StorageError(f"Unsafe session id: {session_id!r}", code="BAD_SESSION_ID")
        return self._session_dir / f"{session_id}{SESSION_FILE_SUFFIX}"

    def _write_yaml(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
            # Atomic write: write to temp file then rename
            temp_file = path.with_suffix(".tmp")
            temp_file.write_text(text, encoding="utf-8")
            temp_file.replace(path)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Failed to write {path}: {e}", code="WRITE_FAILED") from e

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RecordFormatError(f"YAML parsing error in {path}: {e}", code="BAD_YAML") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}", code="READ_FAILED") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RecordFormatError(
                f"Invalid format in {path}: expected mapping, got {type(data).__name__}",
                code="BAD_YAML",
            )
        return data

    # ----- Sessions -----

    def _record_from_file(self, path: Path) -> SessionRecord:
        data = self._read_yaml(path)
        session_id = path.name[: -len(SESSION_FILE_SUFFIX)]
        if not _SESSION_ID_RE.match(session_id):
            raise RecordFormatError(f"Unusable session id in file name {path.name!r}", code="BAD_SESSION_ID")
        participant_a = _parse_participant(data.get("player1"), "player1")
        participant_b = _parse_participant(data.get("player2"), "player2")
        if participant_a == participant_b:
            raise RecordFormatError("player1 and player2 are the same participant", code="BAD_PARTICIPANT")

        inventory = data.get("inventory") or {}
        if not isinstance(inventory, dict):
            raise RecordFormatError("inventory is not a mapping", code="BAD_INVENTORY")
        slots: Dict[int, Any] = {}
        for key, raw_item in inventory.items():
            try:
                slot = int(key)
            except (TypeError, ValueError) as e:
                raise RecordFormatError(f"Invalid slot key {key!r}", code="BAD_INVENTORY") from e
            try:
                slots[slot] = self._codec.decode(raw_item)
            except Exception as e:
                raise RecordFormatError(f"Cannot decode item in slot {slot}: {e}", code="BAD_ITEM") from e
        return SessionRecord(
            session_id=session_id,
            participant_a=participant_a,
            participant_b=participant_b,
            slots=slots,
        )

    def load_all_sessions(self) -> List[SessionRecord]:
        """Read every session file; unreadable ones are logged and skipped."""
        records: List[SessionRecord] = []
        for path in sorted(self._session_dir.glob(f"*{SESSION_FILE_SUFFIX}")):
            try:
                records.append(self._record_from_file(path))
            except StorageError as e:
                logger.error(f"Skipping session record {path.name}: {e}", exc_info=True)
        logger.info(f"Loaded {len(records)} session records from {self._session_dir}")
        return records

    def save_session(self, session: ShareSession) -> None:
        container = session.shared_container
        inventory: Dict[str, Any] = {}
        for slot, item in enumerate(container.get_contents()):
            if item is None:
                continue
            try:
                inventory[str(slot)] = self._codec.encode(item)
            except Exception as e:
                raise StorageError(f"Cannot encode item in slot {slot}: {e}", code="BAD_ITEM") from e
        data = {
            "session_id": session.session_id,
            "player1": str(session.participant_a),
            "player2": str(session.participant_b),
            "inventory": inventory,
        }
        self._write_yaml(self._session_file(session.session_id), data)
        logger.debug(f"Saved session {session.session_id} with {len(inventory)} items")

    def delete_session(self, session_id: str) -> bool:
        path = self._session_file(session_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}", code="DELETE_FAILED") from e
        logger.info(f"Deleted session record {session_id}")
        return True

    # ----- Pending restorations -----

    def load_pending_restorations(self) -> Dict[UUID, str]:
        if not self._pending_file.exists():
            return {}
        try:
            data = self._read_yaml(self._pending_file)
        except RecordFormatError as e:
            logger.error(f"Pending restoration document is unreadable: {e}", exc_info=True)
            return {}

        pending: Dict[UUID, str] = {}
        for key, serialized in data.items():
            if not isinstance(serialized, str):
                logger.error(f"Skipping pending restoration for {key!r}: payload is not text")
                continue
            try:
                pending[UUID(str(key))] = serialized
            except ValueError as e:
                logger.error(f"Skipping pending restoration with invalid id {key!r}: {e}")
        return pending

    def save_pending_restorations(self, pending: Dict[UUID, str]) -> None:
        data = {str(participant): serialized for participant, serialized in pending.items()}
        self._write_yaml(self._pending_file, data)
        logger.debug(f"Saved {len(data)} pending restorations")

    @property
    def codec(self) -> ItemCodec:
        return self._codec
