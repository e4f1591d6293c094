"""
Offline restoration queue.

Holds the private slot arrays of participants who were unreachable when
their session ended, and hands each one over exactly once when the
participant comes back. The queue is written through to durable storage on
every change, so a delivered restoration is never resurrected by a crash.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import yaml

from endershare.domain.errors import RecordFormatError, StorageError
from endershare.domain.sessions.containers import PRIVATE_SLOTS
from endershare.interfaces.sessions import ItemCodec, SessionStore

logger = logging.getLogger(__name__)

SLOT_KEY_PREFIX = "slot."


def serialize_items(items: Sequence[Optional[Any]], codec: ItemCodec) -> str:
    """Serialize a sparse slot array as YAML text with ``slot.<n>`` keys.

    Raises:
        StorageError: If an item cannot be encoded or represented as YAML
    """
    try:
        sparse = {
            f"{SLOT_KEY_PREFIX}{slot}": codec.encode(item)
            for slot, item in enumerate(items)
            if item is not None
        }
        return yaml.safe_dump(sparse, sort_keys=False, allow_unicode=True)
    except Exception as e:
        raise StorageError(f"Cannot serialize slot array: {e}", code="SERIALIZE_FAILED") from e


def deserialize_items(data: str, size: int, codec: ItemCodec) -> List[Optional[Any]]:
    """Rebuild a fixed-size slot array from ``serialize_items`` output.

    Keys that are not ``slot.<n>`` with ``0 <= n < size`` are dropped.

    Raises:
        RecordFormatError: If the text is not a YAML mapping or an item
            cannot be decoded
    """
    try:
        parsed = yaml.safe_load(data) if data else {}
    except yaml.YAMLError as e:
        raise RecordFormatError(f"Invalid serialized slot array: {e}", code="BAD_YAML") from e
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise RecordFormatError(
            f"Serialized slot array must be a mapping, got {type(parsed).__name__}",
            code="BAD_YAML",
        )

    items: List[Optional[Any]] = [None] * size
    for key, raw_item in parsed.items():
        if not isinstance(key, str) or not key.startswith(SLOT_KEY_PREFIX):
            logger.debug(f"Dropping unknown key {key!r} from slot array")
            continue
        try:
            slot = int(key[len(SLOT_KEY_PREFIX):])
        except ValueError:
            logger.debug(f"Dropping non-numeric slot key {key!r}")
            continue
        if not 0 <= slot < size:
            logger.debug(f"Dropping out-of-range slot {slot}")
            continue
        try:
            items[slot] = codec.decode(raw_item)
        except Exception as e:
            raise RecordFormatError(f"Cannot decode item in slot {slot}: {e}", code="BAD_ITEM") from e
    return items


class RestorationQueue:
    """Pending restorations keyed by participant."""

    def __init__(self, store: SessionStore, size: int = PRIVATE_SLOTS):
        self._store = store
        self._size = size
        self._pending: Dict[UUID, List[Optional[Any]]] = {}

    def _normalize(self, items: Sequence[Optional[Any]]) -> List[Optional[Any]]:
        normalized = list(items[: self._size])
        normalized.extend([None] * (self._size - len(normalized)))
        return normalized

    def enqueue(self, participant: UUID, items: Sequence[Optional[Any]]) -> None:
        """Store the payload for a participant, replacing any earlier one."""
        if participant in self._pending:
            logger.warning(
                f"Replacing an undelivered restoration for {participant}; "
                "the earlier payload is discarded"
            )
        self._pending[participant] = self._normalize(items)
        logger.info(f"Pending restoration queued for offline participant {participant}")
        self._write_through()

    def has_pending(self, participant: UUID) -> bool:
        return participant in self._pending

    def consume(self, participant: UUID) -> Optional[List[Optional[Any]]]:
        """Remove and return the payload for a participant, or None."""
        items = self._pending.pop(participant, None)
        if items is not None:
            self._write_through()
        return items

    def peek(self, participant: UUID) -> Optional[List[Optional[Any]]]:
        items = self._pending.get(participant)
        return list(items) if items is not None else None

    def participants(self) -> List[UUID]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def load(self) -> int:
        """Replace the in-memory queue with the durable one.

        Entries that cannot be decoded are logged and skipped. Returns the
        number of entries loaded.
        """
        self._pending.clear()
        for participant, serialized in self._store.load_pending_restorations().items():
            try:
                self._pending[participant] = deserialize_items(serialized, self._size, self._store.codec)
            except RecordFormatError as e:
                logger.error(f"Skipping pending restoration for {participant}: {e}", exc_info=True)
        logger.info(f"Loaded {len(self._pending)} pending restorations")
        return len(self._pending)

    def save(self) -> None:
        """Overwrite the durable queue with the in-memory one.

        An entry that cannot be serialized stays in memory but is left out
        of the document; it is still delivered if the process keeps running.

        Raises:
            StorageError: If the document cannot be written
        """
        serialized: Dict[UUID, str] = {}
        for participant, items in self._pending.items():
            try:
                serialized[participant] = serialize_items(items, self._store.codec)
            except StorageError as e:
                logger.error(f"Pending restoration for {participant} not persisted: {e}", exc_info=True)
        self._store.save_pending_restorations(serialized)

    def _write_through(self) -> None:
        try:
            self.save()
        except StorageError as e:
            logger.error(f"Failed to persist pending restorations: {e}", exc_info=True)
