"""Tests for the offline restoration queue and slot array serialization."""

from uuid import uuid4

import pytest
import yaml

from endershare.application.sharing.restoration import (
    RestorationQueue,
    deserialize_items,
    serialize_items,
)
from endershare.domain.errors import RecordFormatError, StorageError
from endershare.domain.sessions.containers import PRIVATE_SLOTS
from endershare.infrastructure.sessions.yaml_store import PassthroughItemCodec, YamlSessionStore
from endershare.tests.helpers import item


def _slots(items_by_slot, size=PRIVATE_SLOTS):
    items = [None] * size
    for slot, value in items_by_slot.items():
        items[slot] = value
    return items


class TestSlotArraySerialization:
    """``slot.<n>`` text format used for pending restorations."""

    def test_only_filled_slots_are_written(self):
        text = serialize_items(_slots({2: item("DIAMOND"), 20: item("BREAD", 5)}), PassthroughItemCodec())
        assert yaml.safe_load(text) == {"slot.2": item("DIAMOND"), "slot.20": item("BREAD", 5)}

    def test_deserialize_rebuilds_fixed_size_array(self):
        text = serialize_items(_slots({0: item("DIAMOND"), 26: item("APPLE")}), PassthroughItemCodec())
        items = deserialize_items(text, PRIVATE_SLOTS, PassthroughItemCodec())
        assert len(items) == PRIVATE_SLOTS
        assert items[0] == item("DIAMOND")
        assert items[26] == item("APPLE")
        assert sum(1 for i in items if i is not None) == 2

    def test_unknown_and_out_of_range_keys_are_dropped(self):
        text = yaml.safe_dump({
            "slot.1": item("STONE"),
            "slot.27": item("LOST"),
            "slot.x": item("LOST"),
            "other": item("LOST"),
        })
        items = deserialize_items(text, PRIVATE_SLOTS, PassthroughItemCodec())
        assert items[1] == item("STONE")
        assert sum(1 for i in items if i is not None) == 1

    def test_empty_text_gives_empty_array(self):
        assert deserialize_items("", PRIVATE_SLOTS, PassthroughItemCodec()) == [None] * PRIVATE_SLOTS
        assert deserialize_items("{}\n", PRIVATE_SLOTS, PassthroughItemCodec()) == [None] * PRIVATE_SLOTS

    def test_non_mapping_is_rejected(self):
        with pytest.raises(RecordFormatError):
            deserialize_items("- a\n- b\n", PRIVATE_SLOTS, PassthroughItemCodec())

    def test_invalid_yaml_is_rejected(self):
        with pytest.raises(RecordFormatError) as exc_info:
            deserialize_items("slot.0: [unclosed\n", PRIVATE_SLOTS, PassthroughItemCodec())
        assert exc_info.value.code == "BAD_YAML"


class TestRestorationQueue:
    """Queue bookkeeping and write-through persistence."""

    def test_enqueue_and_consume_exactly_once(self, store):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, _slots({4: item("EMERALD", 2)}))

        assert queue.has_pending(participant)
        items = queue.consume(participant)
        assert items[4] == item("EMERALD", 2)
        assert not queue.has_pending(participant)
        assert queue.consume(participant) is None

    def test_enqueue_pads_and_truncates_to_private_size(self, store):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, [item("A"), item("B")])
        assert len(queue.peek(participant)) == PRIVATE_SLOTS

        other = uuid4()
        queue.enqueue(other, [item("X")] * (PRIVATE_SLOTS + 5))
        assert len(queue.peek(other)) == PRIVATE_SLOTS

    def test_enqueue_replaces_earlier_payload(self, store, caplog):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, _slots({0: item("OLD")}))
        queue.enqueue(participant, _slots({1: item("NEW")}))

        items = queue.consume(participant)
        assert items[0] is None
        assert items[1] == item("NEW")
        assert "Replacing an undelivered restoration" in caplog.text

    def test_enqueue_writes_through(self, data_dir, store):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, _slots({3: item("GOLD")}))

        reloaded = RestorationQueue(YamlSessionStore(data_dir))
        assert reloaded.load() == 1
        assert reloaded.peek(participant)[3] == item("GOLD")

    def test_consume_writes_through(self, data_dir, store):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, _slots({3: item("GOLD")}))
        queue.consume(participant)

        reloaded = RestorationQueue(YamlSessionStore(data_dir))
        assert reloaded.load() == 0
        assert not reloaded.has_pending(participant)

    def test_load_skips_unreadable_entries(self, data_dir, store):
        good, bad = uuid4(), uuid4()
        store.save_pending_restorations({
            good: serialize_items(_slots({0: item("DIAMOND")}), store.codec),
            bad: "- not\n- a mapping\n",
        })

        queue = RestorationQueue(store)
        assert queue.load() == 1
        assert queue.participants() == [good]

    def test_peek_returns_copy(self, store):
        queue = RestorationQueue(store)
        participant = uuid4()
        queue.enqueue(participant, _slots({0: item("DIAMOND")}))
        queue.peek(participant)[0] = None
        assert queue.peek(participant)[0] == item("DIAMOND")
        assert len(queue) == 1

    def test_unserializable_entry_stays_in_memory(self, data_dir, store, caplog):
        queue = RestorationQueue(store)
        good, odd = uuid4(), uuid4()
        queue.enqueue(good, _slots({0: item("DIAMOND")}))
        queue.enqueue(odd, _slots({1: object()}))

        assert queue.has_pending(odd)
        assert "not persisted" in caplog.text
        reloaded = RestorationQueue(YamlSessionStore(data_dir))
        assert reloaded.load() == 1
        assert reloaded.has_pending(good)

    def test_serialize_failure_is_storage_error(self):
        with pytest.raises(StorageError) as exc_info:
            serialize_items(_slots({0: object()}), PassthroughItemCodec())
        assert exc_info.value.code == "SERIALIZE_FAILED"
