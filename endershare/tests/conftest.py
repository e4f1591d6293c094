import sys
from pathlib import Path

import pytest

# Ensure the project root is on sys.path for absolute imports like 'endershare.*'
project_root = Path(__file__).resolve().parents[2]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from endershare.infrastructure.host.in_memory import InMemoryHost  # noqa: E402
from endershare.infrastructure.scheduling.manual_scheduler import ManualScheduler  # noqa: E402
from endershare.tests.helpers import RecordingStore, item, make_service  # noqa: E402


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return RecordingStore(data_dir)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def host():
    return InMemoryHost()


@pytest.fixture
def alice(host):
    return host.register("Alice")


@pytest.fixture
def bob(host):
    return host.register("Bob")


@pytest.fixture
def carol(host):
    return host.register("Carol")


@pytest.fixture
def service(host, store, scheduler):
    service = make_service(host, store, scheduler)
    service.start()
    yield service
    service.stop()


@pytest.fixture
def fill_chest(host):
    """Put items into a participant's private chest."""
    def _fill(participant, items_by_slot):
        chest = host.private_container(participant)
        for slot, value in items_by_slot.items():
            chest.set_item(slot, value)
        return chest
    return _fill


@pytest.fixture
def shared(service, host, alice, bob, fill_chest):
    """An active session between Alice (inviter) and Bob."""
    fill_chest(alice, {0: item("DIAMOND", 3), 26: item("APPLE", 10)})
    fill_chest(bob, {0: item("STONE", 64), 5: item("TORCH", 12)})
    service.invite(alice, bob)
    return service.accept(bob, alice)
