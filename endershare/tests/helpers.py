"""Shared test helpers."""

from endershare.application.sharing.service import ShareService
from endershare.domain.errors import StorageError
from endershare.infrastructure.sessions.yaml_store import YamlSessionStore

INVITATION_TIMEOUT = 60
DEBOUNCE_DELAY = 1.0


def item(kind: str, amount: int = 1) -> dict:
    """A YAML-native item as the in-memory host stores it."""
    return {"type": kind, "amount": amount}


class RecordingStore(YamlSessionStore):
    """YAML store that records writes and can be told to fail them."""

    def __init__(self, data_dir):
        super().__init__(data_dir)
        self.saved = []
        self.deleted = []
        self.fail_writes = False

    def save_session(self, session):
        if self.fail_writes:
            raise StorageError("disk full", code="WRITE_FAILED")
        super().save_session(session)
        self.saved.append((session.session_id, session.shared_container.get_contents()))

    def delete_session(self, session_id):
        self.deleted.append(session_id)
        return super().delete_session(session_id)

    def saves_for(self, session_id):
        return [contents for sid, contents in self.saved if sid == session_id]


def make_service(host, store, scheduler):
    service = ShareService(
        gateway=host,
        store=store,
        scheduler=scheduler,
        invitation_timeout=INVITATION_TIMEOUT,
        debounce_delay=DEBOUNCE_DELAY,
    )
    host.add_close_listener(service.on_container_close)
    return service
