"""
Sharing service.

Owns all sharing state (session registry, pending invitations, pending
restorations) for the lifetime of the host process, and is the single
entry point for commands and host events:

    start()  loads sessions and pending restorations from storage
    stop()   flushes pending writes and saves everything back

Everything runs on the host's single event thread; scheduled callbacks are
posted to the same thread through the scheduler.
"""

import logging
from typing import Optional
from uuid import UUID

from endershare.core.logging_config import get_tracer
from endershare.core.metrics_logger import log_metric
from endershare.domain.errors import SessionConflictError, StorageError
from endershare.domain.sessions.containers import SHARED_CONTAINER_TITLE, SHARED_SLOTS
from endershare.domain.sessions.models import PendingInvitation, SessionRecord, ShareSession
from endershare.infrastructure.sessions.registry import SessionRegistry
from endershare.interfaces.containers import Container
from endershare.interfaces.participants import MessageLevel, ParticipantGateway
from endershare.interfaces.scheduling import Scheduler
from endershare.interfaces.sessions import SessionStore
from endershare.modules.config import ConfigManager, config_manager

from .debounce import DebounceCoordinator
from .lifecycle import ShareLifecycle
from .restoration import RestorationQueue

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class ShareService:
    """Long-lived owner of the sharing state."""

    def __init__(
        self,
        gateway: ParticipantGateway,
        store: SessionStore,
        scheduler: Scheduler,
        invitation_timeout: Optional[float] = None,
        debounce_delay: Optional[float] = None,
        config: Optional[ConfigManager] = None,
    ):
        """
        Args:
            gateway: Host participant gateway
            store: Durable session store
            scheduler: Event-queue scheduler for invitation expiry and debounced writes
            invitation_timeout: Seconds an invitation stays valid; defaults to configuration
            debounce_delay: Quiet period before a shared container is saved; defaults to configuration
            config: Configuration manager; defaults to the global one
        """
        config = config or config_manager
        if invitation_timeout is None:
            invitation_timeout = config.invitation_timeout_seconds
        if debounce_delay is None:
            debounce_delay = config.debounce_delay_seconds

        self._gateway = gateway
        self._store = store
        self.registry = SessionRegistry()
        self.restorations = RestorationQueue(store)
        self.lifecycle = ShareLifecycle(
            registry=self.registry,
            gateway=gateway,
            store=store,
            scheduler=scheduler,
            restorations=self.restorations,
            invitation_timeout=invitation_timeout,
        )
        self.debounce = DebounceCoordinator(scheduler, self.lifecycle.persist_session, debounce_delay)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # ----- Lifecycle -----

    def start(self) -> None:
        """Load persisted sessions and pending restorations."""
        if self._running:
            logger.warning("ShareService.start() called twice; ignoring")
            return
        self.registry.clear()
        loaded = 0
        for record in self._store.load_all_sessions():
            if self._register_record(record):
                loaded += 1
        self.restorations.load()
        self._running = True
        logger.info(
            f"Sharing service started with {loaded} sessions and "
            f"{len(self.restorations)} pending restorations"
        )

    def _register_record(self, record: SessionRecord) -> bool:
        container = self._gateway.create_container(SHARED_SLOTS, SHARED_CONTAINER_TITLE)
        for slot, item in record.slots.items():
            if not 0 <= slot < SHARED_SLOTS:
                logger.warning(f"Dropping out-of-range slot {slot} from session {record.session_id}")
                continue
            container.set_item(slot, item)
        try:
            session = ShareSession(
                participant_a=record.participant_a,
                participant_b=record.participant_b,
                shared_container=container,
                session_id=record.session_id,
            )
            self.registry.add(session)
        except (ValueError, SessionConflictError) as e:
            logger.error(f"Skipping session record {record.session_id}: {e}")
            return False
        return True

    def stop(self) -> None:
        """Flush pending writes and persist every session and restoration."""
        if not self._running:
            return
        written = self.debounce.flush_all(self.registry.all())
        dropped = self.lifecycle.cancel_all_invitations()
        try:
            self.restorations.save()
        except StorageError as e:
            logger.error(f"Failed to save pending restorations on shutdown: {e}", exc_info=True)
        self._running = False
        logger.info(
            f"Sharing service stopped: {written} sessions saved, "
            f"{dropped} pending invitations dropped"
        )

    # ----- Commands -----

    def invite(self, inviter: UUID, invitee: UUID) -> PendingInvitation:
        with tracer.start_as_current_span("endershare.invite") as span:
            span.set_attribute("endershare.inviter", str(inviter))
            span.set_attribute("endershare.invitee", str(invitee))
            return self.lifecycle.invite(inviter, invitee)

    def accept(self, invitee: UUID, inviter: UUID) -> ShareSession:
        with tracer.start_as_current_span("endershare.accept") as span:
            span.set_attribute("endershare.inviter", str(inviter))
            span.set_attribute("endershare.invitee", str(invitee))
            session = self.lifecycle.accept(invitee, inviter)
            span.set_attribute("endershare.session_id", session.session_id)
            return session

    def unshare(self, participant: UUID) -> ShareSession:
        with tracer.start_as_current_span("endershare.unshare") as span:
            span.set_attribute("endershare.participant", str(participant))
            session = self.lifecycle.unshare(participant)
            self.debounce.discard(session.session_id)
            span.set_attribute("endershare.session_id", session.session_id)
            return session

    def status(self, participant: UUID) -> Optional[UUID]:
        return self.lifecycle.status(participant)

    def is_sharing(self, participant: UUID) -> bool:
        return self.registry.is_active(participant)

    # ----- Host events -----

    def session_for_container(self, container: Container) -> Optional[ShareSession]:
        """Find the session whose shared container is this very object."""
        for session in self.registry.all():
            if session.shared_container is container:
                return session
        return None

    def on_ender_chest_open(self, participant: UUID) -> bool:
        """Open the shared container instead of the private one.

        Returns True if the host should suppress its default behaviour.
        """
        session = self.registry.get(participant)
        if session is None:
            return False
        self._gateway.open_container(participant, session.shared_container)
        self._gateway.send_message(participant, "Shared Ender Chest opened.", MessageLevel.SUCCESS)
        return True

    def on_container_click(self, participant: UUID, container: Container) -> None:
        self._on_container_mutation(participant, container)

    def on_container_drag(self, participant: UUID, container: Container) -> None:
        self._on_container_mutation(participant, container)

    def _on_container_mutation(self, participant: UUID, container: Container) -> None:
        session = self.session_for_container(container)
        if session is None:
            return
        self.debounce.notify_mutation(session)

    def on_container_close(self, participant: UUID, container: Container) -> None:
        session = self.session_for_container(container)
        if session is None:
            return
        self.debounce.notify_close(session)

    def on_participant_join(self, participant: UUID) -> bool:
        """Deliver a pending restoration, if any. Returns True if one was delivered."""
        if not self.restorations.has_pending(participant):
            return False
        items = self.restorations.consume(participant)
        if items is None:
            return False
        chest = self._gateway.private_container(participant)
        chest.clear()
        chest.set_contents(items)
        self._gateway.send_message(
            participant,
            "Your Ender Chest has been restored from a previous EnderShare session.",
            MessageLevel.WARNING,
        )
        logger.info(f"Delivered pending restoration to {participant}")
        log_metric("restoration_delivered", participant, item_count=sum(1 for i in items if i is not None))
        return True

    def on_disable(self) -> None:
        self.stop()
