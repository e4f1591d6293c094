"""
Session lifecycle and invitation state machine.

Per participant pair:

    NoInvitation -> Pending -> Expired
                            -> Superseded
                            -> Accepted (active session) -> Ended

Invitations live in memory only. Sessions are registered in the session
registry and mirrored to durable storage.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from endershare.core.log_sanitizer import sanitize_for_logging
from endershare.core.metrics_logger import log_metric
from endershare.domain.errors import ConfigurationError, ShareRejectedError, StorageError
from endershare.domain.sessions.containers import (
    SHARED_CONTAINER_TITLE,
    SHARED_SLOTS,
    count_items,
    merge_private_contents,
    split_shared_contents,
)
from endershare.domain.sessions.models import PendingInvitation, ShareSession
from endershare.infrastructure.sessions.registry import SessionRegistry
from endershare.interfaces.participants import MessageLevel, ParticipantGateway
from endershare.interfaces.scheduling import Scheduler, TimerHandle
from endershare.interfaces.sessions import SessionStore

from .restoration import RestorationQueue

logger = logging.getLogger(__name__)

DEFAULT_INVITATION_TIMEOUT = 60


class ShareLifecycle:
    """Invite, accept, unshare and status operations."""

    def __init__(
        self,
        registry: SessionRegistry,
        gateway: ParticipantGateway,
        store: SessionStore,
        scheduler: Scheduler,
        restorations: RestorationQueue,
        invitation_timeout: float = DEFAULT_INVITATION_TIMEOUT,
    ):
        if invitation_timeout <= 0:
            raise ConfigurationError("Invitation timeout must be positive", code="INVALID_INVITATION_TIMEOUT")
        self._registry = registry
        self._gateway = gateway
        self._store = store
        self._scheduler = scheduler
        self._restorations = restorations
        self._timeout = invitation_timeout
        self._invitations: Dict[UUID, PendingInvitation] = {}
        self._expiry_timers: Dict[UUID, TimerHandle] = {}

    @property
    def invitation_timeout(self) -> float:
        return self._timeout

    # ----- Helpers -----

    def _name(self, participant: UUID) -> str:
        return self._gateway.display_name(participant)

    def _notify(self, participant: UUID, text: str, level: MessageLevel = MessageLevel.INFO) -> None:
        if self._gateway.is_online(participant):
            self._gateway.send_message(participant, text, level)

    def persist_session(self, session: ShareSession) -> bool:
        """Write the full session to storage. Failures are logged, not raised."""
        try:
            self._store.save_session(session)
            return True
        except StorageError as e:
            logger.error(f"Failed to save session {session.session_id}: {e}", exc_info=True)
            return False

    def _delete_record(self, session_id: str) -> None:
        try:
            self._store.delete_session(session_id)
        except StorageError as e:
            logger.error(f"Failed to delete session record {session_id}: {e}", exc_info=True)

    # ----- Invitations -----

    def pending_invitation(self, invitee: UUID) -> Optional[PendingInvitation]:
        """Return the still-valid invitation for an invitee without consuming it."""
        invitation = self._invitations.get(invitee)
        if invitation is None:
            return None
        if invitation.is_expired(self._scheduler.time(), self._timeout):
            self._drop_invitation(invitee)
            return None
        return invitation

    def pending_invitations(self) -> List[PendingInvitation]:
        return list(self._invitations.values())

    def _drop_invitation(self, invitee: UUID) -> Optional[PendingInvitation]:
        timer = self._expiry_timers.pop(invitee, None)
        if timer is not None:
            timer.cancel()
        return self._invitations.pop(invitee, None)

    def invite(self, inviter: UUID, invitee: UUID) -> PendingInvitation:
        """
        Offer a session to another participant.

        Raises:
            ShareRejectedError: On self-invite or when either side is already sharing
        """
        if inviter == invitee:
            raise ShareRejectedError("You cannot invite yourself.", code="SELF_INVITE")
        if self._registry.is_active(inviter):
            raise ShareRejectedError("You are already sharing your Ender Chest.", code="ALREADY_SHARING")
        if self._registry.is_active(invitee):
            raise ShareRejectedError(
                f"{self._name(invitee)} is already sharing their Ender Chest.",
                code="TARGET_ALREADY_SHARING",
            )

        previous = self._drop_invitation(invitee)
        if previous is not None and previous.inviter != inviter:
            logger.info(
                f"Invitation from {previous.inviter} to {invitee} superseded by one from {inviter}"
            )
            self._notify(
                previous.inviter,
                f"Your invitation to {self._name(invitee)} was replaced by another invitation.",
                MessageLevel.WARNING,
            )

        invitation = PendingInvitation(inviter=inviter, invitee=invitee, created_at=self._scheduler.time())
        self._invitations[invitee] = invitation
        self._expiry_timers[invitee] = self._scheduler.call_later(
            self._timeout, lambda: self._expire(invitation)
        )

        inviter_name = self._name(inviter)
        self._notify(inviter, f"Invitation sent to {self._name(invitee)}", MessageLevel.SUCCESS)
        self._notify(
            invitee,
            f"You have received an EnderShare invitation from {inviter_name}. "
            f"Type '/endershare accept {inviter_name}' to accept.",
            MessageLevel.PROMPT,
        )
        logger.info(
            f"Invitation created: inviter={inviter} ({sanitize_for_logging(inviter_name)}), "
            f"invitee={invitee}, timeout={self._timeout}s"
        )
        log_metric("share_invite", inviter, superseded=previous is not None)
        return invitation

    def _expire(self, invitation: PendingInvitation) -> None:
        """Scheduled expiry check for one specific invitation."""
        if self._invitations.get(invitation.invitee) is not invitation:
            return
        if not invitation.is_expired(self._scheduler.time(), self._timeout):
            return
        self._expiry_timers.pop(invitation.invitee, None)
        del self._invitations[invitation.invitee]
        logger.info(f"Invitation from {invitation.inviter} to {invitation.invitee} expired")
        self._notify(
            invitation.invitee,
            f"Your invitation from {self._name(invitation.inviter)} has expired.",
            MessageLevel.WARNING,
        )
        log_metric("share_invite_expired", invitation.invitee)

    def cancel_all_invitations(self) -> int:
        count = len(self._invitations)
        for invitee in list(self._invitations):
            self._drop_invitation(invitee)
        return count

    # ----- Sessions -----

    def accept(self, invitee: UUID, claimed_inviter: UUID) -> ShareSession:
        """
        Accept an invitation and merge both private containers.

        The invitation is consumed once read, whether or not the accept
        succeeds.

        Raises:
            ShareRejectedError: If there is no valid invitation from
                ``claimed_inviter`` or either side is already sharing
        """
        invitation = self._drop_invitation(invitee)
        no_invitation = f"No valid invitation found from {self._name(claimed_inviter)}"
        if invitation is None or invitation.inviter != claimed_inviter:
            raise ShareRejectedError(no_invitation, code="NO_VALID_INVITATION")
        if invitation.is_expired(self._scheduler.time(), self._timeout):
            logger.info(f"Rejected accept of expired invitation from {claimed_inviter} to {invitee}")
            raise ShareRejectedError(no_invitation, code="INVITATION_EXPIRED")
        if self._registry.is_active(invitee):
            raise ShareRejectedError("You are already sharing your Ender Chest.", code="ALREADY_SHARING")
        if self._registry.is_active(claimed_inviter):
            raise ShareRejectedError(
                f"{self._name(claimed_inviter)} is already sharing their Ender Chest.",
                code="TARGET_ALREADY_SHARING",
            )
        if not self._gateway.is_online(claimed_inviter):
            raise ShareRejectedError("Inviter not found.", code="INVITER_OFFLINE")

        inviter_chest = self._gateway.private_container(claimed_inviter)
        invitee_chest = self._gateway.private_container(invitee)
        merged = merge_private_contents(inviter_chest.get_contents(), invitee_chest.get_contents())
        shared = self._gateway.create_container(SHARED_SLOTS, SHARED_CONTAINER_TITLE)
        shared.set_contents(merged)
        inviter_chest.clear()
        invitee_chest.clear()

        session = ShareSession(participant_a=claimed_inviter, participant_b=invitee, shared_container=shared)
        self._registry.add(session)
        self.persist_session(session)

        self._notify(
            claimed_inviter,
            f"You are now sharing your Ender Chest with {self._name(invitee)}",
            MessageLevel.SUCCESS,
        )
        self._notify(
            invitee,
            f"You are now sharing your Ender Chest with {self._name(claimed_inviter)}",
            MessageLevel.SUCCESS,
        )
        self._gateway.open_container(claimed_inviter, shared)
        self._gateway.open_container(invitee, shared)

        logger.info(f"Session {session.session_id} started between {claimed_inviter} and {invitee}")
        log_metric("share_accept", invitee, item_count=count_items(merged))
        return session

    def unshare(self, participant: UUID) -> ShareSession:
        """
        End the session of a participant and split the shared container.

        Slots [0, 27) go to the session's first participant and [27, 54) to
        the second, regardless of who ended the session. Unreachable
        participants get their half queued for restoration.

        Raises:
            ShareRejectedError: If the participant is not sharing
        """
        session = self._registry.get(participant)
        if session is None:
            raise ShareRejectedError("You are not currently in a sharing session.", code="NOT_SHARING")

        for member in session.participants:
            if self._gateway.is_online(member):
                self._gateway.close_container(member)

        first_half, second_half = split_shared_contents(session.shared_container.get_contents())
        session.shared_container.clear()
        queued = 0
        for member, items in ((session.participant_a, first_half), (session.participant_b, second_half)):
            if not self._restore_or_enqueue(member, items):
                queued += 1

        self._registry.remove(participant)
        self._delete_record(session.session_id)

        logger.info(f"Session {session.session_id} ended by {participant}, {queued} restoration(s) queued")
        log_metric("share_unshare", participant, queued_restorations=queued)
        return session

    def _restore_or_enqueue(self, participant: UUID, items: Sequence[Optional[Any]]) -> bool:
        """Return True if restored live, False if queued."""
        if not self._gateway.is_online(participant):
            self._restorations.enqueue(participant, items)
            return False
        chest = self._gateway.private_container(participant)
        chest.clear()
        chest.set_contents(items)
        self._notify(
            participant,
            "Your EnderShare session has ended, and your Ender Chest has been restored.",
            MessageLevel.INFO,
        )
        return True

    def status(self, participant: UUID) -> Optional[UUID]:
        """Counterpart of the participant's session, or None."""
        session = self._registry.get(participant)
        if session is None:
            return None
        return session.counterpart(participant)
