"""
Handler for the ``/endershare`` command.

Subcommands: invite <player>, accept <player>, unshare, status.
Every invocation counts as handled; problems are reported to the sender as
messages.
"""

import logging
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from endershare.core.log_sanitizer import sanitize_for_logging, summarize_command_for_logging
from endershare.domain.errors import ShareRejectedError
from endershare.interfaces.participants import MessageLevel, ParticipantGateway

from .service import ShareService

logger = logging.getLogger(__name__)

COMMAND_NAME = "endershare"
SUBCOMMANDS = ("invite", "accept", "unshare", "status")
USAGE = f"Usage: /{COMMAND_NAME} <{'|'.join(SUBCOMMANDS)}>"


class ShareCommandHandler:
    """Parses command arguments and routes them to the sharing service."""

    def __init__(
        self,
        service: ShareService,
        gateway: ParticipantGateway,
        console_reply: Optional[Callable[[str], None]] = None,
    ):
        self._service = service
        self._gateway = gateway
        self._console_reply = console_reply or logger.info

    def _reply(self, sender: UUID, text: str, level: MessageLevel) -> None:
        self._gateway.send_message(sender, text, level)

    def execute(self, sender: Optional[UUID], args: Sequence[str]) -> bool:
        """
        Run the command for a sender.

        Args:
            sender: Participant issuing the command; None for the console
            args: Arguments after the command name

        Returns:
            Always True, the command is handled in every case
        """
        logger.debug(f"/{COMMAND_NAME} from {sender}: {summarize_command_for_logging(list(args))}")
        if sender is None:
            self._console_reply("Only players can execute this command.")
            return True

        if len(args) < 1:
            self._reply(sender, USAGE, MessageLevel.WARNING)
            return True

        subcommand = args[0].lower()
        try:
            if subcommand == "invite":
                self._handle_invite(sender, args)
            elif subcommand == "accept":
                self._handle_accept(sender, args)
            elif subcommand == "unshare":
                self._service.unshare(sender)
            elif subcommand == "status":
                self._handle_status(sender)
            else:
                self._reply(
                    sender,
                    f"Unknown subcommand. Use /{COMMAND_NAME} <{'|'.join(SUBCOMMANDS)}>",
                    MessageLevel.WARNING,
                )
        except ShareRejectedError as e:
            logger.info(f"/{COMMAND_NAME} {subcommand} rejected for {sender}: {e.code}")
            self._reply(sender, e.message, MessageLevel.ERROR)
        return True

    def _handle_invite(self, sender: UUID, args: Sequence[str]) -> None:
        if len(args) < 2:
            self._reply(sender, f"Usage: /{COMMAND_NAME} invite <player>", MessageLevel.WARNING)
            return
        target = self._gateway.find_online(args[1])
        if target is None:
            logger.debug(f"Invite target not found: {sanitize_for_logging(args[1])}")
            self._reply(sender, "Target player not found.", MessageLevel.ERROR)
            return
        self._service.invite(sender, target)

    def _handle_accept(self, sender: UUID, args: Sequence[str]) -> None:
        if len(args) < 2:
            self._reply(sender, f"Usage: /{COMMAND_NAME} accept <player>", MessageLevel.WARNING)
            return
        inviter = self._gateway.find_online(args[1])
        if inviter is None:
            self._reply(sender, "Inviter not found.", MessageLevel.ERROR)
            return
        self._service.accept(sender, inviter)

    def _handle_status(self, sender: UUID) -> None:
        counterpart = self._service.status(sender)
        if counterpart is None:
            self._reply(sender, "You are not in an active sharing session.", MessageLevel.WARNING)
        else:
            self._reply(
                sender,
                f"You are sharing with: {self._gateway.display_name(counterpart)}",
                MessageLevel.SUCCESS,
            )

    def complete(self, args: Sequence[str]) -> List[str]:
        """Tab completion: subcommand names for the first argument."""
        if len(args) != 1:
            return []
        prefix = args[0].lower()
        return [name for name in SUBCOMMANDS if name.startswith(prefix)]
