"""Tests for the /endershare command handler."""

import pytest

from endershare.application.sharing.commands import USAGE, ShareCommandHandler
from endershare.interfaces.participants import MessageLevel


@pytest.fixture
def console():
    return []


@pytest.fixture
def handler(service, host, console):
    return ShareCommandHandler(service, host, console_reply=console.append)


def _last(host, participant):
    return [m for m in host.messages if m.participant == participant][-1]


class TestCommandRouting:
    """Argument parsing and replies."""

    def test_console_sender_is_refused(self, handler, console):
        assert handler.execute(None, ["status"]) is True
        assert console == ["Only players can execute this command."]

    def test_no_arguments_shows_usage(self, handler, host, alice):
        assert handler.execute(alice, []) is True
        assert _last(host, alice).text == USAGE

    def test_unknown_subcommand(self, handler, host, alice):
        handler.execute(alice, ["dance"])
        assert _last(host, alice).text == "Unknown subcommand. Use /endershare <invite|accept|unshare|status>"

    def test_subcommand_is_case_insensitive(self, handler, service, alice, bob):
        handler.execute(alice, ["INVITE", "Bob"])
        assert service.lifecycle.pending_invitation(bob) is not None

    def test_invite_without_target(self, handler, host, alice):
        handler.execute(alice, ["invite"])
        assert _last(host, alice).text == "Usage: /endershare invite <player>"

    def test_invite_unknown_target(self, handler, host, alice):
        handler.execute(alice, ["invite", "Nobody"])
        message = _last(host, alice)
        assert message.text == "Target player not found."
        assert message.level == MessageLevel.ERROR

    def test_invite_offline_target(self, handler, host, alice, bob):
        host.disconnect(bob)
        handler.execute(alice, ["invite", "Bob"])
        assert _last(host, alice).text == "Target player not found."

    def test_invite_self_reports_rejection(self, handler, host, alice):
        handler.execute(alice, ["invite", "alice"])
        assert _last(host, alice).text == "You cannot invite yourself."

    def test_accept_without_inviter(self, handler, host, bob):
        handler.execute(bob, ["accept"])
        assert _last(host, bob).text == "Usage: /endershare accept <player>"

    def test_accept_unknown_inviter(self, handler, host, bob):
        handler.execute(bob, ["accept", "Nobody"])
        assert _last(host, bob).text == "Inviter not found."

    def test_invite_accept_status_unshare(self, handler, service, host, alice, bob):
        handler.execute(alice, ["invite", "Bob"])
        handler.execute(bob, ["accept", "Alice"])
        assert service.is_sharing(alice)

        handler.execute(alice, ["status"])
        status = _last(host, alice)
        assert status.text == "You are sharing with: Bob"
        assert status.level == MessageLevel.SUCCESS

        handler.execute(bob, ["unshare"])
        assert not service.is_sharing(alice)

    def test_accept_without_invitation_reports_rejection(self, handler, host, alice, bob):
        handler.execute(bob, ["accept", "Alice"])
        assert _last(host, bob).text == "No valid invitation found from Alice"

    def test_status_when_not_sharing(self, handler, host, carol):
        handler.execute(carol, ["status"])
        message = _last(host, carol)
        assert message.text == "You are not in an active sharing session."
        assert message.level == MessageLevel.WARNING

    def test_unshare_when_not_sharing(self, handler, host, carol):
        handler.execute(carol, ["unshare"])
        assert _last(host, carol).text == "You are not currently in a sharing session."


class TestCompletion:
    """Tab completion of subcommand names."""

    def test_completes_first_argument(self, handler):
        assert handler.complete(["in"]) == ["invite"]
        assert handler.complete([""]) == ["invite", "accept", "unshare", "status"]
        assert handler.complete(["ST"]) == ["status"]

    def test_no_completion_after_first_argument(self, handler):
        assert handler.complete(["invite", "B"]) == []
        assert handler.complete([]) == []
