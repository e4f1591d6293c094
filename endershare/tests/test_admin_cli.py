"""Tests for the endershare-admin CLI."""

from uuid import uuid4

import pytest

from endershare.admin_cli import build_parser, main
from endershare.application.sharing.restoration import serialize_items
from endershare.domain.sessions.models import ShareSession
from endershare.infrastructure.host.in_memory import SlotContainer
from endershare.infrastructure.sessions.yaml_store import YamlSessionStore
from endershare.tests.helpers import item


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    data_dir = tmp_path / "data"
    monkeypatch.setenv("ENDERSHARE_DATA_DIR", str(data_dir))
    monkeypatch.delenv("PENDING_INVITATION_TIMEOUT", raising=False)
    return data_dir


class TestAdminCli:
    """Read-only inspection commands."""

    def test_no_command_prints_help(self, cli_env, capsys):
        assert main([]) == 1
        assert "endershare-admin" in capsys.readouterr().out

    def test_parser_subcommands(self):
        args = build_parser().parse_args(["sessions", "--data-dir", "/tmp/x"])
        assert args.command == "sessions"
        assert args.data_dir == "/tmp/x"

    def test_validate(self, cli_env, capsys):
        assert main(["validate"]) == 0
        out = capsys.readouterr().out
        assert "share_config: valid" in out
        assert "Invitation timeout: 60s" in out

    def test_validate_reports_invalid_config(self, cli_env, capsys):
        cli_env.mkdir()
        (cli_env / "config.yml").write_text("pending_invitation_timeout: 0\n", encoding="utf-8")
        assert main(["validate"]) == 1
        assert "share_config: INVALID" in capsys.readouterr().out

    def test_sessions_empty(self, cli_env, capsys):
        assert main(["sessions"]) == 0
        assert "No stored sessions" in capsys.readouterr().out

    def test_sessions_lists_slot_counts(self, cli_env, capsys):
        container = SlotContainer(54)
        container.set_item(0, item("DIAMOND"))
        container.set_item(30, item("STONE"))
        container.set_item(31, item("TORCH"))
        session = ShareSession(uuid4(), uuid4(), container, session_id="listed")
        YamlSessionStore(cli_env).save_session(session)

        assert main(["sessions", "--data-dir", str(cli_env)]) == 0
        out = capsys.readouterr().out
        assert "listed" in out
        assert f"player1: {session.participant_a} (1 items)" in out
        assert f"player2: {session.participant_b} (2 items)" in out

    def test_pending_lists_restorations(self, cli_env, capsys):
        store = YamlSessionStore(cli_env)
        good, bad = uuid4(), uuid4()
        items = [None] * 27
        items[3] = item("GOLD")
        store.save_pending_restorations({
            good: serialize_items(items, store.codec),
            bad: "- broken\n",
        })

        assert main(["pending"]) == 0
        out = capsys.readouterr().out
        assert f"{good}: 1 items" in out
        assert f"{bad}: unreadable" in out

    def test_pending_empty(self, cli_env, capsys):
        assert main(["pending"]) == 0
        assert "No pending restorations" in capsys.readouterr().out
