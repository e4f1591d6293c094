"""Tests for log sanitizing, metrics logging and structured log output."""

import json
import logging
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from endershare.core.log_sanitizer import sanitize_for_logging, summarize_command_for_logging
from endershare.core.logging_config import JSONFormatter, LoggingConfig, get_tracer
from endershare.core.metrics_logger import log_metric
from endershare.modules.config import AppSettings


class TestSanitizeForLogging:
    """Control and newline stripping."""

    def test_strips_newlines(self):
        assert sanitize_for_logging("Steve\nAlex\r\nBob") == "SteveAlexBob"

    def test_strips_control_and_unicode_separators(self):
        assert sanitize_for_logging("Test\x1b[31mRed") == "Test[31mRed"
        assert sanitize_for_logging("Fake\u2028Log\u2029") == "FakeLog"

    def test_non_string_values(self):
        assert sanitize_for_logging(None) == ""
        assert sanitize_for_logging(42) == "42"

    def test_summarize_command(self):
        assert summarize_command_for_logging(["Invite", "Bob\nINFO fake"]) == "subcommand=invite arg_count=2"
        assert summarize_command_for_logging([]) == "subcommand=- arg_count=0"
        assert summarize_command_for_logging("invite") == "args_type=str"


class TestLogMetric:
    """Feature-flagged [METRIC] lines."""

    def _settings(self, enabled):
        manager = MagicMock()
        manager.app_settings.feature_metrics_logging_enabled = enabled
        return manager

    def test_disabled_logs_nothing(self, caplog):
        with patch("endershare.modules.config.config_manager", self._settings(False)):
            with caplog.at_level(logging.INFO, logger="endershare.core.metrics_logger"):
                log_metric("share_invite", uuid4())
        assert "[METRIC]" not in caplog.text

    def test_enabled_logs_metadata(self, caplog):
        participant = uuid4()
        with patch("endershare.modules.config.config_manager", self._settings(True)):
            with caplog.at_level(logging.INFO, logger="endershare.core.metrics_logger"):
                log_metric("share_accept", participant, item_count=4)
        assert f"[METRIC] [{participant}] share_accept item_count=4" in caplog.text

    def test_unknown_participant(self, caplog):
        with patch("endershare.modules.config.config_manager", self._settings(True)):
            with caplog.at_level(logging.INFO, logger="endershare.core.metrics_logger"):
                log_metric("restoration_delivered")
        assert "[METRIC] [unknown] restoration_delivered" in caplog.text


class TestStructuredLogging:
    """JSON lines output."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            if handler not in handlers:
                handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_json_formatter_fields(self):
        record = logging.LogRecord(
            name="endershare.test", level=logging.WARNING, pathname=__file__, lineno=10,
            msg="Session %s saved", args=("abc",), exc_info=None,
        )
        record.session_id = "abc"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "endershare.test"
        assert entry["message"] == "Session abc saved"
        assert entry["extra"] == {"session_id": "abc"}
        assert entry["location"].endswith(":10")
        assert "trace_id" not in entry

    def _read_entries(self, path):
        for handler in logging.getLogger().handlers:
            handler.flush()
        return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]

    def test_logging_config_writes_jsonl(self, tmp_path, restore_root_logger):
        config = LoggingConfig(logs_dir=tmp_path / "logs", log_level="INFO")
        logging.getLogger("endershare.test").info("hello from the test", extra={"session_id": "s1"})
        logging.getLogger("endershare.test").debug("too quiet")

        assert config.log_file == tmp_path / "logs" / "endershare.jsonl"
        entries = self._read_entries(config.log_file)
        assert [e["message"] for e in entries] == ["hello from the test"]
        assert entries[0]["extra"] == {"session_id": "s1"}

    def test_records_inside_span_carry_trace_ids(self, tmp_path, restore_root_logger):
        config = LoggingConfig(logs_dir=tmp_path / "logs", log_level="INFO")
        with get_tracer("endershare.test").start_as_current_span("endershare.invite"):
            logging.getLogger("endershare.test").info("inside span")

        (entry,) = self._read_entries(config.log_file)
        assert len(entry["trace_id"]) == 32
        assert len(entry["span_id"]) == 16

    def test_from_settings_uses_log_dir(self, tmp_path, monkeypatch, restore_root_logger):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("APP_LOG_DIR", str(tmp_path / "applogs"))
        config = LoggingConfig.from_settings(AppSettings(), log_level="WARNING")
        assert config.log_file == tmp_path / "applogs" / "endershare.jsonl"
        assert config.log_level == logging.WARNING

    def test_tracer_spans_work_without_setup(self):
        tracer = get_tracer("endershare.test")
        with tracer.start_as_current_span("endershare.test") as span:
            span.set_attribute("endershare.participant", "abc")
