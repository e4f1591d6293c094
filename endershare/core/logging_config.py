"""Structured logging and tracing for the sharing service.

Log records are written as JSON lines to ``<log dir>/endershare.jsonl``.
Records emitted inside a sharing command span carry its trace and span
ids, so every line written while handling one ``/endershare`` call can be
grouped together. Anything passed through ``extra=`` ends up under the
``extra`` key.

The log directory is ``APP_LOG_DIR`` when set, otherwise ``logs/`` next to
the package.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider

from endershare.version import VERSION

if TYPE_CHECKING:
    from endershare.modules.config.config_manager import AppSettings

LOG_FILE_NAME = "endershare.jsonl"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def _span_ids() -> Dict[str, str]:
    span = trace.get_current_span()
    if not span.is_recording():
        return {}
    context = span.get_span_context()
    if not context.is_valid:
        return {}
    return {"trace_id": f"{context.trace_id:032x}", "span_id": f"{context.span_id:016x}"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_span_ids())
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, default=str)


class LoggingConfig:
    """Install the JSON file handler and the tracer provider.

    Replaces any handlers already on the root logger. In debug mode a plain
    console handler is added as well.
    """

    def __init__(
        self,
        logs_dir: Optional[Path] = None,
        log_level: str = "INFO",
        debug_mode: bool = False,
        service_name: str = "endershare",
    ) -> None:
        self.debug_mode = debug_mode
        self.log_level = self._parse_level(log_level)
        self.logs_dir = Path(logs_dir) if logs_dir is not None else Path(__file__).resolve().parents[2] / "logs"
        self.log_file = self.logs_dir / LOG_FILE_NAME
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        trace.set_tracer_provider(
            TracerProvider(
                resource=Resource.create(
                    {
                        SERVICE_NAME: service_name,
                        SERVICE_VERSION: VERSION,
                        "environment": "development" if debug_mode else "production",
                    }
                )
            )
        )
        self._install_handlers()

    @classmethod
    def from_settings(cls, settings: "AppSettings", log_level: Optional[str] = None) -> "LoggingConfig":
        """Build from application settings; ``log_level`` overrides the configured level."""
        return cls(
            logs_dir=Path(settings.log_dir) if settings.log_dir else None,
            log_level=log_level or settings.log_level,
            debug_mode=settings.debug_mode,
        )

    @staticmethod
    def _parse_level(name: str) -> int:
        level = logging.getLevelName(name.upper())
        return level if isinstance(level, int) else logging.INFO

    def _install_handlers(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(self.log_level)
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG if self.debug_mode else self.log_level)

        if self.debug_mode:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            console.setLevel(logging.DEBUG)
            root.addHandler(console)


def get_tracer(name: str) -> trace.Tracer:
    """Tracer for the given module; a no-op tracer until LoggingConfig runs."""
    return trace.get_tracer(name, VERSION)
