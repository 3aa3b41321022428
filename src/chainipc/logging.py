"""Centralized logging configuration for chainipc.

All entry points should call configure_logging() early.

Logging Levels:
- DEBUG: Per-request details, connection open/close
- INFO: Server start/stop, idle connections being closed
- WARNING: Malformed frames, connection faults
- ERROR: Handler crashes, encode failures
"""

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

LEVEL_ENV_VAR = "CHAINIPC_LOG_LEVEL"
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Attributes every LogRecord has; anything else came in through extra={...}
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "component"}


def _component(name: str) -> str:
    """chainipc.rpc.server -> rpc"""
    parts = name.split(".")
    if len(parts) >= 2 and parts[0] == "chainipc":
        return parts[1]
    return parts[0]


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed to a logging call through ``extra``."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JSONLHandler(logging.Handler):
    """Handler that writes structured log entries to daily JSONL files.

    Logs are written to <logs_dir>/YYYY-MM-DD.jsonl with one JSON object per
    line, so they can be inspected with cat, grep or jq.
    """

    def __init__(self, logs_dir: Path):
        super().__init__()
        self._logs_dir = logs_dir
        self._logs_dir.mkdir(parents=True, exist_ok=True)
        self._current_date: str | None = None
        self._file: TextIO | None = None

    def _get_log_file(self) -> TextIO:
        """Get the current log file, rotating daily."""
        today = datetime.now(UTC).strftime("%Y-%m-%d")
        if self._current_date != today or self._file is None:
            if self._file:
                self._file.close()
            self._current_date = today
            self._file = (self._logs_dir / f"{today}.jsonl").open(
                "a", encoding="utf-8"
            )
        return self._file

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, Any] = {
                "ts": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "component": _component(record.name),
                "logger": record.name,
                "message": record.getMessage(),
            }

            if record.exc_info:
                formatter = self.formatter or logging.Formatter()
                entry["exception"] = formatter.formatException(record.exc_info)

            if extra := record_extra(record):
                entry["extra"] = extra

            log_file = self._get_log_file()
            log_file.write(json.dumps(entry, default=str) + "\n")
            log_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None
        super().close()


class ComponentFormatter(logging.Formatter):
    """Formatter that adds a short component name and any extra fields.

    chainipc.rpc.session -> rpc
    """

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        message = super().format(record)
        if extra := record_extra(record):
            fields = " ".join(f"{k}={v}" for k, v in extra.items())
            message = f"{message} [{fields}]"
        return message


def resolve_level(level: str | None = None) -> str:
    """Resolve a level name from the argument or CHAINIPC_LOG_LEVEL."""
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "INFO"
    return level


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
) -> None:
    """Configure logging for chainipc.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses CHAINIPC_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
        log_to_file: Also write logs to JSONL files in the logs directory.
    """
    from chainipc.config.paths import get_logs_path

    log_level = getattr(logging, resolve_level(level))

    handlers: list[logging.Handler] = []

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handlers.append(console_handler)

    if log_to_file:
        file_handler = JSONLHandler(get_logs_path())
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )
