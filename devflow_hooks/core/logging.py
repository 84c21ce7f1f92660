"""Structured logging for devflow hooks.

Two channels:

- Diagnostics: module loggers (``logging.getLogger(__name__)``) configured
  by :func:`configure_logging` for CLI commands.
- Event logs: one newline-delimited JSON file per hook family, written
  through :func:`get_event_logger` / :func:`log_event`.  Event logs are a
  side channel only; nothing in the decision path reads them back.

Features:
    - Sensitive data masking (API keys, passwords, tokens)
    - JSON lines ``{"timestamp", "severity", "event", "details"}``
    - Handler failures (unwritable directory, full disk) never propagate
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path

from devflow_hooks.core.utils import utc_timestamp

# Patterns to mask in logs
SENSITIVE_PATTERNS = [
    (re.compile(r'api[_-]?key["\']?\s*[:=]\s*["\']?[\w-]+', re.I), "api_key=***MASKED***"),
    (re.compile(r"sk-[a-zA-Z0-9]{20,}"), "***OPENAI_KEY***"),
    (re.compile(r'password["\']?\s*[:=]\s*["\']?[^\s"\']+', re.I), "password=***MASKED***"),
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{30,}"), "***GITHUB_TOKEN***"),
]

EVENT_LOGGER_PREFIX = "devflow_hooks.events"


def mask_sensitive(text: str) -> str:
    """Replace secrets matched by ``SENSITIVE_PATTERNS``."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SecureFormatter(logging.Formatter):
    """Formatter that masks sensitive data."""

    def format(self, record: logging.LogRecord) -> str:
        return mask_sensitive(super().format(record))


class EventJSONFormatter(logging.Formatter):
    """JSON-lines formatter for hook event logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as one JSON object with sensitive data masked.

        The event type comes from ``extra={"event": ...}``; records logged
        without one fall back to the logger's short name.
        """
        log_data: dict[str, str] = {
            "timestamp": utc_timestamp(),
            "severity": record.levelname.lower(),
            "event": str(getattr(record, "event", record.name.rsplit(".", 1)[-1])),
            "details": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return mask_sensitive(json.dumps(log_data, ensure_ascii=False))


class SafeFileHandler(logging.FileHandler):
    """Append-only file handler that never raises or writes to stderr."""

    def __init__(self, filename: Path) -> None:
        super().__init__(str(filename), mode="a", encoding="utf-8", delay=True)

    def handleError(self, record: logging.LogRecord) -> None:
        # Event logs are best-effort; a failed write must not reach the host.
        pass


def get_event_logger(log_file: str, log_dir: Path) -> logging.Logger:
    """Return the event logger writing NDJSON lines to ``log_dir/log_file``.

    The logger does not propagate to the root logger, so console
    diagnostics never leak onto the hook's stdout/stderr.  If the
    directory cannot be created the logger is silenced instead.

    Args:
        log_file: File name, e.g. ``"test-runner.log"``.
        log_dir: Directory holding hook logs.
    """
    name = f"{EVENT_LOGGER_PREFIX}.{Path(log_file).stem}"
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    target = os.path.abspath(log_dir / log_file)
    for existing in logger.handlers[:]:
        if isinstance(existing, logging.FileHandler) and existing.baseFilename == target:
            return logger
        logger.removeHandler(existing)
        existing.close()

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = SafeFileHandler(log_dir / log_file)
        handler.setFormatter(EventJSONFormatter())
    except OSError:
        handler = logging.NullHandler()
    logger.addHandler(handler)
    return logger


def log_event(
    logger: logging.Logger,
    event_type: str,
    details: str = "",
    severity: str = "info",
) -> None:
    """Append one event record.

    Args:
        logger: Event logger from :func:`get_event_logger`.
        event_type: Short machine-readable tag (``"tests_failed"``).
        details: Free-form detail text.
        severity: ``debug``, ``info``, ``warning`` or ``error``.
    """
    level = logging.getLevelName(severity.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.log(level, "%s", details, extra={"event": event_type})


def read_event_log(path: Path) -> list[dict[str, str]]:
    """Parse an NDJSON event log, skipping malformed lines."""
    records: list[dict[str, str]] = []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return records
    for line in lines:
        if not line.strip():
            continue
        try:
            parsed = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            records.append(parsed)
    return records


def configure_logging(level: str = "INFO", mask_sensitive_data: bool = True) -> None:
    """Configure console logging for CLI commands.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        mask_sensitive_data: Mask sensitive data in logs.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter: logging.Formatter
    if mask_sensitive_data:
        formatter = SecureFormatter(fmt=fmt, datefmt=datefmt)
    else:
        formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
