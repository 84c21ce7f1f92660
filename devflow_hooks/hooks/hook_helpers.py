"""Shared stdin/stdout and error-log helpers for hook entrypoints."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import IO, Any

_MAX_LOG_SIZE = 1_048_576  # 1MB
ERROR_LOG_FILE = "hook-errors.log"

# ---------------------------------------------------------------------------
# stdin / stdout
# ---------------------------------------------------------------------------


def read_payload(stream: IO[bytes], max_bytes: int) -> dict[str, Any]:
    """Read and parse one JSON object from *stream*.

    Returns:
        Parsed dict, or empty dict on empty, oversized, malformed, or
        non-object input.
    """
    try:
        raw = stream.read(max_bytes + 1)
    except (OSError, ValueError):
        return {}
    if not raw or not raw.strip() or len(raw) > max_bytes:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def write_json(stream: IO[str], payload: dict[str, Any]) -> None:
    """Write *payload* as one JSON line and flush."""
    json.dump(payload, stream, ensure_ascii=False)
    stream.write("\n")
    stream.flush()


# ---------------------------------------------------------------------------
# Error logging
# ---------------------------------------------------------------------------


def log_hook_error(exc: BaseException, hook_name: str, log_dir: Path | None) -> None:
    """Append an error entry to ``hook-errors.log``.

    Rotates the log file when it exceeds 1MB.  This function must never
    raise: all exceptions are swallowed.

    Args:
        exc: The exception to log.
        hook_name: Name of the hook that failed.
        log_dir: Directory holding hook logs; ``None`` skips logging.
    """
    try:
        if log_dir is None:
            return
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, ERROR_LOG_FILE)

        try:
            if os.path.exists(log_path) and os.path.getsize(log_path) > _MAX_LOG_SIZE:
                rotated = log_path + ".1"
                if os.path.exists(rotated):
                    os.remove(rotated)
                os.rename(log_path, rotated)
        except OSError:
            pass

        timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        line = f"[{timestamp}] {hook_name}: {type(exc).__name__}: {exc}\n"
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(line)
    except Exception:
        pass  # Logger must never raise
