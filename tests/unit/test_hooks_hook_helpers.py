"""Unit tests for devflow_hooks.hooks.hook_helpers.

Tests cover:
1. read_payload - valid JSON, empty, non-dict, malformed, size limit
2. write_json - one line, non-ASCII kept
3. log_hook_error - append, rotation, never raises
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from devflow_hooks.hooks.hook_helpers import (
    ERROR_LOG_FILE,
    log_hook_error,
    read_payload,
    write_json,
)

# =============================================================================
# read_payload
# =============================================================================


@pytest.mark.unit
class TestReadPayload:
    def test_valid_object(self) -> None:
        stream = io.BytesIO(b'{"tool_name": "Bash"}')
        assert read_payload(stream, 1024) == {"tool_name": "Bash"}

    def test_empty(self) -> None:
        assert read_payload(io.BytesIO(b""), 1024) == {}

    def test_whitespace(self) -> None:
        assert read_payload(io.BytesIO(b"  \n"), 1024) == {}

    def test_non_dict(self) -> None:
        assert read_payload(io.BytesIO(b'["a"]'), 1024) == {}

    def test_malformed(self) -> None:
        assert read_payload(io.BytesIO(b"{oops"), 1024) == {}

    def test_invalid_utf8(self) -> None:
        assert read_payload(io.BytesIO(b'{"a": "\xff\xfe"}'), 1024) == {}

    def test_over_limit(self) -> None:
        raw = json.dumps({"pad": "x" * 100}).encode()
        assert read_payload(io.BytesIO(raw), 50) == {}

    def test_at_limit(self) -> None:
        raw = json.dumps({"pad": "x" * 10}).encode()
        assert read_payload(io.BytesIO(raw), len(raw)) == {"pad": "x" * 10}


# =============================================================================
# write_json
# =============================================================================


@pytest.mark.unit
class TestWriteJson:
    def test_single_line(self) -> None:
        out = io.StringIO()
        write_json(out, {"continue": True})
        assert out.getvalue() == '{"continue": true}\n'

    def test_non_ascii_kept(self) -> None:
        out = io.StringIO()
        write_json(out, {"reason": "échec ✗"})
        assert "échec ✗" in out.getvalue()


# =============================================================================
# log_hook_error
# =============================================================================


@pytest.mark.unit
class TestLogHookError:
    def test_appends_entry(self, tmp_path: Path) -> None:
        log_hook_error(ValueError("bad input"), "commit-gate", tmp_path)
        log_hook_error(KeyError("x"), "commit-gate", tmp_path)
        lines = (tmp_path / ERROR_LOG_FILE).read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("commit-gate: ValueError: bad input")

    def test_creates_directory(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "a" / "b"
        log_hook_error(RuntimeError("x"), "h", log_dir)
        assert (log_dir / ERROR_LOG_FILE).exists()

    def test_rotation(self, tmp_path: Path) -> None:
        log_path = tmp_path / ERROR_LOG_FILE
        log_path.write_text("x" * 1_048_577)
        log_hook_error(RuntimeError("fresh"), "h", tmp_path)
        assert (tmp_path / (ERROR_LOG_FILE + ".1")).stat().st_size == 1_048_577
        assert "fresh" in log_path.read_text()

    def test_none_log_dir(self) -> None:
        log_hook_error(RuntimeError("x"), "h", None)

    def test_never_raises_on_unwritable_dir(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        log_hook_error(RuntimeError("x"), "h", blocker / "logs")
