"""Pytest fixtures for Devflow Hooks tests."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from devflow_hooks.config import (
    CONFIG_DIR_PARTS,
    LOG_DIR_PARTS,
    Settings,
    override_settings,
    reset_settings,
)
from devflow_hooks.core.logging import read_event_log
from devflow_hooks.hooks.context import HookContext

# ---------------------------------------------------------------------------
# Basic fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide an empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def log_dir(project_dir: Path) -> Path:
    return project_dir.joinpath(*LOG_DIR_PARTS)


@pytest.fixture
def hook_settings(project_dir: Path) -> Generator[Settings, None, None]:
    """Provide settings rooted at the temp project."""
    settings = Settings(
        project_dir=project_dir,
        state_lock_timeout_seconds=2.0,
        log_level="DEBUG",
    )
    override_settings(settings)
    yield settings
    reset_settings()


@pytest.fixture
def write_config(project_dir: Path) -> Callable[[str, Any], Path]:
    """Write a JSON document into the hook config directory."""

    def _write(name: str, data: Any) -> Path:
        config_dir = project_dir.joinpath(*CONFIG_DIR_PARTS)
        config_dir.mkdir(parents=True, exist_ok=True)
        path = config_dir / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_context(hook_settings: Settings) -> Callable[[str], HookContext]:
    """Build a HookContext for the temp project."""

    def _make(log_file: str = "test.log") -> HookContext:
        return HookContext.create(hook_settings, log_file)

    return _make


@pytest.fixture
def read_log(log_dir: Path) -> Callable[[str], list[dict[str, str]]]:
    """Read an event log from the temp project's log directory."""

    def _read(name: str) -> list[dict[str, str]]:
        return read_event_log(log_dir / name)

    return _read


@pytest.fixture
def invoke_hook(hook_settings: Settings) -> Callable[..., tuple[str, int]]:
    """Run a hook through the dispatcher entrypoint with in-memory stdio.

    Returns ``(stdout_text, exit_code)``.
    """
    from devflow_hooks.hooks.dispatcher import main

    def _invoke(name: str, payload: Any) -> tuple[str, int]:
        raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        stdout = io.StringIO()
        code = main(name, stdin=io.BytesIO(raw), stdout=stdout, settings=hook_settings)
        return stdout.getvalue(), code

    return _invoke
