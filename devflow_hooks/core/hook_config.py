"""Per-hook JSON configuration documents.

Each hook family reads one small JSON file from the config directory:

    test-patterns.json      {"pre_commit": {"enabled": true}, "watch_mode": {...}}
    analytics-config.json   {"enabled": true}

A missing, unreadable, or invalid document yields the model defaults,
which keep every feature disabled (do nothing, never block).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devflow_hooks.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_MAX_CONFIG_BYTES = 262_144


class _HookConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class PreCommitConfig(_HookConfigModel):
    """Commit gate settings."""

    enabled: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0.0)
    tail_lines: int | None = Field(default=None, ge=1)
    command: list[str] | None = Field(
        default=None,
        description="Explicit test argv, overriding the framework command table",
    )


class WatchModeConfig(_HookConfigModel):
    """Background test watcher settings."""

    enabled: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0.0)
    notify: bool = True


class TestPatternsConfig(_HookConfigModel):
    """``test-patterns.json``."""

    __test__ = False  # not a pytest test class

    pre_commit: PreCommitConfig = Field(default_factory=PreCommitConfig)
    watch_mode: WatchModeConfig = Field(default_factory=WatchModeConfig)


class AnalyticsConfig(_HookConfigModel):
    """``analytics-config.json``."""

    enabled: bool = False


ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_config(path: Path, model: type[ConfigT]) -> ConfigT:
    """Read and validate a config document.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or invalid.
        FileNotFoundError: If the file does not exist.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = f.read(_MAX_CONFIG_BYTES)
    except FileNotFoundError:
        raise
    except OSError as e:
        raise ConfigurationError(path, f"unreadable: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(path, f"not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(path, "top-level value must be an object")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(path, f"{e.error_count()} validation error(s)") from e


def load_config(path: Path, model: type[ConfigT]) -> ConfigT:
    """Load a config document, degrading to defaults on any problem.

    Args:
        path: Location of the JSON document.
        model: Pydantic model describing it.

    Returns:
        The validated config, or ``model()`` when absent or invalid.
    """
    try:
        return parse_config(path, model)
    except FileNotFoundError:
        return model()
    except ConfigurationError as e:
        logger.warning("%s; treating feature as disabled", e)
        return model()
