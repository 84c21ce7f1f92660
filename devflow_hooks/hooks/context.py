"""Per-invocation context shared by hook handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from devflow_hooks.config import (
    ANALYTICS_CONFIG_FILE,
    ANALYTICS_STATE_FILE,
    TEST_PATTERNS_FILE,
    Settings,
)
from devflow_hooks.core.detection import detect
from devflow_hooks.core.hook_config import AnalyticsConfig, TestPatternsConfig, load_config
from devflow_hooks.core.logging import get_event_logger
from devflow_hooks.core.models import DetectionResult


@dataclass
class HookContext:
    """Everything a hook needs besides the event itself.

    Config documents and the detection result are computed lazily and at
    most once per invocation.
    """

    settings: Settings
    project_root: Path
    config_dir: Path
    log_dir: Path
    events: logging.Logger

    @classmethod
    def create(cls, settings: Settings, log_file: str, cwd: str = "") -> HookContext:
        project_root = settings.resolve_project_root(cwd)
        log_dir = settings.resolve_log_dir(project_root)
        return cls(
            settings=settings,
            project_root=project_root,
            config_dir=settings.resolve_config_dir(project_root),
            log_dir=log_dir,
            events=get_event_logger(log_file, log_dir),
        )

    @cached_property
    def test_patterns(self) -> TestPatternsConfig:
        return load_config(self.config_dir / TEST_PATTERNS_FILE, TestPatternsConfig)

    @cached_property
    def analytics_config(self) -> AnalyticsConfig:
        return load_config(self.config_dir / ANALYTICS_CONFIG_FILE, AnalyticsConfig)

    @cached_property
    def detection(self) -> DetectionResult:
        return detect(self.project_root)

    @property
    def analytics_path(self) -> Path:
        return self.log_dir / ANALYTICS_STATE_FILE

    @property
    def notify_script(self) -> Path:
        return self.settings.resolve_notify_script(self.project_root)

    def relative_path(self, file_path: str) -> str:
        """Express *file_path* relative to the project root when inside it."""
        path = Path(file_path)
        if not path.is_absolute():
            return path.as_posix()
        for candidate, root in (
            (path, self.project_root),
            (path.resolve(), self.project_root.resolve()),
        ):
            try:
                return candidate.relative_to(root).as_posix()
            except ValueError:
                continue
        return path.as_posix()

    def absolute_path(self, file_path: str) -> Path:
        path = Path(file_path)
        return path if path.is_absolute() else self.project_root / path
