"""Configuration system for devflow hooks."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

CONFIG_DIR_PARTS = (".claude", "hooks", "config")
LOG_DIR_PARTS = (".claude", "logs")
NOTIFY_SCRIPT_PARTS = (".claude", "hooks", "notify.sh")

TEST_PATTERNS_FILE = "test-patterns.json"
ANALYTICS_CONFIG_FILE = "analytics-config.json"
ANALYTICS_STATE_FILE = "session-analytics.json"


class Settings(BaseSettings):
    """Devflow Hooks Configuration."""

    # Locations
    project_dir: Path | None = Field(
        default=None,
        description="Project root (defaults to $CLAUDE_PROJECT_DIR, event cwd, then process cwd)",
    )
    config_dir: Path | None = Field(
        default=None,
        description="Directory holding per-hook JSON config (default: <project>/.claude/hooks/config)",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for hook logs and analytics state (default: <project>/.claude/logs)",
    )
    notify_script: Path | None = Field(
        default=None,
        description="Executable invoked after watch-mode runs (default: <project>/.claude/hooks/notify.sh)",
    )

    # Test execution
    commit_gate_timeout_seconds: float = Field(
        default=600.0,
        gt=0.0,
        description="Upper bound for the blocking pre-commit test run",
    )
    watch_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Upper bound for the background watch-mode test run",
    )
    output_tail_lines: int = Field(
        default=20,
        ge=1,
        description="Lines of test output quoted in a block reason",
    )

    # State
    state_lock_timeout_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds to wait for the analytics file lock",
    )

    # Input
    max_stdin_bytes: int = Field(
        default=524_288,
        ge=1024,
        description="Maximum bytes read from stdin per hook invocation",
    )

    log_level: str = Field(
        default="WARNING",
        description="Console logging level for CLI commands (DEBUG, INFO, WARNING, ERROR)",
    )

    model_config = {
        "env_prefix": "DEVFLOW_HOOKS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def resolve_project_root(self, cwd: str = "") -> Path:
        """Resolve the project root directory.

        Resolution order:
        1. ``project_dir`` setting
        2. ``$CLAUDE_PROJECT_DIR``
        3. *cwd* from the hook event
        4. The process working directory
        """
        if self.project_dir is not None:
            return self.project_dir
        env_dir = os.environ.get("CLAUDE_PROJECT_DIR", "")
        if env_dir:
            return Path(env_dir)
        if cwd and os.path.isabs(cwd):
            return Path(cwd)
        return Path.cwd()

    def resolve_config_dir(self, project_root: Path) -> Path:
        if self.config_dir is not None:
            return self.config_dir
        return project_root.joinpath(*CONFIG_DIR_PARTS)

    def resolve_log_dir(self, project_root: Path) -> Path:
        if self.log_dir is not None:
            return self.log_dir
        return project_root.joinpath(*LOG_DIR_PARTS)

    def resolve_notify_script(self, project_root: Path) -> Path:
        if self.notify_script is not None:
            return self.notify_script
        return project_root.joinpath(*NOTIFY_SCRIPT_PARTS)


# Settings singleton with dependency injection support
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the settings instance (lazy-loaded singleton).

    Returns:
        The Settings instance.

    Example:
        from devflow_hooks.config import get_settings
        settings = get_settings()
        print(settings.commit_gate_timeout_seconds)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override the settings instance (for testing).

    Args:
        new_settings: The new Settings instance to use.
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to None (forces reload on next get_settings call)."""
    global _settings
    _settings = None
