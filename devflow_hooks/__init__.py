"""Devflow Hooks - lifecycle hooks for an AI coding assistant."""

__version__ = "0.1.0"

import logging

from devflow_hooks.config import Settings, get_settings
from devflow_hooks.core import (
    ConfigurationError,
    DetectionResult,
    DevflowHooksError,
    FileLockError,
    StateStoreError,
    TestOutcome,
    TestRunError,
    TestStatus,
)

# Hook processes never configure logging; keep diagnostics off their stderr.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "ConfigurationError",
    "DetectionResult",
    "DevflowHooksError",
    "FileLockError",
    "StateStoreError",
    "TestOutcome",
    "TestRunError",
    "TestStatus",
]
