"""Core components for Devflow Hooks."""

from devflow_hooks.core.errors import (
    ConfigurationError,
    DevflowHooksError,
    FileLockError,
    StateStoreError,
    TestRunError,
)
from devflow_hooks.core.models import DetectionResult, TestOutcome, TestStatus

__all__ = [
    # Errors
    "ConfigurationError",
    "DevflowHooksError",
    "FileLockError",
    "StateStoreError",
    "TestRunError",
    # Models
    "DetectionResult",
    "TestOutcome",
    "TestStatus",
]
