"""Custom exceptions for devflow hooks."""

from pathlib import Path


def sanitize_path_for_error(path: str | Path) -> str:
    """Extract only the filename from a path for safe error messages.

    Args:
        path: Full path or filename.

    Returns:
        Just the filename portion.
    """
    if isinstance(path, Path):
        return path.name
    return Path(path).name


class DevflowHooksError(Exception):
    """Base exception for all devflow hook errors."""

    pass


class ConfigurationError(DevflowHooksError):
    """Raised when a hook configuration document is invalid."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid hook config {sanitize_path_for_error(path)}: {reason}")


class StateStoreError(DevflowHooksError):
    """Raised when the persisted state document cannot be read or replaced."""

    pass


class FileLockError(StateStoreError):
    """Raised when the cross-process state lock cannot be acquired."""

    def __init__(
        self,
        lock_path: str,
        timeout: float,
        message: str | None = None,
    ) -> None:
        self.lock_path = lock_path
        self.timeout = timeout
        safe_name = sanitize_path_for_error(lock_path)
        self.message = message or f"Failed to acquire file lock at {safe_name} after {timeout}s"
        super().__init__(self.message)


class TestRunError(DevflowHooksError):
    """Raised when a test command cannot be built or started."""

    __test__ = False  # not a pytest test class

    def __init__(self, framework: str, reason: str) -> None:
        self.framework = framework
        self.reason = reason
        super().__init__(f"Cannot run {framework or 'unknown'} tests: {reason}")
