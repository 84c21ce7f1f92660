"""Single-document JSON state persisted with atomic replace.

Every update is a read-modify-replace cycle:

    1. acquire ``<file>.lock`` (cross-process, via ``filelock``)
    2. load the document, or build the initial one
    3. apply the mutator in memory
    4. write a temp file in the same directory, fsync, ``os.replace()``

Readers never take the lock: ``os.replace`` guarantees they see either the
old or the new document, never a partial one.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from filelock import FileLock
from filelock import Timeout as FileLockTimeout

from devflow_hooks.core.errors import FileLockError, StateStoreError

logger = logging.getLogger(__name__)

StateDict = dict[str, Any]


def atomic_write_json(path: Path, data: StateDict) -> None:
    """Write *data* to *path* atomically (temp file, fsync, rename).

    Raises:
        StateStoreError: If the document cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise StateStoreError(f"Could not write state file {path.name}: {e}") from e


class JsonStateStore:
    """Lock-serialized JSON document on disk.

    Example:
        store = JsonStateStore(Path("state.json"), initial=lambda: {"count": 0})
        store.update(lambda doc: doc.update(count=doc["count"] + 1))
    """

    def __init__(
        self,
        path: Path,
        initial: Callable[[], StateDict],
        lock_timeout: float = 5.0,
    ) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON document.
            initial: Factory for the document created on first update.
            lock_timeout: Seconds to wait for the cross-process lock.
        """
        self.path = path
        self.lock_path = path.with_name(path.name + ".lock")
        self.lock_timeout = lock_timeout
        self._initial = initial

    def load(self) -> StateDict | None:
        """Read the current document without locking.

        Returns:
            The parsed document, or ``None`` if missing or corrupt.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read state file %s: %s", self.path.name, e)
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt state file %s: %s", self.path.name, e.msg)
            return None
        return data if isinstance(data, dict) else None

    def update(self, mutator: Callable[[StateDict], None]) -> StateDict:
        """Apply *mutator* to the document under the lock and persist it.

        A missing or corrupt document is replaced by ``initial()`` before
        the mutator runs.

        Returns:
            The document as written.

        Raises:
            FileLockError: If the lock is not acquired within ``lock_timeout``.
            StateStoreError: If the document cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_path), timeout=self.lock_timeout)
        try:
            with lock:
                data = self.load()
                if data is None:
                    data = self._initial()
                mutator(data)
                atomic_write_json(self.path, data)
                return data
        except FileLockTimeout as e:
            raise FileLockError(
                lock_path=str(self.lock_path),
                timeout=self.lock_timeout,
            ) from e
