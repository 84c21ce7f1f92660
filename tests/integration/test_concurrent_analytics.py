"""Integration tests for cross-process analytics updates.

Several processes increment the same analytics document at once; the
file lock must serialize them so no increment is lost and the document
stays valid JSON.
"""

from __future__ import annotations

import json
import multiprocessing
from pathlib import Path
from typing import Any

import pytest

# Spawn gives each worker a fresh interpreter, like separate hook processes
_mp_context = multiprocessing.get_context("spawn")

NUM_WORKERS = 4
RECORDS_PER_WORKER = 25


def _record_worker(
    state_path: str,
    worker_id: int,
    num_records: int,
    results_queue: "multiprocessing.Queue[dict[str, Any]]",
) -> None:
    """Record *num_records* tool uses from a separate process."""
    try:
        from devflow_hooks.core.analytics import AnalyticsStore, RecordKind

        store = AnalyticsStore(Path(state_path), lock_timeout=30.0)
        for _ in range(num_records):
            store.record(RecordKind.TOOL, "Bash", session_id="shared")
            store.record(RecordKind.TOOL, f"worker_{worker_id}", session_id="shared")
        results_queue.put({"worker_id": worker_id, "success": True, "error": None})
    except Exception as e:
        results_queue.put({"worker_id": worker_id, "success": False, "error": repr(e)})


@pytest.mark.integration
class TestConcurrentAnalytics:
    def test_no_lost_increments(self, tmp_path: Path) -> None:
        state_path = tmp_path / "logs" / "session-analytics.json"
        results_queue = _mp_context.Queue()
        workers = [
            _mp_context.Process(
                target=_record_worker,
                args=(str(state_path), worker_id, RECORDS_PER_WORKER, results_queue),
            )
            for worker_id in range(NUM_WORKERS)
        ]
        for worker in workers:
            worker.start()
        results = [results_queue.get(timeout=120) for _ in workers]
        for worker in workers:
            worker.join(timeout=30)

        failures = [r for r in results if not r["success"]]
        assert failures == []

        state = json.loads(state_path.read_text())
        tool_usage = state["aggregate"]["tool_usage"]
        assert tool_usage["Bash"] == NUM_WORKERS * RECORDS_PER_WORKER
        for worker_id in range(NUM_WORKERS):
            assert tool_usage[f"worker_{worker_id}"] == RECORDS_PER_WORKER
        assert state["total_sessions"] == 1
        assert sum(state["current_session"]["tools_used"].values()) == (
            2 * NUM_WORKERS * RECORDS_PER_WORKER
        )
        assert not list(state_path.parent.glob("*.tmp"))
