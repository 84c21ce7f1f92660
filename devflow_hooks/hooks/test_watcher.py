"""Test watcher: run related tests in the background after a file edit.

Registered as a PostToolUse hook for ``Write`` and ``Edit``.  The hook
itself only decides whether a run is warranted; the run happens in a
detached child process bounded by the watch timeout, and its outcome is
written to the watcher log.  Nothing is ever printed to the host.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from devflow_hooks.adapters.test_runner import (
    SUPPORTED_FRAMEWORKS,
    WATCH_EXTENSIONS,
    WATCH_LOG_FILE,
    find_related_test,
    spawn_watch_run,
)
from devflow_hooks.core.logging import log_event
from devflow_hooks.core.models import TestOutcome, TestStatus
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import HookSpec, Phase, ToolEvent

SKIP_NON_SOURCE = "non-source file"
SKIP_NO_FRAMEWORK = "no framework detected"
SKIP_UNKNOWN_FRAMEWORK = "unsupported framework"
SKIP_NO_RELATED_TEST = "no related tests"

_SKIP_EVENTS: dict[str, str] = {
    SKIP_NON_SOURCE: "skipped",
    SKIP_NO_FRAMEWORK: "skipped",
    SKIP_UNKNOWN_FRAMEWORK: "unknown_framework",
    SKIP_NO_RELATED_TEST: "no_related_tests",
}


def should_trigger_tests(file_path: str) -> bool:
    """Whether edits to *file_path* can affect tests."""
    return PurePosixPath(file_path).suffix in WATCH_EXTENSIONS


def plan_watch_run(
    modified: str, framework: str | None, project_root: Path
) -> str | TestOutcome:
    """Pick the test file to run after *modified* changed.

    Args:
        modified: Edited file, relative to *project_root*.
        framework: Detected test framework, if any.
        project_root: Project root directory.

    Returns:
        The related test file, or a ``SKIPPED`` outcome whose ``summary``
        is one of the ``SKIP_*`` reasons and whose ``output`` names the
        file or framework involved.
    """
    if not should_trigger_tests(modified):
        return TestOutcome(status=TestStatus.SKIPPED, summary=SKIP_NON_SOURCE, output=modified)
    if framework is None:
        return TestOutcome(status=TestStatus.SKIPPED, summary=SKIP_NO_FRAMEWORK)
    if framework not in SUPPORTED_FRAMEWORKS:
        return TestOutcome(
            status=TestStatus.SKIPPED, summary=SKIP_UNKNOWN_FRAMEWORK, output=framework
        )
    test_file = find_related_test(modified, project_root)
    if test_file is None:
        return TestOutcome(
            status=TestStatus.SKIPPED, summary=SKIP_NO_RELATED_TEST, output=modified
        )
    return test_file


def is_enabled(ctx: HookContext) -> bool:
    return ctx.test_patterns.watch_mode.enabled


def handle(event: ToolEvent, ctx: HookContext) -> None:
    raw_path = event.input_str("file_path")
    if not raw_path:
        return None

    modified = ctx.relative_path(raw_path)
    framework = ctx.detection.test_framework if should_trigger_tests(modified) else None
    plan = plan_watch_run(modified, framework, ctx.project_root)
    if isinstance(plan, TestOutcome):
        details = f"{plan.summary}: {plan.output}" if plan.output else plan.summary
        log_event(ctx.events, _SKIP_EVENTS[plan.summary], details)
        return None

    watch_mode = ctx.test_patterns.watch_mode
    timeout = watch_mode.timeout_seconds or ctx.settings.watch_timeout_seconds
    process = spawn_watch_run(
        project_root=ctx.project_root,
        source_file=modified,
        test_file=plan,
        framework=framework or "",
        timeout_seconds=timeout,
        log_dir=ctx.log_dir,
        notify_script=ctx.notify_script if watch_mode.notify else None,
    )
    log_event(ctx.events, "watch_spawned", f"pid: {process.pid}, file: {modified}, test: {plan}")
    return None


SPEC = HookSpec(
    name="test-watcher",
    phase=Phase.POST,
    tools=frozenset({"Write", "Edit"}),
    log_file=WATCH_LOG_FILE,
    handler=handle,
    is_enabled=is_enabled,
    silent=True,
)
