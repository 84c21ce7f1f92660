"""Commit gate: run the test suite before ``git commit`` and block on failure.

Registered as a PreToolUse hook for the ``Bash`` tool.  This is the only
hook allowed to block: a failing test run returns ``BLOCK`` with the tail
of the test output.  Every other outcome (disabled, no framework, runner
missing, timeout, pass) lets the commit through.
"""

from __future__ import annotations

import re
from pathlib import Path

from devflow_hooks.adapters.test_runner import (
    RUNNER_LABELS,
    build_test_command,
    filter_source_files,
    get_staged_files,
    run_tests,
)
from devflow_hooks.core.errors import TestRunError
from devflow_hooks.core.logging import log_event
from devflow_hooks.core.models import TestStatus
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import Decision, HookSpec, Phase, ToolEvent

LOG_FILE = "test-runner.log"

# Global options that consume the following word; every other option is a
# standalone flag (``--no-pager``, ``-P``, ``--git-dir=.git``).
_GIT_OPTION_WITH_ARG = (
    r"(?:-C|-c|--git-dir|--work-tree|--namespace|--exec-path|--config-env)\s+\S+"
)
_GIT_FLAG = r"--?[A-Za-z][\w-]*(?:=\S+)?"

_GIT_COMMIT_RE = re.compile(
    rf"(?:^|[;&|(\n])\s*git(?:\s+(?:{_GIT_OPTION_WITH_ARG}|{_GIT_FLAG}))*\s+commit(?![\w-])",
    re.MULTILINE,
)


def is_git_commit(command: str) -> bool:
    """Whether the shell *command* runs ``git commit``.

    Matches ``git commit`` at the start of any line as well as one chained
    after ``&&``, ``;`` or ``|``, and tolerates global options
    (``git -C repo commit``).
    """
    return bool(_GIT_COMMIT_RE.search(command))


def applies(event: ToolEvent) -> bool:
    return is_git_commit(event.input_str("command"))


def is_enabled(ctx: HookContext) -> bool:
    return ctx.test_patterns.pre_commit.enabled


def format_block_reason(runner: str, exit_code: int | None, summary: str) -> str:
    return (
        f"Pre-commit tests failed: {runner} failed with exit code {exit_code}. "
        "Please fix the failing tests before committing.\n\n"
        f"Test Output:\n{summary}"
    )


def handle(event: ToolEvent, ctx: HookContext) -> Decision:
    """Run the scoped test suite and decide whether the commit may proceed."""
    log_event(ctx.events, "triggered", "git commit detected, running pre-commit tests")
    pre_commit = ctx.test_patterns.pre_commit

    framework = ctx.detection.test_framework
    if pre_commit.command:
        command = list(pre_commit.command)
        runner = Path(command[0]).name
    elif framework is None:
        log_event(ctx.events, "skipped", "no testing framework detected")
        return Decision.proceed()
    else:
        log_event(ctx.events, "framework_detected", framework)
        staged = filter_source_files(get_staged_files(ctx.project_root))
        try:
            command = build_test_command(framework, staged)
        except TestRunError as e:
            log_event(ctx.events, "error", str(e), severity="error")
            return Decision.proceed()
        runner = RUNNER_LABELS.get(framework, framework)

    timeout = pre_commit.timeout_seconds or ctx.settings.commit_gate_timeout_seconds
    tail_lines = pre_commit.tail_lines or ctx.settings.output_tail_lines

    log_event(ctx.events, "running_tests", " ".join(command))
    outcome = run_tests(command, cwd=ctx.project_root, timeout=timeout, tail_lines=tail_lines)

    if outcome.status is TestStatus.FAILED:
        log_event(ctx.events, "tests_failed", f"exit code: {outcome.exit_code}", severity="warning")
        return Decision.block(format_block_reason(runner, outcome.exit_code, outcome.summary))

    if outcome.status is TestStatus.TIMEOUT:
        log_event(ctx.events, "tests_timeout", outcome.summary, severity="warning")
    elif outcome.status is TestStatus.UNSUPPORTED:
        log_event(ctx.events, "tests_unsupported", outcome.summary, severity="warning")
    else:
        log_event(ctx.events, "tests_passed", "all tests passed")
    return Decision.proceed()


SPEC = HookSpec(
    name="commit-gate",
    aliases=("test-runner",),
    phase=Phase.PRE,
    tools=frozenset({"Bash"}),
    log_file=LOG_FILE,
    handler=handle,
    applies=applies,
    is_enabled=is_enabled,
    disabled_message="pre-commit tests disabled in configuration",
    can_block=True,
)
