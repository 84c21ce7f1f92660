"""Unified dispatcher for all hook invocations.

Routes one stdin event to the named hook, applies the phase, tool and
configuration filters, runs the hook body, and turns its decision into
stdout and an exit code.

CLI usage::

    echo '{"tool_name":"Bash","tool_input":{"command":"git commit"}}' \\
        | python -m devflow_hooks hook commit-gate

All exceptions are caught (fail-open): a failing hook lets the tool call
through.  Only a ``BLOCK`` decision from a hook registered with
``can_block`` exits non-zero.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO, Any

from devflow_hooks.config import Settings, get_settings
from devflow_hooks.core.logging import log_event
from devflow_hooks.hooks import (
    ci_integration,
    commit_gate,
    context_injector,
    context_validator,
    session_analytics,
    test_watcher,
)
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.hook_helpers import log_hook_error, read_payload, write_json
from devflow_hooks.hooks.models import Decision, DecisionKind, HookSpec, ToolEvent

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCK = 2

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

HOOK_SPECS: tuple[HookSpec, ...] = (
    commit_gate.SPEC,
    context_injector.SPEC,
    test_watcher.SPEC,
    session_analytics.SPEC,
    ci_integration.SPEC,
    context_validator.SPEC,
)

_HOOK_MAP: dict[str, HookSpec] = {}
for _spec in HOOK_SPECS:
    _HOOK_MAP[_spec.name] = _spec
    for _alias in _spec.aliases:
        _HOOK_MAP[_alias] = _spec


def get_spec(name: str) -> HookSpec | None:
    """Look up a hook by canonical name or alias."""
    return _HOOK_MAP.get(name)


# ---------------------------------------------------------------------------
# Dispatch (testable surface)
# ---------------------------------------------------------------------------


def run_hook(
    spec: HookSpec,
    data: dict[str, Any],
    settings: Settings | None = None,
) -> Decision:
    """Run *spec* against one parsed stdin payload.

    Args:
        spec: Hook to run.
        data: Parsed stdin JSON (may be empty).
        settings: Settings to use; defaults to the process-wide instance.

    Returns:
        The decision to emit.  Skips at any filter stage are ``CONTINUE``.
    """
    event = ToolEvent.from_payload(data, default_phase=spec.phase)
    if event.phase is not spec.phase:
        return Decision.proceed()
    if not spec.matches_tool(event.tool_name):
        return Decision.proceed()
    if spec.applies is not None and not spec.applies(event):
        return Decision.proceed()

    ctx = HookContext.create(settings or get_settings(), spec.log_file, cwd=event.cwd)
    if spec.is_enabled is not None and not spec.is_enabled(ctx):
        if spec.disabled_message:
            log_event(ctx.events, "skipped", spec.disabled_message)
        return Decision.proceed()

    decision = spec.handler(event, ctx)
    if decision is None:
        return Decision.proceed()
    if decision.is_block and not spec.can_block:
        log_event(
            ctx.events,
            "block_suppressed",
            f"{spec.name} may not block; continuing",
            severity="warning",
        )
        return Decision.proceed()
    return decision


def emit(decision: Decision, spec: HookSpec) -> tuple[dict[str, Any] | None, int]:
    """Translate *decision* into a stdout document and exit code.

    Returns:
        ``(payload, exit_code)``; ``payload`` is ``None`` when nothing
        should be printed.
    """
    if decision.kind is DecisionKind.BLOCK:
        return {"decision": "block", "reason": decision.reason}, EXIT_BLOCK
    if decision.kind is DecisionKind.MUTATE and decision.event is not None:
        return decision.event.to_payload(), EXIT_OK
    if spec.silent:
        return None, EXIT_OK
    return {"continue": True}, EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _error_log_dir(settings: Settings | None, data: dict[str, Any]) -> Path | None:
    try:
        settings = settings or get_settings()
        cwd = data.get("cwd", "")
        root = settings.resolve_project_root(cwd if isinstance(cwd, str) else "")
        return settings.resolve_log_dir(root)
    except Exception:
        return None


def main(
    name: str,
    stdin: IO[bytes] | None = None,
    stdout: IO[str] | None = None,
    settings: Settings | None = None,
) -> int:
    """Run the hook called *name* and return the process exit code.

    Reads one JSON event from *stdin*, writes the response to *stdout*.
    Unknown hook names print nothing and exit 0.  Any exception is written
    to the hook error log and the call is let through.
    """
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    spec = get_spec(name)
    if spec is None:
        logger.warning("Unknown hook: %s", name)
        return EXIT_OK

    data: dict[str, Any] = {}
    try:
        max_bytes = (settings or get_settings()).max_stdin_bytes
        data = read_payload(stdin, max_bytes)
        decision = run_hook(spec, data, settings)
    except Exception as exc:
        log_hook_error(exc, f"dispatcher:{spec.name}", _error_log_dir(settings, data))
        decision = Decision.proceed()

    payload, code = emit(decision, spec)
    if payload is not None:
        try:
            write_json(stdout, payload)
        except (OSError, ValueError) as exc:
            log_hook_error(exc, f"dispatcher:{spec.name}", _error_log_dir(settings, data))
    return code
