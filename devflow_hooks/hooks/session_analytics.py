"""Session analytics: count tool and command usage.

Registered as a PreToolUse hook for every tool.  Records locally only and
always lets the call through.
"""

from __future__ import annotations

from devflow_hooks.core.analytics import AnalyticsStore
from devflow_hooks.core.errors import StateStoreError
from devflow_hooks.core.logging import log_event
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import Decision, HookSpec, Phase, ToolEvent

LOG_FILE = "session-analytics.log"


def is_enabled(ctx: HookContext) -> bool:
    return ctx.analytics_config.enabled


def handle(event: ToolEvent, ctx: HookContext) -> Decision:
    store = AnalyticsStore(ctx.analytics_path, lock_timeout=ctx.settings.state_lock_timeout_seconds)
    try:
        commands = store.record_event(event.tool_name, event.tool_input, event.session_id)
    except StateStoreError as e:
        log_event(ctx.events, "record_failed", str(e), severity="warning")
        return Decision.proceed()

    log_event(ctx.events, "tool_recorded", event.tool_name)
    for command in commands:
        log_event(ctx.events, "command_recorded", command)
    return Decision.proceed()


SPEC = HookSpec(
    name="session-analytics",
    aliases=("analytics",),
    phase=Phase.PRE,
    tools=None,
    log_file=LOG_FILE,
    handler=handle,
    is_enabled=is_enabled,
)
