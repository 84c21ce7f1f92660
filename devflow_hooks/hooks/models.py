"""Domain types for hook invocations.

Provides the immutable tool event, the decision variants a hook may
return, and the registration record the dispatcher routes on.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from devflow_hooks.hooks.context import HookContext

# ---------------------------------------------------------------------------
# Phase
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    """Whether a hook runs before or after the host executes the tool."""

    PRE = "PreToolUse"
    POST = "PostToolUse"


_PHASE_ALIASES: dict[str, Phase] = {
    # PascalCase (host canonical)
    "PreToolUse": Phase.PRE,
    "PostToolUse": Phase.POST,
    # camelCase
    "preToolUse": Phase.PRE,
    "postToolUse": Phase.POST,
    # kebab-case (CLI)
    "pre-tool-use": Phase.PRE,
    "post-tool-use": Phase.POST,
}


def parse_phase(raw: object) -> Phase | None:
    """Normalize a phase name; ``None`` if absent or unrecognized."""
    if not isinstance(raw, str):
        return None
    return _PHASE_ALIASES.get(raw)


# ---------------------------------------------------------------------------
# Tool event
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolEvent:
    """One attempted tool call, as received on stdin.

    Frozen dataclass: a hook that needs a different payload builds a
    derived event with :meth:`with_tool_input`.  ``extra`` keeps every
    other payload key so the derived event serializes losslessly.
    """

    phase: Phase
    tool_name: str = ""
    tool_input: Mapping[str, Any] = field(default_factory=dict)
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], default_phase: Phase) -> ToolEvent:
        """Build an event from parsed stdin JSON.

        Non-string tool names and non-object tool inputs are treated as
        empty.  The phase comes from ``hook_event_name`` when present.
        """
        tool_name = data.get("tool_name", "")
        tool_input = data.get("tool_input", {})
        extra = {k: v for k, v in data.items() if k not in ("tool_name", "tool_input")}
        return cls(
            phase=parse_phase(data.get("hook_event_name")) or default_phase,
            tool_name=tool_name if isinstance(tool_name, str) else "",
            tool_input=dict(tool_input) if isinstance(tool_input, dict) else {},
            extra=extra,
        )

    @property
    def session_id(self) -> str:
        value = self.extra.get("session_id", "")
        return value if isinstance(value, str) else ""

    @property
    def cwd(self) -> str:
        value = self.extra.get("cwd", "")
        return value if isinstance(value, str) else ""

    def input_str(self, key: str) -> str:
        """String value of ``tool_input[key]``, or ``""``."""
        value = self.tool_input.get(key, "")
        return value if isinstance(value, str) else ""

    def with_tool_input(self, **changes: Any) -> ToolEvent:
        """Derived event with *changes* applied on top of ``tool_input``."""
        return ToolEvent(
            phase=self.phase,
            tool_name=self.tool_name,
            tool_input={**self.tool_input, **changes},
            extra=self.extra,
        )

    def to_payload(self) -> dict[str, Any]:
        return {**self.extra, "tool_name": self.tool_name, "tool_input": dict(self.tool_input)}


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


class DecisionKind(str, Enum):
    CONTINUE = "continue"
    MUTATE = "mutate"
    BLOCK = "block"


@dataclass(frozen=True)
class Decision:
    """Outcome of one hook invocation.

    ``CONTINUE`` lets the call through unchanged, ``MUTATE`` lets it
    through with the derived ``event``, ``BLOCK`` denies it with ``reason``.
    """

    kind: DecisionKind
    event: ToolEvent | None = None
    reason: str = ""

    @classmethod
    def proceed(cls) -> Decision:
        return cls(DecisionKind.CONTINUE)

    @classmethod
    def mutate(cls, event: ToolEvent) -> Decision:
        return cls(DecisionKind.MUTATE, event=event)

    @classmethod
    def block(cls, reason: str) -> Decision:
        return cls(DecisionKind.BLOCK, reason=reason)

    @property
    def is_block(self) -> bool:
        return self.kind is DecisionKind.BLOCK


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

HookHandler = Callable[[ToolEvent, "HookContext"], "Decision | None"]
"""Hook body.  ``None`` means no decision (observational hooks)."""


@dataclass(frozen=True)
class HookSpec:
    """Registration record for one hook.

    Attributes:
        name: Canonical CLI name (``commit-gate``).
        phase: Phase the hook is registered for.
        tools: Tool names the hook handles; ``None`` matches every tool.
        log_file: Event log file name inside the log directory.
        handler: Hook body.
        applies: Optional payload predicate checked after the tool match.
        is_enabled: Optional config check; ``False`` skips the hook.
        disabled_message: Logged when ``is_enabled`` skips the hook.
        can_block: Whether ``BLOCK`` decisions are honoured.
        silent: Whether ``CONTINUE`` prints nothing instead of ``{"continue": true}``.
        aliases: Alternative CLI names.
    """

    name: str
    phase: Phase
    tools: frozenset[str] | None
    log_file: str
    handler: HookHandler
    applies: Callable[[ToolEvent], bool] | None = None
    is_enabled: Callable[[HookContext], bool] | None = None
    disabled_message: str = ""
    can_block: bool = False
    silent: bool = False
    aliases: tuple[str, ...] = ()

    def matches_tool(self, tool_name: str) -> bool:
        if self.tools is None:
            return bool(tool_name)
        return tool_name in self.tools
