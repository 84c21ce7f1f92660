"""Session analytics: usage counters and the aggregated report.

State document layout::

    {
      "created": "...", "last_updated": "...", "total_sessions": 0,
      "current_session": {"session_id": "", "started": "", "commands_used": [],
                          "tools_used": {}, "duration_minutes": 0},
      "aggregate": {"command_usage": {}, "tool_usage": {},
                    "daily_activity": {}, "common_workflows": []}
    }

Aggregate counters only ever grow.  ``current_session`` is reset when the
host reports a new ``session_id``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from devflow_hooks.core.keywords import extract_command
from devflow_hooks.core.state_store import JsonStateStore, StateDict
from devflow_hooks.core.utils import parse_timestamp, utc_date_key, utc_now, utc_timestamp

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7


class RecordKind(str, Enum):
    TOOL = "tool"
    COMMAND = "command"


def initial_state(now: datetime | None = None) -> StateDict:
    """Build an empty analytics document stamped with *now*."""
    timestamp = utc_timestamp(now)
    return {
        "created": timestamp,
        "last_updated": timestamp,
        "total_sessions": 0,
        "current_session": _new_session("", ""),
        "aggregate": {
            "command_usage": {},
            "tool_usage": {},
            "daily_activity": {},
            "common_workflows": [],
        },
    }


def _new_session(session_id: str, started: str) -> dict[str, Any]:
    return {
        "session_id": session_id,
        "started": started,
        "commands_used": [],
        "tools_used": {},
        "duration_minutes": 0,
    }


def _normalize(doc: StateDict, now: datetime) -> None:
    """Fill in keys missing from documents written by older versions."""
    template = initial_state(now)
    for key, value in template.items():
        if not isinstance(doc.get(key), type(value)):
            doc[key] = value
    for section in ("current_session", "aggregate"):
        for key, value in template[section].items():
            if not isinstance(doc[section].get(key), type(value)):
                doc[section][key] = value


def _bump(counters: dict[str, int], key: str) -> None:
    counters[key] = int(counters.get(key, 0)) + 1


def _touch_session(doc: StateDict, session_id: str, now: datetime) -> None:
    session = doc["current_session"]
    timestamp = utc_timestamp(now)
    if session_id and session.get("session_id") != session_id:
        doc["total_sessions"] = int(doc.get("total_sessions", 0)) + 1
        session = doc["current_session"] = _new_session(session_id, timestamp)
    if not session.get("started"):
        session["started"] = timestamp
    started = parse_timestamp(session["started"])
    if started is not None:
        session["duration_minutes"] = max(0, int((now - started).total_seconds() // 60))


def apply_record(
    doc: StateDict,
    kind: RecordKind,
    key: str,
    now: datetime,
    session_id: str = "",
) -> None:
    """Apply one counter increment to *doc* in place."""
    _normalize(doc, now)
    _touch_session(doc, session_id, now)
    doc["last_updated"] = utc_timestamp(now)
    aggregate = doc["aggregate"]
    session = doc["current_session"]

    if kind is RecordKind.TOOL:
        _bump(aggregate["tool_usage"], key)
        _bump(aggregate["daily_activity"], utc_date_key(now))
        _bump(session["tools_used"], key)
    else:
        _bump(aggregate["command_usage"], key)
        session["commands_used"].append(key)


def commands_for_event(tool_name: str, tool_input: Mapping[str, object]) -> list[str]:
    """Workflow commands a tool call represents.

    ``Task`` prompts are matched against the slash-command table;
    ``SlashCommand`` calls name their command directly.
    """
    if tool_name == "Task":
        command = extract_command(str(tool_input.get("prompt", "") or ""))
        return [command.value] if command is not None else []
    if tool_name == "SlashCommand":
        raw = str(tool_input.get("command", "") or "").strip()
        name = raw.split(" ", 1)[0].replace("/", "") if raw else ""
        return [name] if name else []
    return []


class AnalyticsStore:
    """Usage counters persisted in one JSON document."""

    def __init__(self, path: Path, lock_timeout: float = 5.0) -> None:
        self.path = path
        self._store = JsonStateStore(path, initial=initial_state, lock_timeout=lock_timeout)

    def load(self) -> StateDict | None:
        return self._store.load()

    def record(self, kind: RecordKind, key: str, session_id: str = "") -> StateDict:
        """Increment the counters for one tool or command use."""
        now = utc_now()
        return self._store.update(lambda doc: apply_record(doc, kind, key, now, session_id))

    def record_event(
        self,
        tool_name: str,
        tool_input: Mapping[str, object],
        session_id: str = "",
    ) -> list[str]:
        """Record a tool call and any command it carries in one update.

        Returns:
            The commands recorded alongside the tool.
        """
        commands = commands_for_event(tool_name, tool_input)
        now = utc_now()

        def mutate(doc: StateDict) -> None:
            apply_record(doc, RecordKind.TOOL, tool_name, now, session_id)
            for command in commands:
                apply_record(doc, RecordKind.COMMAND, command, now, session_id)

        self._store.update(mutate)
        return commands


def _top_entry(counters: Mapping[str, int]) -> dict[str, Any]:
    if not counters:
        return {"key": "none", "value": 0}
    key = min(counters, key=lambda k: (-int(counters[k]), k))
    return {"key": key, "value": int(counters[key])}


def build_report(state: Mapping[str, Any]) -> dict[str, Any]:
    """Summarize an analytics document without modifying it."""
    aggregate = state.get("aggregate") or {}
    tool_usage: dict[str, int] = dict(aggregate.get("tool_usage") or {})
    command_usage: dict[str, int] = dict(aggregate.get("command_usage") or {})
    daily: dict[str, int] = dict(aggregate.get("daily_activity") or {})

    recent = sorted(daily.items(), reverse=True)[:RECENT_ACTIVITY_DAYS]
    return {
        "summary": {
            "total_tool_invocations": sum(int(v) for v in tool_usage.values()),
            "total_command_uses": sum(int(v) for v in command_usage.values()),
            "days_active": len(daily),
            "total_sessions": int(state.get("total_sessions", 0) or 0),
            "most_used_tool": _top_entry(tool_usage),
            "most_used_command": _top_entry(command_usage),
        },
        "tool_breakdown": tool_usage,
        "command_breakdown": command_usage,
        "recent_activity": [{"key": day, "value": count} for day, count in recent],
    }
