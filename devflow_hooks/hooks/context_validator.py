"""Context validator: flag broken links and stale AI context documents.

Registered as a PostToolUse hook for ``Read`` and ``Edit``.  When a
context document (``CONTEXT.md``, ``CLAUDE.md``, ``docs-overview.md``) is
touched, three checks run and log warnings for later review:

    1. local markdown link targets must exist
    2. source files near the document must not be newer than it
    3. ``docs-overview.md`` must list exactly the ``CONTEXT.md`` files present

Observational only: nothing is returned to the host.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from devflow_hooks.core.logging import log_event
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import HookSpec, Phase, ToolEvent

LOG_FILE = "context-validation.log"

CONTEXT_FILENAMES: frozenset[str] = frozenset({"CONTEXT.md", "CLAUDE.md", "docs-overview.md"})
DOCS_OVERVIEW_FILENAME = "docs-overview.md"

STALENESS_EXTENSIONS: frozenset[str] = frozenset({".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".rs"})
_STALENESS_DEPTH = 2
_SKIP_DIRS = frozenset({"node_modules", "vendor", "target", "dist", "build", "venv", "__pycache__"})

_LINK_RE = re.compile(r"\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
_DOCUMENTED_CONTEXT_RE = re.compile(r"\((/[^)\s]+/CONTEXT\.md)\)")
_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "ftp://", "#")


@dataclass
class ValidationReport:
    """Findings for one context document."""

    invalid_references: list[str] = field(default_factory=list)
    newer_files: list[str] = field(default_factory=list)
    missing_documented: list[str] = field(default_factory=list)
    undocumented: list[str] = field(default_factory=list)


def is_context_file(file_path: str) -> bool:
    return Path(file_path).name in CONTEXT_FILENAMES


def extract_link_targets(markdown: str) -> list[str]:
    """Targets of inline markdown links, in document order."""
    return _LINK_RE.findall(markdown)


def _walk(root: Path, max_depth: int | None = None):
    """Yield file paths below *root*, skipping hidden and vendored dirs."""
    for dirpath, dirnames, filenames in os.walk(root):
        depth = len(Path(dirpath).relative_to(root).parts)
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in _SKIP_DIRS)
        if max_depth is not None and depth + 1 >= max_depth:
            dirnames[:] = []
        for name in sorted(filenames):
            yield Path(dirpath) / name


def find_invalid_references(document: Path, project_root: Path) -> list[str]:
    """Local link targets in *document* that do not exist.

    Absolute targets (``/docs/x.md``) resolve against the project root,
    relative ones against the document's directory.  URLs, mail links and
    in-page anchors are ignored; ``#fragment`` suffixes are stripped.
    """
    try:
        text = document.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    invalid: list[str] = []
    for ref in extract_link_targets(text):
        if ref.lower().startswith(_EXTERNAL_PREFIXES):
            continue
        target = ref.split("#", 1)[0].split("?", 1)[0]
        if not target:
            continue
        if target.startswith("/"):
            full_path = project_root / target.lstrip("/")
        else:
            full_path = document.parent / target
        if not full_path.exists() and ref not in invalid:
            invalid.append(ref)
    return invalid


def find_newer_sources(document: Path) -> list[str]:
    """Source files within two levels of *document* modified after it.

    Returns:
        POSIX paths relative to the document's directory.
    """
    try:
        doc_mtime = document.stat().st_mtime
    except OSError:
        return []

    base = document.parent
    newer: list[str] = []
    for path in _walk(base, max_depth=_STALENESS_DEPTH):
        if path.suffix not in STALENESS_EXTENSIONS:
            continue
        try:
            if path.stat().st_mtime > doc_mtime:
                newer.append(path.relative_to(base).as_posix())
        except OSError:
            continue
    return newer


def check_docs_overview(overview: Path, project_root: Path) -> tuple[list[str], list[str]]:
    """Compare the ``CONTEXT.md`` files an overview lists with those on disk.

    Returns:
        ``(missing, undocumented)``: listed-but-absent paths, and
        present-but-unlisted paths (both root-relative with a leading ``/``).
    """
    try:
        text = overview.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return [], []

    missing = [
        documented
        for documented in _DOCUMENTED_CONTEXT_RE.findall(text)
        if not (project_root / documented.lstrip("/")).is_file()
    ]
    undocumented: list[str] = []
    for path in _walk(project_root):
        if path.name != "CONTEXT.md":
            continue
        relative = "/" + path.relative_to(project_root).as_posix()
        if relative not in text:
            undocumented.append(relative)
    return missing, undocumented


def validate_context_file(document: Path, project_root: Path) -> ValidationReport:
    report = ValidationReport()
    if not document.is_file():
        return report
    report.invalid_references = find_invalid_references(document, project_root)
    report.newer_files = find_newer_sources(document)
    if document.name == DOCS_OVERVIEW_FILENAME:
        report.missing_documented, report.undocumented = check_docs_overview(
            document, project_root
        )
    return report


def _listing(items: list[str]) -> str:
    return "".join(f"\n  - {item}" for item in items)


def handle(event: ToolEvent, ctx: HookContext) -> None:
    file_path = event.input_str("file_path")
    if not file_path or not is_context_file(file_path):
        return None

    log_event(ctx.events, "context_file_accessed", file_path)
    document = ctx.absolute_path(file_path)
    report = validate_context_file(document, ctx.project_root)

    if report.invalid_references:
        log_event(
            ctx.events,
            "invalid_references",
            f"File: {file_path}{_listing(report.invalid_references)}",
            severity="warning",
        )
    if report.newer_files:
        log_event(
            ctx.events,
            "potentially_stale",
            f"Context: {file_path} may be outdated. Newer files: {' '.join(report.newer_files)}",
        )
    if report.missing_documented:
        log_event(
            ctx.events,
            "docs_overview_inconsistency",
            f"Missing documented CONTEXT files:{_listing(report.missing_documented)}",
            severity="warning",
        )
    if report.undocumented:
        log_event(
            ctx.events,
            "undocumented_contexts",
            f"CONTEXT files not in docs-overview:{_listing(report.undocumented)}",
        )
    return None


SPEC = HookSpec(
    name="context-validator",
    phase=Phase.POST,
    tools=frozenset({"Read", "Edit"}),
    log_file=LOG_FILE,
    handler=handle,
    silent=True,
)
