"""Project ecosystem detection from marker files.

Classifies a project root by ordered existence checks against fixed marker
tables.  Each category is checked independently:

    - test framework: first matching rule wins
    - package manager: first matching lock file wins
    - ecosystems: every matching rule is reported

Detection is side-effect-free and never raises; it reruns on every hook
invocation so results always reflect the current disk state.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path

from devflow_hooks.core.models import DetectionResult

logger = logging.getLogger(__name__)

_MAX_MARKER_BYTES = 1_048_576


@dataclass(frozen=True)
class Marker:
    """A marker file, optionally required to contain a substring."""

    path: str
    contains: str | None = None


# (name, markers) - any marker matching selects the name
_FRAMEWORK_RULES: tuple[tuple[str, tuple[Marker, ...]], ...] = (
    ("jest", (Marker("package.json", '"jest"'),)),
    ("vitest", (Marker("package.json", '"vitest"'),)),
    ("mocha", (Marker("package.json", '"mocha"'),)),
    (
        "pytest",
        (
            Marker("pytest.ini"),
            Marker("conftest.py"),
            Marker("pyproject.toml", "pytest"),
            Marker("setup.cfg", "pytest"),
            Marker("tox.ini", "pytest"),
        ),
    ),
    ("go", (Marker("go.mod"),)),
    ("cargo", (Marker("Cargo.toml"),)),
)

_ECOSYSTEM_RULES: tuple[tuple[str, tuple[Marker, ...]], ...] = (
    ("nodejs", (Marker("package.json"),)),
    ("typescript", (Marker("package.json", '"typescript"'), Marker("tsconfig.json"))),
    ("react", (Marker("package.json", '"react"'),)),
    ("vue", (Marker("package.json", '"vue"'),)),
    (
        "python",
        (
            Marker("pyproject.toml"),
            Marker("requirements.txt"),
            Marker("setup.py"),
            Marker("setup.cfg"),
            Marker("Pipfile"),
        ),
    ),
    ("go", (Marker("go.mod"),)),
    ("rust", (Marker("Cargo.toml"),)),
    ("docker", (Marker("Dockerfile"), Marker("docker-compose.yml"), Marker("compose.yaml"))),
)

_PACKAGE_MANAGER_RULES: tuple[tuple[str, tuple[Marker, ...]], ...] = (
    ("pnpm", (Marker("pnpm-lock.yaml"),)),
    ("yarn", (Marker("yarn.lock"),)),
    ("bun", (Marker("bun.lockb"), Marker("bun.lock"))),
    ("npm", (Marker("package-lock.json"),)),
    ("pipenv", (Marker("Pipfile.lock"),)),
    ("poetry", (Marker("poetry.lock"),)),
    ("uv", (Marker("uv.lock"),)),
    ("cargo", (Marker("Cargo.lock"),)),
    ("go", (Marker("go.sum"),)),
)

TEST_DIRECTORY_PATTERNS: tuple[str, ...] = (
    "tests",
    "test",
    "__tests__",
    "spec",
    "specs",
    "test_*",
    "*_test",
)
"""Directory name patterns that conventionally hold tests."""

TEST_CONFIG_FILES: tuple[str, ...] = (
    "jest.config.js",
    "jest.config.ts",
    "jest.config.json",
    "vitest.config.js",
    "vitest.config.ts",
    "pytest.ini",
    "pyproject.toml",
    "setup.cfg",
    "mocha.opts",
    ".mocharc.js",
    ".mocharc.json",
)
"""Config file names reported to test-focused sub-agents."""

_SKIP_DIRS = frozenset({"node_modules", "vendor", "target", "dist", "build", "venv", "__pycache__"})

_MAX_DIRS_PER_PATTERN = 3
_MAX_SEARCH_DEPTH = 3


# ---------------------------------------------------------------------------
# Marker evaluation
# ---------------------------------------------------------------------------


def _marker_present(root: Path, marker: Marker, cache: dict[str, str | None]) -> bool:
    """Evaluate one marker; file contents are read at most once per call site."""
    candidate = root / marker.path
    try:
        if not candidate.is_file():
            return False
    except OSError:
        return False
    if marker.contains is None:
        return True

    if marker.path not in cache:
        try:
            with open(candidate, encoding="utf-8", errors="replace") as f:
                cache[marker.path] = f.read(_MAX_MARKER_BYTES)
        except OSError as e:
            logger.debug("Could not read marker %s: %s", candidate, e)
            cache[marker.path] = None
    text = cache[marker.path]
    return text is not None and marker.contains in text


def _first_match(
    root: Path,
    rules: tuple[tuple[str, tuple[Marker, ...]], ...],
    cache: dict[str, str | None],
) -> str | None:
    for name, markers in rules:
        if any(_marker_present(root, m, cache) for m in markers):
            return name
    return None


def _all_matches(
    root: Path,
    rules: tuple[tuple[str, tuple[Marker, ...]], ...],
    cache: dict[str, str | None],
) -> tuple[str, ...]:
    return tuple(
        name for name, markers in rules if any(_marker_present(root, m, cache) for m in markers)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect(root: str | Path) -> DetectionResult:
    """Classify the project rooted at *root*.

    Args:
        root: Project root directory.

    Returns:
        DetectionResult; empty when *root* is missing or has no markers.
    """
    path = Path(root)
    try:
        if not path.is_dir():
            return DetectionResult()
    except OSError:
        return DetectionResult()

    cache: dict[str, str | None] = {}
    return DetectionResult(
        ecosystems=_all_matches(path, _ECOSYSTEM_RULES, cache),
        test_framework=_first_match(path, _FRAMEWORK_RULES, cache),
        package_manager=_first_match(path, _PACKAGE_MANAGER_RULES, cache),
    )


def detect_test_framework(root: str | Path) -> str | None:
    """Shortcut for ``detect(root).test_framework``."""
    return detect(root).test_framework


def find_test_directories(root: str | Path) -> list[str]:
    """Find conventional test directories below *root*.

    Walks at most three levels deep, skipping hidden and vendored
    directories, and keeps at most three hits per name pattern.

    Returns:
        POSIX-style paths relative to *root*, grouped by pattern order.
    """
    base = Path(root)
    found: dict[str, list[str]] = {pattern: [] for pattern in TEST_DIRECTORY_PATTERNS}
    seen: set[str] = set()

    for dirpath, dirnames, _filenames in os.walk(base):
        rel_dir = Path(dirpath).relative_to(base)
        depth = len(rel_dir.parts)
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in _SKIP_DIRS
        )
        if depth >= _MAX_SEARCH_DEPTH:
            dirnames[:] = []
            continue
        for name in dirnames:
            rel = (rel_dir / name).as_posix()
            for pattern in TEST_DIRECTORY_PATTERNS:
                if rel in seen or len(found[pattern]) >= _MAX_DIRS_PER_PATTERN:
                    continue
                if fnmatch(name, pattern):
                    found[pattern].append(rel)
                    seen.add(rel)

    return [rel for pattern in TEST_DIRECTORY_PATTERNS for rel in found[pattern]]


def find_test_configs(root: str | Path) -> list[str]:
    """List the known test configuration files present in *root*."""
    base = Path(root)
    return [name for name in TEST_CONFIG_FILES if (base / name).is_file()]
