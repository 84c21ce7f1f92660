"""CI integration: log pipeline suggestions when CI config is written.

Registered as a PostToolUse hook for ``Write``.  Observational only: the
suggestions go to the CI log and nothing is returned to the host.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from devflow_hooks.core.logging import log_event
from devflow_hooks.core.models import DetectionResult
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import HookSpec, Phase, ToolEvent

LOG_FILE = "ci-integration.log"

CI_FILENAMES: frozenset[str] = frozenset(
    {
        ".gitlab-ci.yml",
        "Jenkinsfile",
        ".travis.yml",
        "azure-pipelines.yml",
        "bitbucket-pipelines.yml",
    }
)
CI_PATH_FRAGMENTS: tuple[str, ...] = (".github/workflows/", ".circleci/config.yml")

_SECTIONS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (
        "nodejs",
        "Node.js Pipeline",
        (
            "Use {pm} for dependency installation",
            "Cache node_modules for faster builds",
            "Run linting, type checking, and tests in parallel",
        ),
    ),
    (
        "python",
        "Python Pipeline",
        (
            "Use {pm} for dependency management",
            "Include pytest for testing",
            "Run type checking with mypy",
            "Include security scanning with pip-audit or safety",
        ),
    ),
    (
        "go",
        "Go Pipeline",
        (
            "Run go vet and staticcheck",
            "Include go test with coverage",
            "Use govulncheck for security",
        ),
    ),
    (
        "rust",
        "Rust Pipeline",
        (
            "Run cargo fmt --check and cargo clippy",
            "Include cargo test",
            "Use cargo audit for security",
        ),
    ),
    (
        "docker",
        "Docker Pipeline",
        (
            "Include Docker build step",
            "Run security scanning on images",
            "Push to registry on successful builds",
        ),
    ),
)


def is_ci_file(file_path: str) -> bool:
    """Whether *file_path* is a CI/CD configuration file."""
    normalized = file_path.replace("\\", "/")
    if PurePosixPath(normalized).name in CI_FILENAMES:
        return True
    return any(fragment in normalized for fragment in CI_PATH_FRAGMENTS)


def generate_ci_suggestions(detection: DetectionResult) -> str:
    """Markdown suggestions tailored to the detected ecosystems."""
    pm = detection.package_manager or "unknown"
    lines = ["## CI/CD Suggestions", ""]
    for ecosystem, title, bullets in _SECTIONS:
        if not detection.has(ecosystem):
            continue
        lines.append(f"### {title}")
        lines.extend(f"- {bullet.format(pm=pm)}" for bullet in bullets)
        if ecosystem == "nodejs" and detection.has("typescript"):
            lines.append("- Include TypeScript compilation step")
    return "\n".join(lines)


def handle(event: ToolEvent, ctx: HookContext) -> None:
    file_path = event.input_str("file_path")
    if not file_path or not is_ci_file(file_path):
        return None

    log_event(ctx.events, "ci_file_detected", file_path)
    detection = ctx.detection
    log_event(
        ctx.events,
        "project_analysis",
        f"types: {' '.join(detection.ecosystems)}, "
        f"package_manager: {detection.package_manager or 'unknown'}",
    )
    log_event(ctx.events, "suggestions_generated", generate_ci_suggestions(detection))
    return None


SPEC = HookSpec(
    name="ci-integration",
    phase=Phase.POST,
    tools=frozenset({"Write"}),
    log_file=LOG_FILE,
    handler=handle,
    silent=True,
)
