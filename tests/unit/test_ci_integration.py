"""Unit tests for devflow_hooks.hooks.ci_integration."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from devflow_hooks.core.models import DetectionResult
from devflow_hooks.hooks.ci_integration import LOG_FILE, generate_ci_suggestions, is_ci_file


@pytest.mark.unit
class TestIsCiFile:
    @pytest.mark.parametrize(
        "path",
        [
            ".github/workflows/ci.yml",
            "/repo/.github/workflows/release.yaml",
            ".gitlab-ci.yml",
            "sub/Jenkinsfile",
            ".travis.yml",
            "azure-pipelines.yml",
            "bitbucket-pipelines.yml",
            ".circleci/config.yml",
            "C:\\repo\\.github\\workflows\\ci.yml",
        ],
    )
    def test_ci_files(self, path: str) -> None:
        assert is_ci_file(path)

    @pytest.mark.parametrize("path", ["README.md", "src/workflows/ci.yml", "config.yml"])
    def test_other_files(self, path: str) -> None:
        assert not is_ci_file(path)


@pytest.mark.unit
class TestGenerateCiSuggestions:
    def test_node_typescript_with_pnpm(self) -> None:
        detection = DetectionResult(
            ecosystems=("nodejs", "typescript"), package_manager="pnpm"
        )
        text = generate_ci_suggestions(detection)
        assert text.startswith("## CI/CD Suggestions")
        assert "### Node.js Pipeline" in text
        assert "- Use pnpm for dependency installation" in text
        assert "- Include TypeScript compilation step" in text
        assert "Python Pipeline" not in text

    def test_multiple_sections_in_order(self) -> None:
        detection = DetectionResult(ecosystems=("python", "go", "docker"))
        text = generate_ci_suggestions(detection)
        assert "- Use unknown for dependency management" in text
        assert text.index("### Python") < text.index("### Go") < text.index("### Docker")

    def test_no_ecosystems(self) -> None:
        assert generate_ci_suggestions(DetectionResult()) == "## CI/CD Suggestions\n"


@pytest.mark.unit
class TestCiIntegrationHook:
    def test_ci_write_logs_suggestions(
        self,
        project_dir: Path,
        invoke_hook: Callable[..., tuple[str, int]],
        read_log: Callable[[str], list[dict[str, str]]],
    ) -> None:
        (project_dir / "go.mod").write_text("module x\n")
        event = {
            "tool_name": "Write",
            "tool_input": {"file_path": ".github/workflows/ci.yml", "content": "on: push"},
        }
        stdout, code = invoke_hook("ci-integration", event)
        assert (stdout, code) == ("", 0)
        records = read_log(LOG_FILE)
        assert [r["event"] for r in records] == [
            "ci_file_detected",
            "project_analysis",
            "suggestions_generated",
        ]
        assert "types: go" in records[1]["details"]
        assert "### Go Pipeline" in records[2]["details"]

    def test_other_write_is_silent(
        self,
        project_dir: Path,
        invoke_hook: Callable[..., tuple[str, int]],
        log_dir: Path,
    ) -> None:
        event = {"tool_name": "Write", "tool_input": {"file_path": "src/main.go"}}
        stdout, code = invoke_hook("ci-integration", event)
        assert (stdout, code) == ("", 0)
        assert not (log_dir / LOG_FILE).exists()

    def test_edit_is_not_handled(
        self,
        project_dir: Path,
        invoke_hook: Callable[..., tuple[str, int]],
        log_dir: Path,
    ) -> None:
        event = {"tool_name": "Edit", "tool_input": {"file_path": ".gitlab-ci.yml"}}
        stdout, _code = invoke_hook("ci-integration", event)
        assert stdout == ""
        assert not (log_dir / LOG_FILE).exists()

