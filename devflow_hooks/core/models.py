"""Core data models for devflow hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class DetectionResult:
    """Best-effort classification of a project directory.

    Attributes:
        ecosystems: Every ecosystem whose markers are present, in table order.
        test_framework: First matching test framework, if any.
        package_manager: First matching package manager, if any.
    """

    ecosystems: tuple[str, ...] = ()
    test_framework: str | None = None
    package_manager: str | None = None

    def has(self, ecosystem: str) -> bool:
        return ecosystem in self.ecosystems

    @property
    def is_empty(self) -> bool:
        return not self.ecosystems and self.test_framework is None and self.package_manager is None

    def to_dict(self) -> dict[str, object]:
        return {
            "ecosystems": list(self.ecosystems),
            "test_framework": self.test_framework,
            "package_manager": self.package_manager,
        }


class TestStatus(str, Enum):
    """Classification of a test run."""

    __test__ = False  # not a pytest test class

    PASSED = "passed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"
    SKIPPED = "skipped"  # watch mode found nothing to run


@dataclass
class TestOutcome:
    """Result of one test execution attempt.

    ``summary`` holds the tail of the combined output for ``FAILED``
    runs, or a short reason for the other statuses.
    """

    __test__ = False  # not a pytest test class

    status: TestStatus
    command: list[str] = field(default_factory=list)
    exit_code: int | None = None
    output: str = ""
    summary: str = ""
