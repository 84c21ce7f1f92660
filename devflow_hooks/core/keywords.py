"""Keyword lookup tables for prompt classification.

Both the test-context injector and the analytics recorder classify free
text against a fixed table mapping a pattern to a tag.  Matching is a
case-insensitive substring test, so the predicate is total: every string
maps to a (possibly empty) set of tags.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum


class TestTopic(str, Enum):
    """What kind of testing work a prompt mentions."""

    __test__ = False  # not a pytest test class

    TESTING = "testing"
    COVERAGE = "coverage"
    DOUBLES = "test-doubles"
    ASSERTIONS = "assertions"
    FRAMEWORK = "framework"


class SlashCommand(str, Enum):
    """Workflow commands recognised in task prompts."""

    TEST = "test"
    TEST_COVERAGE = "test-coverage"
    CODE_REVIEW = "code-review"
    FULL_CONTEXT = "full-context"
    REFACTOR = "refactor"
    UPDATE_DOCS = "update-docs"
    CREATE_DOCS = "create-docs"
    GEMINI_CONSULT = "gemini-consult"
    HANDOFF = "handoff"
    DEPENDENCY_AUDIT = "dependency-audit"
    PERFORMANCE = "performance"
    DEBUG = "debug"
    MIGRATE = "migrate"
    SCAFFOLD = "scaffold"
    API_DOCS = "api-docs"


TEST_KEYWORDS: Mapping[str, TestTopic] = {
    "test": TestTopic.TESTING,
    "testing": TestTopic.TESTING,
    "unittest": TestTopic.TESTING,
    "spec": TestTopic.TESTING,
    "coverage": TestTopic.COVERAGE,
    "mock": TestTopic.DOUBLES,
    "stub": TestTopic.DOUBLES,
    "fixture": TestTopic.DOUBLES,
    "assert": TestTopic.ASSERTIONS,
    "expect": TestTopic.ASSERTIONS,
    "jest": TestTopic.FRAMEWORK,
    "pytest": TestTopic.FRAMEWORK,
    "vitest": TestTopic.FRAMEWORK,
    "mocha": TestTopic.FRAMEWORK,
}
"""Test-related keywords.  Substring match, so ``tests`` hits ``test``."""

COMMAND_KEYWORDS: Mapping[str, SlashCommand] = {
    f"/{command.value}": command for command in SlashCommand
}
"""Slash-command patterns, keyed by their literal prompt spelling."""


def match_keywords(text: str, table: Mapping[str, Enum]) -> frozenset:
    """Return every tag whose keyword occurs in *text* (case-insensitive)."""
    lowered = text.lower()
    return frozenset(tag for keyword, tag in table.items() if keyword in lowered)


def classify_test_prompt(prompt: str) -> frozenset[TestTopic]:
    """Tags describing the testing work *prompt* mentions."""
    return match_keywords(prompt, TEST_KEYWORDS)


def is_test_related(prompt: str) -> bool:
    return bool(classify_test_prompt(prompt))


# Longest spelling first so "/test-coverage" is not reported as "/test".
_COMMAND_RE = re.compile(
    "|".join(
        re.escape(keyword) + r"(?![\w-])"
        for keyword in sorted(COMMAND_KEYWORDS, key=len, reverse=True)
    ),
    re.IGNORECASE,
)


def extract_command(prompt: str) -> SlashCommand | None:
    """Return the first slash command mentioned in *prompt*, if any."""
    match = _COMMAND_RE.search(prompt)
    if match is None:
        return None
    return COMMAND_KEYWORDS[match.group(0).lower()]
