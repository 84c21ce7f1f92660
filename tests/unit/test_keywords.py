"""Unit tests for devflow_hooks.core.keywords."""

from __future__ import annotations

import pytest

from devflow_hooks.core.keywords import (
    COMMAND_KEYWORDS,
    SlashCommand,
    TestTopic,
    classify_test_prompt,
    extract_command,
    is_test_related,
)


@pytest.mark.unit
class TestClassifyTestPrompt:
    """Test keyword classification of sub-agent prompts."""

    def test_plain_test_prompt(self) -> None:
        assert classify_test_prompt("Write unit tests for auth.py") == frozenset(
            {TestTopic.TESTING}
        )

    def test_case_insensitive(self) -> None:
        assert TestTopic.FRAMEWORK in classify_test_prompt("Configure PYTEST plugins")

    def test_multiple_topics(self) -> None:
        topics = classify_test_prompt("Mock the client and raise coverage")
        assert topics == frozenset({TestTopic.DOUBLES, TestTopic.COVERAGE})

    def test_unrelated_prompt(self) -> None:
        assert classify_test_prompt("Refactor the database layer") == frozenset()
        assert not is_test_related("Refactor the database layer")

    def test_empty_prompt(self) -> None:
        assert classify_test_prompt("") == frozenset()

    def test_substring_match(self) -> None:
        # "latest" contains "test"
        assert is_test_related("upgrade to the latest release")


@pytest.mark.unit
class TestExtractCommand:
    """Test slash-command extraction."""

    def test_every_command_is_keyed(self) -> None:
        assert len(COMMAND_KEYWORDS) == len(SlashCommand)
        assert COMMAND_KEYWORDS["/code-review"] is SlashCommand.CODE_REVIEW

    def test_simple_command(self) -> None:
        assert extract_command("/code-review the auth module") is SlashCommand.CODE_REVIEW

    def test_longest_spelling_wins(self) -> None:
        assert extract_command("run /test-coverage now") is SlashCommand.TEST_COVERAGE

    def test_short_command_alone(self) -> None:
        assert extract_command("please /test this") is SlashCommand.TEST

    def test_command_at_end(self) -> None:
        assert extract_command("finish with /handoff") is SlashCommand.HANDOFF

    def test_case_insensitive(self) -> None:
        assert extract_command("/DEBUG the crash") is SlashCommand.DEBUG

    def test_first_command_wins(self) -> None:
        assert extract_command("/refactor then /update-docs") is SlashCommand.REFACTOR

    def test_prefix_of_unknown_command_ignored(self) -> None:
        assert extract_command("/testing-strategy") is None

    def test_no_command(self) -> None:
        assert extract_command("just some words") is None
