"""Test context injector for sub-agent task prompts.

Registered as a PreToolUse hook for the ``Task`` tool.  When the prompt
mentions testing work, a generated context block (detected framework,
test directories, test config files, framework best practices) is
prepended to it.  The original prompt follows verbatim; prompts that do
not mention testing pass through untouched.
"""

from __future__ import annotations

from devflow_hooks.core.detection import find_test_configs, find_test_directories
from devflow_hooks.core.keywords import classify_test_prompt
from devflow_hooks.core.logging import log_event
from devflow_hooks.hooks.context import HookContext
from devflow_hooks.hooks.models import Decision, HookSpec, Phase, ToolEvent

LOG_FILE = "test-context-injection.log"

UNKNOWN_FRAMEWORK = "unknown"

_FRAMEWORK_GUIDES: dict[str, str] = {
    "jest": """### Testing Framework: Jest

**Key Patterns**:
- Use `describe()` for grouping, `it()` or `test()` for cases
- `beforeEach()`/`afterEach()` for setup/teardown
- `jest.mock()` for module mocking
- `expect()` with matchers like `.toBe()`, `.toEqual()`, `.toThrow()`

**Best Practices**:
- Use `jest.spyOn()` for partial mocking
- Prefer `toMatchSnapshot()` sparingly for complex outputs
- Use `--findRelatedTests` for targeted test runs""",
    "vitest": """### Testing Framework: Vitest

**Key Patterns**:
- Compatible with Jest API (`describe`, `it`, `expect`)
- `vi.mock()` for mocking (similar to jest.mock)
- `vi.spyOn()` for spies
- Native ESM support

**Best Practices**:
- Leverage faster execution for TDD workflows
- Use `--reporter=verbose` for detailed output
- Built-in coverage with c8""",
    "mocha": """### Testing Framework: Mocha

**Key Patterns**:
- `describe()` / `it()` blocks, paired with an assertion library such as chai
- `before()`, `beforeEach()`, `after()`, `afterEach()` hooks
- Return a promise or use `async` functions for asynchronous tests

**Best Practices**:
- Keep `.mocharc.*` as the single source of runner options
- Use `sinon` for spies, stubs and fake timers
- Use `--bail` to stop on the first failure""",
    "pytest": """### Testing Framework: pytest

**Key Patterns**:
- Functions starting with `test_` are auto-discovered
- Use `@pytest.fixture` for setup/teardown
- `@pytest.mark.parametrize` for data-driven tests
- `pytest.raises()` for exception testing

**Best Practices**:
- Use `conftest.py` for shared fixtures
- Prefer `pytest-asyncio` for async code
- Use `-x` flag to stop on first failure
- Use `--tb=short` for concise tracebacks""",
    "go": """### Testing Framework: Go Test

**Key Patterns**:
- Test functions: `func TestXxx(t *testing.T)`
- Table-driven tests with `t.Run()`
- Use `testify` package for cleaner assertions
- `t.Parallel()` for concurrent tests

**Best Practices**:
- Use interfaces for mockability
- Prefer `httptest` for HTTP testing
- Use `-race` flag to detect race conditions
- Use `-short` for quick test runs""",
    "cargo": """### Testing Framework: Cargo Test

**Key Patterns**:
- Use `#[test]` attribute for test functions
- `#[should_panic]` for expected panics
- Use `assert!`, `assert_eq!`, `assert_ne!` macros
- Integration tests in `tests/` directory

**Best Practices**:
- Use `#[cfg(test)]` module for test-only code
- Prefer `tokio-test` for async testing
- Use `--nocapture` to see println! output""",
}

_GENERIC_GUIDE = """### Testing Guidelines

**General Best Practices**:
- Follow Arrange-Act-Assert pattern
- Test one behavior per test case
- Use descriptive test names
- Mock external dependencies
- Cover happy path, edge cases, and error handling"""

_PRINCIPLES = """### Testing Principles
- Follow existing test patterns in the codebase
- Maintain consistent naming conventions
- Write tests that provide genuine value
- Cover edge cases and error handling
- Keep tests maintainable and readable"""


def framework_guide(framework: str | None) -> str:
    """Best-practices section for *framework*, generic when unknown."""
    return _FRAMEWORK_GUIDES.get(framework or "", _GENERIC_GUIDE)


def _bullets(items: list[str], empty: str) -> str:
    if not items:
        return f"- {empty}"
    return "\n".join(f"- {item}" for item in items)


def build_context_block(
    framework: str | None,
    test_dirs: list[str],
    test_configs: list[str],
) -> str:
    """Render the block prepended to a test-related prompt."""
    return (
        "## Testing Context (Auto-Injected)\n\n"
        "This sub-agent has been detected as working on testing tasks. "
        "Here is relevant context:\n\n"
        f"### Detected Testing Framework: {framework or UNKNOWN_FRAMEWORK}\n\n"
        "### Test Directories Found\n"
        f"{_bullets(test_dirs, 'No standard test directories found')}\n\n"
        "### Test Configuration Files\n"
        f"{_bullets(test_configs, 'No test configuration files found')}\n\n"
        f"{framework_guide(framework)}\n\n"
        f"{_PRINCIPLES}\n\n"
        "---\n\n"
        "## Your Task\n\n"
    )


def maybe_inject(event: ToolEvent, ctx: HookContext) -> ToolEvent:
    """Return *event* with context prepended to its prompt, or *event* itself.

    The returned event is the same object when the prompt is not
    test-related, so callers can compare by identity.
    """
    prompt = event.input_str("prompt")
    topics = classify_test_prompt(prompt)
    if not topics:
        return event

    log_event(
        ctx.events,
        "test_context_injection",
        "enhancing test-related prompt ({})".format(", ".join(sorted(t.value for t in topics))),
    )
    framework = ctx.detection.test_framework
    test_dirs = find_test_directories(ctx.project_root)
    block = build_context_block(framework, test_dirs, find_test_configs(ctx.project_root))

    log_event(
        ctx.events,
        "injection_complete",
        f"framework: {framework or UNKNOWN_FRAMEWORK}, test_dirs: {' '.join(test_dirs)}",
    )
    return event.with_tool_input(prompt=block + prompt)


def handle(event: ToolEvent, ctx: HookContext) -> Decision:
    injected = maybe_inject(event, ctx)
    if injected is event:
        return Decision.proceed()
    return Decision.mutate(injected)


SPEC = HookSpec(
    name="test-context-injector",
    aliases=("context-injector",),
    phase=Phase.PRE,
    tools=frozenset({"Task"}),
    log_file=LOG_FILE,
    handler=handle,
)
