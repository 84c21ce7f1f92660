"""Entry point for hook dispatch and the Devflow Hooks CLI commands."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

logger = logging.getLogger(__name__)


def run_version() -> None:
    """Print version information."""
    from devflow_hooks import __version__

    print(f"devflow-hooks {__version__}")


def run_analytics_report(args: argparse.Namespace) -> int:
    """Print the usage report built from the analytics state file.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (always 0; a missing state file is reported, not an error).
    """
    from devflow_hooks.config import ANALYTICS_STATE_FILE, get_settings
    from devflow_hooks.core.analytics import AnalyticsStore, build_report

    settings = get_settings()
    if args.path:
        path = Path(args.path)
    else:
        root = settings.resolve_project_root()
        path = settings.resolve_log_dir(root) / ANALYTICS_STATE_FILE

    state = AnalyticsStore(path, lock_timeout=settings.state_lock_timeout_seconds).load()
    if state is None:
        print("No analytics data available")
        return 0

    print(json.dumps(build_report(state), indent=2))
    return 0


def run_detect(args: argparse.Namespace) -> int:
    """Print the detected ecosystems, test framework and package manager."""
    from devflow_hooks.config import get_settings
    from devflow_hooks.core.detection import detect, find_test_configs, find_test_directories

    root = Path(args.root) if args.root else get_settings().resolve_project_root()
    result = detect(root)
    payload = {
        **result.to_dict(),
        "test_directories": find_test_directories(root),
        "test_configs": find_test_configs(root),
    }

    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    print(f"Project root: {root}")
    print(f"Ecosystems: {', '.join(result.ecosystems) or '(none)'}")
    print(f"Test framework: {result.test_framework or '(none)'}")
    print(f"Package manager: {result.package_manager or '(none)'}")
    print(f"Test directories: {', '.join(payload['test_directories']) or '(none)'}")
    print(f"Test configs: {', '.join(payload['test_configs']) or '(none)'}")
    return 0


def run_watch_run(args: argparse.Namespace) -> int:
    """Run related tests for one edited file (spawned by the test watcher)."""
    from devflow_hooks.adapters.test_runner import run_watch

    run_watch(
        project_root=Path(args.project_root),
        source_file=args.file,
        test_file=args.test_file,
        framework=args.framework,
        timeout_seconds=args.timeout,
        log_dir=Path(args.log_dir),
        notify_script=Path(args.notify_script) if args.notify_script else None,
    )
    return 0


def run_list_hooks() -> None:
    """Print the registered hooks with their phase and tools."""
    from devflow_hooks.hooks.dispatcher import HOOK_SPECS

    print(f"{'Hook':<24} {'Phase':<12} {'Tools':<16} Aliases")
    print(f"{'-' * 24} {'-' * 12} {'-' * 16} {'-' * 16}")
    for spec in HOOK_SPECS:
        tools = ",".join(sorted(spec.tools)) if spec.tools is not None else "*"
        aliases = ", ".join(spec.aliases)
        print(f"{spec.name:<24} {spec.phase.value:<12} {tools:<16} {aliases}")


def _dispatch_hook(argv_rest: list[str]) -> int:
    """Run one hook against stdin.

    Called when ``sys.argv[1] == "hook"``.  Edge cases (no args, --help)
    print usage and return 0.
    """
    if not argv_rest or argv_rest[0] in ("--help", "-h"):
        print(
            "Usage: devflow-hooks hook <name>\n"
            "Hooks: commit-gate, test-context-injector, test-watcher, "
            "session-analytics, ci-integration, context-validator"
        )
        return 0

    from devflow_hooks.hooks.dispatcher import main as dispatcher_main

    return dispatcher_main(argv_rest[0])


def main() -> NoReturn:
    """Main entry point with subcommand support."""
    # Fast-path: bypass argparse entirely for hook dispatch
    if len(sys.argv) >= 2 and sys.argv[1] == "hook":
        code = 0
        try:
            code = _dispatch_hook(sys.argv[2:])
        except Exception:
            pass  # Fail-open
        sys.exit(code)

    parser = argparse.ArgumentParser(
        prog="devflow-hooks",
        description="Lifecycle hooks and tools for AI-assisted development",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    subparsers.add_parser(
        "hook",
        help="Run a hook against a JSON event on stdin",
    )

    subparsers.add_parser(
        "hooks",
        help="List registered hooks",
    )

    # Analytics command
    analytics_parser = subparsers.add_parser(
        "analytics",
        help="Session analytics tools",
    )
    analytics_sub = analytics_parser.add_subparsers(dest="analytics_command")
    report_parser = analytics_sub.add_parser(
        "report",
        help="Print the usage report as JSON",
    )
    report_parser.add_argument(
        "--path",
        default=None,
        help="Analytics state file (default: <project>/.claude/logs/session-analytics.json)",
    )

    # Detect command
    detect_parser = subparsers.add_parser(
        "detect",
        help="Show the detected project ecosystems and test framework",
    )
    detect_parser.add_argument(
        "--root",
        default=None,
        help="Project root (default: auto-detect)",
    )
    detect_parser.add_argument(
        "--json",
        action="store_true",
        help="Output raw JSON only (for piping)",
    )

    # Watch-run command (spawned by the test watcher)
    watch_parser = subparsers.add_parser(
        "watch-run",
        help="Run related tests for one edited file and log the outcome",
    )
    watch_parser.add_argument("--project-root", required=True)
    watch_parser.add_argument("--file", required=True, help="Edited file, relative to the root")
    watch_parser.add_argument("--test-file", required=True)
    watch_parser.add_argument("--framework", required=True)
    watch_parser.add_argument("--timeout", type=float, default=30.0)
    watch_parser.add_argument("--log-dir", required=True)
    watch_parser.add_argument("--notify-script", default=None)

    args = parser.parse_args()

    from devflow_hooks.config import get_settings
    from devflow_hooks.core.logging import configure_logging

    configure_logging(level=get_settings().log_level)

    if args.version:
        run_version()
        sys.exit(0)

    if args.command == "hooks":
        run_list_hooks()
        sys.exit(0)
    elif args.command == "analytics":
        if args.analytics_command == "report":
            sys.exit(run_analytics_report(args))
        analytics_parser.print_help()
        sys.exit(1)
    elif args.command == "detect":
        sys.exit(run_detect(args))
    elif args.command == "watch-run":
        sys.exit(run_watch_run(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
