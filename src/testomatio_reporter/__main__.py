"""Entry point for the `testomatio-reporter` command.

This module provides shell access to the reporter:
- Starting a run (for parallel jobs sharing one run)
- Finishing a run started with TESTOMATIO_PROCEED
- Rendering a source snippet from a saved stack trace
- Humanizing test identifiers
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from testomatio_reporter._version import __version__

log = structlog.get_logger()


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
    """
    from testomatio_reporter.config.schema import LoggingConfig
    from testomatio_reporter.utils.logging import configure_logging

    configure_logging(LoggingConfig(format=log_format), debug=debug)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="testomatio-reporter",
        description="Report test runs to Testomat.io",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML configuration file (default: environment only)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("start", help="Create a run and print its id")

    finish = commands.add_parser("finish", help="Finish the run given by TESTOMATIO_RUN")
    finish.add_argument(
        "--status",
        choices=["passed", "failed", "finished"],
        default="finished",
        help="Final run status (default: finished)",
    )
    finish.add_argument(
        "--parallel",
        action="store_true",
        help="Finish a run shared by parallel jobs",
    )

    snippet = commands.add_parser("snippet", help="Print the failing code for a stack trace")
    snippet.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="File with the stack trace (default: stdin)",
    )

    humanize = commands.add_parser("humanize", help="Print readable titles for identifiers")
    humanize.add_argument("identifiers", nargs="+")

    return parser.parse_args(argv)


async def run_command(args: argparse.Namespace) -> int:
    """Run a reporter command against the Testomat.io API.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from testomatio_reporter.adapters.testomatio import TestomatioPipe
    from testomatio_reporter.config.loader import load_config
    from testomatio_reporter.models.report import RunData, RunStatus
    from testomatio_reporter.utils.async_helpers import RunCreateError

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        return 1
    except (ValueError, ValidationError) as e:
        log.error("configuration_invalid", error=str(e))
        return 1

    if args.config is not None:
        # Reconfigure logging from config file settings
        from testomatio_reporter.utils.logging import configure_logging

        configure_logging(config.logging, debug=args.debug)

    async with TestomatioPipe(config) as pipe:
        if not pipe.is_enabled:
            log.error("reporter_disabled", reason="TESTOMATIO api key is not set or url is invalid")
            return 1

        if args.command == "start":
            try:
                await pipe.create_run()
            except RunCreateError as e:
                log.error("run_resume_failed", error=str(e))
                return 1
            if not pipe.run_id:
                return 1
            print(pipe.run_id)
            return 0

        if not pipe.run_id:
            log.error("run_id_missing", hint="set TESTOMATIO_RUN to the run to finish")
            return 1
        await pipe.finish_run(RunData(status=RunStatus(args.status), parallel=args.parallel))
        return 0


def print_snippet(path: Path | None) -> int:
    """Print the annotated snippet for a stack trace file or stdin."""
    from testomatio_reporter.core.source_snippet import fetch_source_code_from_stack_trace

    stack = path.read_text() if path else sys.stdin.read()
    snippet = fetch_source_code_from_stack_trace(stack)
    if not snippet:
        log.info("source_not_found")
        return 1
    print(snippet)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.format)

    if args.command == "humanize":
        from testomatio_reporter.core.humanize import humanize

        for identifier in args.identifiers:
            print(humanize(identifier))
        return 0

    if args.command == "snippet":
        return print_snippet(args.file)

    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        log.info("interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
