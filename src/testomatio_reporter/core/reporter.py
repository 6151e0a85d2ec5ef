"""Test run reporting facade.

This module implements the Reporter class that test framework integrations
talk to. For every finished test it:
1. Cleans terminal color codes out of the failure message and stack
2. Resolves test and suite ids from `@T`/`@S` tags in titles
3. Appends an annotated source snippet to the stack of failed tests
4. Attaches artifact files referenced in the stack
5. Forwards the payload to every enabled pipe
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from testomatio_reporter.adapters.testomatio import TestomatioPipe
from testomatio_reporter.core.source_snippet import SourceSnippetExtractor
from testomatio_reporter.models.report import RunData, RunStatus, TestData, TestStatus
from testomatio_reporter.utils.text import parse_suite, parse_test, remove_color_codes

if TYPE_CHECKING:
    from testomatio_reporter.config.schema import ReporterConfig
    from testomatio_reporter.interfaces.pipe import Pipe

log = structlog.get_logger()


class Reporter:
    """Collects test results and sends them to the configured pipes.

    Example:
        reporter = create_reporter(config)
        await reporter.create_run()
        await reporter.add_test_run(TestStatus.FAILED, title="logs in @T1a2b3c4d", stack=stack)
        await reporter.finish_run(RunStatus.FAILED)
    """

    def __init__(
        self,
        pipes: Sequence[Pipe],
        extractor: SourceSnippetExtractor | None = None,
    ) -> None:
        """Initialize the Reporter.

        Args:
            pipes: Destinations for test results
            extractor: Source snippet extractor (default instance if None)
        """
        self._pipes = list(pipes)
        self._extractor = extractor or SourceSnippetExtractor()

    @property
    def pipes(self) -> list[Pipe]:
        """Pipes that accept reports."""
        return [pipe for pipe in self._pipes if pipe.is_enabled]

    async def create_run(self) -> None:
        """Start a run on every enabled pipe."""
        for pipe in self.pipes:
            await pipe.create_run()

    async def add_test_run(
        self,
        status: TestStatus | str,
        *,
        title: str,
        suite_title: str | None = None,
        test_id: str | None = None,
        message: str | None = None,
        stack: str | None = None,
        example: dict[str, Any] | None = None,
        files: Sequence[str] = (),
        run_time: float | None = None,
        code: str | None = None,
        file: str | None = None,
        steps: str | None = None,
    ) -> TestData:
        """Build the payload for a finished test and report it.

        Args:
            status: Test outcome
            title: Test title, may carry an `@T` id tag
            suite_title: Suite title, may carry an `@S` id tag
            test_id: Explicit test id overriding the title tag
            message: Failure message
            stack: Raw failure stack trace
            example: Parameters of a data-driven test
            files: Artifact files to attach
            run_time: Duration in milliseconds
            code: Test source code
            file: File declaring the test
            steps: Rendered test steps

        Returns:
            The payload sent to the pipes
        """
        status = TestStatus(status)

        if message:
            message = remove_color_codes(message)

        all_files = list(files)
        if stack:
            stack = remove_color_codes(stack)
            all_files.extend(self._extractor.extract_files_from_trace(stack))
            if status is TestStatus.FAILED:
                stack = self._append_snippet(stack)

        data = TestData(
            title=title,
            status=status,
            test_id=test_id or parse_test(title),
            suite_title=suite_title,
            suite_id=parse_suite(suite_title),
            message=message,
            stack=stack,
            example=example,
            files=all_files,
            steps=steps,
            run_time=run_time,
            code=code,
            file=file,
        )

        for pipe in self.pipes:
            await pipe.add_test(data)

        log.debug("test_reported", title=title, status=status.value, test_id=data.test_id)
        return data

    async def finish_run(self, status: RunStatus | str, parallel: bool = False) -> None:
        """Close the run on every enabled pipe."""
        run = RunData(status=RunStatus(status), parallel=parallel)
        for pipe in self.pipes:
            await pipe.finish_run(run)

    def _append_snippet(self, stack: str) -> str:
        snippet = self._extractor.fetch_source_code_from_stack_trace(stack, bold=False)
        if not snippet:
            return stack
        return f"{stack}\n\n{snippet}"


def create_reporter(config: ReporterConfig, store: dict[str, Any] | None = None) -> Reporter:
    """Create a Reporter wired to the Testomat.io pipe.

    Args:
        config: Reporter configuration
        store: Shared dict receiving run details from the pipe

    Returns:
        Reporter instance
    """
    return Reporter([TestomatioPipe(config, store=store)])
