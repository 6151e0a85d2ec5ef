"""Tests for the Reporter facade."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from testomatio_reporter.adapters.testomatio import TestomatioPipe
from testomatio_reporter.config.schema import ReporterConfig
from testomatio_reporter.core.reporter import Reporter, create_reporter
from testomatio_reporter.models.report import RunData, RunStatus, TestData, TestStatus


class FakePipe:
    """Pipe that records every call."""

    def __init__(self, is_enabled: bool = True) -> None:
        self.is_enabled = is_enabled
        self.runs_created = 0
        self.tests: list[TestData | dict[str, Any]] = []
        self.finished: list[RunData] = []

    async def create_run(self) -> None:
        self.runs_created += 1

    async def add_test(self, data: TestData | dict[str, Any]) -> None:
        self.tests.append(data)

    async def finish_run(self, run: RunData) -> None:
        self.finished.append(run)


@pytest.fixture
def pipe() -> FakePipe:
    return FakePipe()


@pytest.fixture
def reporter(pipe: FakePipe) -> Reporter:
    return Reporter([pipe])


class TestRunLifecycle:
    """Test creating and finishing runs."""

    async def test_create_run(self, reporter: Reporter, pipe: FakePipe) -> None:
        """Test that runs are created on every enabled pipe."""
        await reporter.create_run()
        assert pipe.runs_created == 1

    async def test_finish_run(self, reporter: Reporter, pipe: FakePipe) -> None:
        """Test the final status passed to pipes."""
        await reporter.finish_run("failed", parallel=True)

        assert pipe.finished == [RunData(status=RunStatus.FAILED, parallel=True)]

    async def test_disabled_pipes_skipped(self) -> None:
        """Test that disabled pipes receive nothing."""
        enabled, disabled = FakePipe(), FakePipe(is_enabled=False)
        reporter = Reporter([enabled, disabled])

        await reporter.create_run()
        await reporter.add_test_run(TestStatus.PASSED, title="logs in")
        await reporter.finish_run(RunStatus.PASSED)

        assert reporter.pipes == [enabled]
        assert disabled.runs_created == 0
        assert disabled.tests == []
        assert disabled.finished == []


class TestAddTestRun:
    """Test building and sending test payloads."""

    async def test_passed_test(self, reporter: Reporter, pipe: FakePipe) -> None:
        """Test a passed test with ids from the titles."""
        data = await reporter.add_test_run(
            TestStatus.PASSED,
            title="User can login @T1a2b3c4d",
            suite_title="Auth @Sabcd1234",
            run_time=120.0,
        )

        assert pipe.tests == [data]
        assert data.status is TestStatus.PASSED
        assert data.test_id == "1a2b3c4d"
        assert data.suite_id == "abcd1234"
        assert data.run_time == 120.0

    async def test_explicit_test_id(self, reporter: Reporter) -> None:
        """Test that an explicit id beats the title tag."""
        data = await reporter.add_test_run(
            "passed", title="logs in @T1a2b3c4d", test_id="ffff0000"
        )
        assert data.test_id == "ffff0000"

    async def test_color_codes_removed(self, reporter: Reporter) -> None:
        """Test that terminal colors are stripped from message and stack."""
        data = await reporter.add_test_run(
            TestStatus.SKIPPED,
            title="logs in",
            message="\x1b[33mskipped\x1b[39m",
            stack="\x1b[2mat nowhere\x1b[22m",
        )

        assert data.message == "skipped"
        assert data.stack == "at nowhere"

    async def test_failed_test_gets_snippet(
        self,
        reporter: Reporter,
        python_failure_stack: str,
    ) -> None:
        """Test that the failing source is appended to the stack."""
        data = await reporter.add_test_run(
            TestStatus.FAILED,
            title="test_login",
            message="AssertionError",
            stack=python_failure_stack,
        )

        assert data.stack is not None
        assert data.stack.startswith(python_failure_stack + "\n\n")
        assert '8 >     assert page.title == "Dashboard"' in data.stack
        assert "\x1b[1m" not in data.stack

    async def test_passed_test_has_no_snippet(
        self,
        reporter: Reporter,
        python_failure_stack: str,
    ) -> None:
        """Test that only failures are enriched."""
        data = await reporter.add_test_run(
            TestStatus.PASSED, title="test_login", stack=python_failure_stack
        )
        assert data.stack == python_failure_stack

    async def test_failed_without_frame(self, reporter: Reporter) -> None:
        """Test that a stack without project frames is kept as is."""
        data = await reporter.add_test_run(
            TestStatus.FAILED,
            title="logs in",
            stack="Error: boom\n    at /missing/spec.js:1:1",
        )
        assert data.stack == "Error: boom\n    at /missing/spec.js:1:1"

    async def test_artifacts_attached(self, reporter: Reporter, tmp_path: Path) -> None:
        """Test that files from the stack are added to given files."""
        screenshot = tmp_path / "failure.png"
        screenshot.write_bytes(b"png")

        data = await reporter.add_test_run(
            TestStatus.FAILED,
            title="logs in",
            stack=f"Error: boom\nScreenshot: file:/{screenshot}",
            files=["/tmp/trace.zip"],
        )

        assert data.files == ["/tmp/trace.zip", str(screenshot)]


class TestCreateReporter:
    """Test reporter wiring."""

    def test_wires_testomatio_pipe(self, clean_env: None) -> None:
        """Test that the Testomat.io pipe is configured."""
        store: dict[str, Any] = {}

        reporter = create_reporter(ReporterConfig(api_key="tstmt_FAKEnotreal0123"), store=store)

        assert len(reporter.pipes) == 1
        pipe = reporter.pipes[0]
        assert isinstance(pipe, TestomatioPipe)
        assert pipe.store is store

    def test_without_api_key(self, clean_env: None) -> None:
        """Test that nothing is reported without an API key."""
        assert create_reporter(ReporterConfig()).pipes == []
