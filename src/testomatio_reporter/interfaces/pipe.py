"""Abstract interface for report destinations."""

from typing import Any, Protocol

from ..models.report import RunData, TestData


class Pipe(Protocol):
    """Abstract interface for a destination that receives test results.

    Pipes never raise on reporting failures; a disabled pipe ignores
    every call.
    """

    is_enabled: bool

    async def create_run(self) -> None:
        """
        Create a new run, or resume the configured one.

        Raises:
            RunCreateError: If an existing run cannot be resumed
        """
        ...

    async def add_test(self, data: TestData | dict[str, Any]) -> Any:
        """
        Report a single test result to the current run.

        Args:
            data: Test payload
        """
        ...

    async def finish_run(self, run: RunData) -> None:
        """
        Close the current run with its final status.

        Args:
            run: Final run status and optional test list
        """
        ...
