"""Error types and retry helpers for reporter API calls.

This module provides:
- Custom exceptions for the reporting pipeline
- A retry decorator with exponential backoff for transient HTTP failures
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()


# =============================================================================
# Custom Exceptions
# =============================================================================


class ReporterError(Exception):
    """Base exception for all reporter errors."""


class RunCreateError(ReporterError):
    """Failed to create or resume a run."""


class ReportError(ReporterError):
    """Failed to report a test or finish a run.

    Attributes:
        status_code: HTTP status returned by the API, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Retry Decorator
# =============================================================================


RETRYABLE_ERRORS: tuple[type[Exception], ...] = (httpx.TimeoutException, httpx.NetworkError)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "retrying_request",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


# Default retry decorator for API calls
api_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=30),
    retry=retry_if_exception_type(RETRYABLE_ERRORS),
    before_sleep=_log_retry,
    reraise=True,
)
