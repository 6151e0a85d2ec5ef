"""Utility functions and helpers.

This module provides various utilities for the reporter:
- security: Secret redaction for logs
- async_helpers: Error types and HTTP retry
- logging: Structured logging with secret sanitization
- text: Test id parsing and terminal text cleanup
- filesystem: Artifact directory management
"""

from testomatio_reporter.utils.async_helpers import (
    ReporterError,
    ReportError,
    RunCreateError,
    api_retry,
)
from testomatio_reporter.utils.filesystem import clear_dir, create_dir
from testomatio_reporter.utils.logging import (
    SecretSanitizer,
    bind_context,
    configure_logging,
    unbind_context,
)
from testomatio_reporter.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)
from testomatio_reporter.utils.text import (
    current_date_time,
    is_same_test,
    is_valid_url,
    parse_suite,
    parse_test,
    remove_color_codes,
    specific_test_info,
    strip_ansi,
)

__all__ = [
    # Logging
    "SecretSanitizer",
    # Security
    "RedactionError",
    # Errors
    "ReportError",
    "ReporterError",
    "RunCreateError",
    "SecretRedactor",
    "SecurityError",
    "api_retry",
    "bind_context",
    # Filesystem
    "clear_dir",
    "configure_logging",
    "create_dir",
    # Text
    "current_date_time",
    "is_same_test",
    "is_valid_url",
    "parse_suite",
    "parse_test",
    "remove_color_codes",
    "specific_test_info",
    "strip_ansi",
    "unbind_context",
]
