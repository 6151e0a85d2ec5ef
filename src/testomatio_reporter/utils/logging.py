"""Structured logging for the reporter.

Every entry passes through a SecretSanitizer before it is rendered, so the
project API key sent with each request and the S3 credentials returned for
artifact uploads never reach CI output or the log file.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog

from testomatio_reporter._version import __version__
from testomatio_reporter.config.schema import LoggingConfig
from testomatio_reporter.utils.security import SecretRedactor

SERVICE_NAME = "testomatio-reporter"

EventDict = MutableMapping[str, Any]


class SecretSanitizer:
    """Structlog processor redacting secrets from nested event values.

    Usage:
        sanitizer = SecretSanitizer(SecretRedactor(placeholder="***"))
        structlog.configure(processors=[sanitizer, structlog.processors.JSONRenderer()])
    """

    def __init__(self, redactor: SecretRedactor | None = None) -> None:
        self.redactor = redactor if redactor is not None else SecretRedactor()

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return cast(EventDict, self.sanitize(event_dict))

    def sanitize(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redactor.redact(value)
        if isinstance(value, dict):
            return {key: self.sanitize(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.sanitize(item) for item in value)
        return value


def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag entries with the reporter name and version."""
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = __version__
    return event_dict


def configure_logging(
    config: LoggingConfig | None = None,
    *,
    debug: bool = False,
    redactor: SecretRedactor | None = None,
) -> SecretSanitizer:
    """Configure structlog and the stdlib handlers it writes through.

    Args:
        config: Level, format and optional log file. Defaults to console at INFO.
        debug: Force the DEBUG level whatever the config says.
        redactor: Redactor used for log entries. A default one is built if None.

    Returns:
        The sanitizer installed in the processor chain.
    """
    if config is None:
        config = LoggingConfig()
    level = logging.DEBUG if debug else getattr(logging, config.level)
    sanitizer = SecretSanitizer(redactor)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        sanitizer,
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Plain output when stderr is redirected to a CI log
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(), exception_formatter=structlog.dev.plain_traceback
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if config.file.enabled:
        try:
            config.file.path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(config.file.path))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(level)
    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)

    if file_error is not None:
        structlog.get_logger().warning(
            "log_file_unavailable", path=str(config.file.path), error=str(file_error)
        )
    return sanitizer


def bind_context(**kwargs: Any) -> None:
    """Bind variables to every following log entry of the current task.

    Example:
        bind_context(run_id="a1b2c3")
        log.info("test_reported")  # Includes run_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
