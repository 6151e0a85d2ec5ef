"""Configuration loading and validation."""

from .loader import load_config
from .schema import FileLoggingConfig, LoggingConfig, ReporterConfig

__all__ = [
    # Loader
    "load_config",
    # Root config
    "ReporterConfig",
    # Nested configs
    "LoggingConfig",
    "FileLoggingConfig",
]
