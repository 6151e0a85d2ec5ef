"""Data models and transfer objects."""

from .report import ArtifactCredentials, RunData, RunStatus, TestData, TestStatus
from .stack import LanguageHint, SourceLine, SourceWindow, StackFrame

__all__ = [
    # Stack models
    "LanguageHint",
    "StackFrame",
    "SourceLine",
    "SourceWindow",
    # Report models
    "TestStatus",
    "RunStatus",
    "TestData",
    "RunData",
    "ArtifactCredentials",
]
