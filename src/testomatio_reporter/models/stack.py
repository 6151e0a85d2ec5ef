"""Data models for stack frames and source windows."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class LanguageHint(Enum):
    """Language of the test framework that produced a stack trace."""

    PHP = "php"
    PYTHON = "python"
    RUBY = "ruby"
    TS = "ts"
    JS = "js"
    JAVA = "java"
    NONE = "none"


@dataclass(frozen=True)
class StackFrame:
    """A `path:line` reference taken from one line of a stack trace."""

    file_path: str
    line_number: int  # 1-based


@dataclass(frozen=True)
class SourceLine:
    """A single line of a source window."""

    line_number: int
    text: str
    is_target: bool = False


@dataclass(frozen=True)
class SourceWindow:
    """A contiguous slice of a source file around a failing line."""

    lines: tuple[SourceLine, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[SourceLine]:
        return iter(self.lines)

    @property
    def target(self) -> SourceLine | None:
        """The reported failing line, if the window reached it."""
        for line in self.lines:
            if line.is_target:
                return line
        return None

    @property
    def text(self) -> str:
        """Plain text of the window, without line numbers."""
        return "\n".join(line.text for line in self.lines)
