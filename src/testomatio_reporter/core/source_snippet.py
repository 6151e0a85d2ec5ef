"""Source snippet extraction from failure stack traces.

This module implements the SourceSnippetExtractor class that turns a raw
stack trace into a short, annotated excerpt of the failing source code. It
handles:
- Artifact files referenced by `file://` URLs in the trace
- Locating the first project-owned `path:line` frame
- Windowing the source file around the failing line
- Per-language heuristics that keep a snippet inside a single test body

Stack trace formats are framework specific, so frame detection is a
best-effort scan rather than a parser.
"""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import structlog

from testomatio_reporter.models.stack import LanguageHint, SourceLine, SourceWindow, StackFrame

log = structlog.get_logger()

StopPredicate = Callable[[str], bool]


def _contains(fragment: str) -> StopPredicate:
    return lambda text: fragment in text


def _starts_with(prefix: str) -> StopPredicate:
    return lambda text: text.strip().startswith(prefix)


def _matches(pattern: str) -> StopPredicate:
    compiled = re.compile(pattern)
    return lambda text: compiled.match(text.strip()) is not None


# Lines that open the next test, method or annotation block
STOP_PATTERNS: dict[LanguageHint, tuple[StopPredicate, ...]] = {
    LanguageHint.PHP: (
        _starts_with("#["),
        _contains(" private function "),
        _contains(" protected function "),
        _contains(" public function "),
    ),
    LanguageHint.PYTHON: (
        _matches(r"^@\w+"),
        _contains(" def "),
    ),
    LanguageHint.RUBY: (
        _contains(" def "),
        _contains(" test "),
        _contains(" it "),
        _contains(" specify "),
        _contains(" context "),
    ),
    LanguageHint.TS: (
        _contains(" it("),
        _contains(" test("),
    ),
    LanguageHint.JS: (
        _contains(" it("),
        _contains(" test("),
    ),
    LanguageHint.JAVA: (
        _matches(r"^@\w+"),
        _contains(" public void "),
        _contains(" class "),
    ),
    LanguageHint.NONE: (),
}

VENDOR_DIRS = frozenset({"vendor", "node_modules", "site-packages", "dist-packages"})

BOLD_ON = "\x1b[1m"
BOLD_OFF = "\x1b[22m"


class SourceSnippetExtractor:
    """Extracts annotated source excerpts from stack traces.

    Example:
        extractor = SourceSnippetExtractor()
        snippet = extractor.fetch_source_code_from_stack_trace(error_stack)
        if snippet:
            print(snippet)
    """

    FILE_URL_PATTERN = re.compile(r"file:?/(/.*?\.(png|avi|webm|jpg|html|txt))")
    INVALID_PATH_CHARS = re.compile(r'[<>"|?*\x00-\x1f]')
    LINE_NUMBER_PATTERN = re.compile(r"^(\d+)")
    TITLE_TAIL_PATTERN = re.compile(r"[(\[@].*")

    # Window used for failure snippets
    PREPEND = 3
    LIMIT = 7

    def extract_files_from_trace(self, stack: str = "") -> list[str]:
        """Find existing artifact files referenced by `file://` URLs.

        Args:
            stack: Raw stack trace text

        Returns:
            Paths in order of appearance, repeats included
        """
        if not stack:
            return []

        return [
            match.group(1)
            for match in self.FILE_URL_PATTERN.finditer(stack)
            if os.path.exists(match.group(1))
        ]

    def extract_first_code_frame(self, stack: str = "") -> StackFrame | None:
        """Locate the first project-owned source reference in a stack trace.

        Args:
            stack: Raw stack trace text

        Returns:
            The first frame that points at an existing regular file outside
            vendor directories, or None
        """
        if not stack:
            return None

        tokens = self._candidate_tokens(stack.split("\n"))
        frames = (self._parse_frame(token) for token in tokens)
        frames = (frame for frame in frames if frame is not None)
        frames = (frame for frame in frames if not self._is_vendor_path(frame.file_path))
        frames = (frame for frame in frames if os.path.exists(frame.file_path))
        frames = (frame for frame in frames if os.path.isfile(frame.file_path))

        frame = next(frames, None)
        if frame is None:
            log.debug("code_frame_not_found")
            return None

        log.debug("code_frame_found", file_path=frame.file_path, line_number=frame.line_number)
        return frame

    def render_window(
        self,
        contents: str,
        line: int | None = None,
        *,
        title: str | None = None,
        prepend: int = 0,
        limit: int = 50,
        lang: LanguageHint | str | None = None,
    ) -> SourceWindow:
        """Cut a window of source lines around a target line.

        Args:
            contents: Full text of the source file
            line: 1-based target line
            title: Test title to search for when no line is given
            prepend: Lines of lookback before the target
            limit: Maximum number of lines to emit
            lang: Language hint enabling early termination (only without prepend)

        Returns:
            SourceWindow, empty when there is nothing to show
        """
        if not line and not title:
            return SourceWindow()

        lines = [text.removesuffix("\r") for text in contents.split("\n")]

        if line:
            target_line = int(line)
        else:
            needle = self.TITLE_TAIL_PATTERN.sub("", title or "")
            found = next((i for i, text in enumerate(lines) if needle in text), None)
            if found is None:
                return SourceWindow()
            target_line = found + 1

        start = target_line - 1 - prepend
        # End is anchored to the unclamped start
        end = min(start + limit, len(lines))
        if prepend:
            start = max(start, 0)
        elif start <= 0:
            return SourceWindow()

        if isinstance(lang, str):
            lang = LanguageHint(lang)
        stops = STOP_PATTERNS.get(lang, ()) if lang and not prepend else ()

        emitted: list[SourceLine] = []
        for index in range(start, end):
            text = lines[index]
            if index > start + 2 and any(stop(text) for stop in stops):
                break
            emitted.append(
                SourceLine(line_number=index + 1, text=text, is_target=index + 1 == target_line)
            )

        return SourceWindow(tuple(emitted))

    def fetch_source_code(
        self,
        contents: str,
        line: int | None = None,
        *,
        title: str | None = None,
        prepend: int = 0,
        limit: int = 50,
        lang: LanguageHint | str | None = None,
    ) -> str:
        """Return the window selected by `render_window` as plain text."""
        window = self.render_window(
            contents, line, title=title, prepend=prepend, limit=limit, lang=lang
        )
        return window.text

    def format_annotated(self, window: SourceWindow, bold: bool = False) -> str:
        """Render a window with line numbers, marking the target line.

        Args:
            window: Window to render
            bold: Emphasize the target line with ANSI bold

        Returns:
            Lines formatted as `<n> | <text>`, the target as `<n> > <text>`
        """
        rendered: list[str] = []
        for source_line in window:
            if source_line.is_target:
                text = f"{BOLD_ON}{source_line.text}{BOLD_OFF}" if bold else source_line.text
                rendered.append(f"{source_line.line_number} > {text}")
            else:
                rendered.append(f"{source_line.line_number} | {source_line.text}")
        return "\n".join(rendered)

    def fetch_source_code_from_stack_trace(self, stack: str = "", bold: bool | None = None) -> str:
        """Build an annotated snippet of the code that failed.

        Args:
            stack: Raw stack trace text
            bold: Emphasize the failing line (defaults to stdout being a TTY)

        Returns:
            Annotated snippet, or "" when no project frame is found

        Raises:
            OSError: If the located file cannot be read
        """
        frame = self.extract_first_code_frame(stack)
        if frame is None:
            return ""

        contents = Path(frame.file_path).read_text(encoding="utf-8", errors="replace")
        window = self.render_window(
            contents,
            frame.line_number,
            prepend=self.PREPEND,
            limit=self.LIMIT,
        )
        if not window:
            return ""

        if bold is None:
            bold = sys.stdout.isatty()
        return self.format_annotated(window, bold=bold)

    def _candidate_tokens(self, lines: Iterable[str]) -> Iterator[str]:
        """Yield the first colon-bearing token of every line that has one."""
        for line in lines:
            if ":" not in line:
                continue
            token = next((part for part in line.strip().split() if ":" in part), "")
            yield token.lstrip("([").rstrip(")],")

    def _parse_frame(self, token: str) -> StackFrame | None:
        """Split a `path:line` token, rejecting implausible paths."""
        path, sep, rest = token.partition(":")
        if not sep or not path or self.INVALID_PATH_CHARS.search(path):
            return None
        line_match = self.LINE_NUMBER_PATTERN.match(rest)
        if line_match is None:
            return None
        return StackFrame(file_path=path, line_number=int(line_match.group(1)))

    def _is_vendor_path(self, path: str) -> bool:
        return any(part in VENDOR_DIRS for part in re.split(r"[\\/]", path)[:-1])


_extractor = SourceSnippetExtractor()

extract_files_from_trace = _extractor.extract_files_from_trace
extract_first_code_frame = _extractor.extract_first_code_frame
render_window = _extractor.render_window
fetch_source_code = _extractor.fetch_source_code
format_annotated = _extractor.format_annotated
fetch_source_code_from_stack_trace = _extractor.fetch_source_code_from_stack_trace
