"""Core business logic components.

This module exports the main business logic:
- Reporter: Enriches test results and sends them to pipes
- SourceSnippetExtractor: Annotated source snippets from stack traces
- decamelize / humanize: Readable titles from code identifiers
"""

from testomatio_reporter.core.humanize import decamelize, humanize
from testomatio_reporter.core.reporter import Reporter, create_reporter
from testomatio_reporter.core.source_snippet import (
    SourceSnippetExtractor,
    extract_files_from_trace,
    extract_first_code_frame,
    fetch_source_code,
    fetch_source_code_from_stack_trace,
    format_annotated,
    render_window,
)

__all__ = [
    "Reporter",
    "SourceSnippetExtractor",
    "create_reporter",
    "decamelize",
    "extract_files_from_trace",
    "extract_first_code_frame",
    "fetch_source_code",
    "fetch_source_code_from_stack_trace",
    "format_annotated",
    "humanize",
    "render_window",
]
