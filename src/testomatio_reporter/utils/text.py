"""Text helpers for test titles and terminal output."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

TEST_ID_PATTERN = re.compile(r"@T(\w+)")
SUITE_ID_PATTERN = re.compile(r"@S(\w+)")

# SGR color sequences only
COLOR_CODE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

# Any ANSI escape sequence, including cursor movement and OSC links
ANSI_PATTERN = re.compile(
    "|".join(
        [
            r"[\u001B\u009B][\[\]()#;?]*(?:(?:(?:[a-zA-Z\d]*(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\u0007)",
            r"(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PR-TZcf-ntqry=><~]))",
        ]
    )
)


def parse_test(title: str | None) -> str | None:
    """Extract a test id (`@T1a2b3c4d`) from a test title.

    Args:
        title: Test title

    Returns:
        Id without the `@T` marker, or None
    """
    if not title:
        return None
    match = TEST_ID_PATTERN.search(title)
    return match.group(1) if match else None


def parse_suite(title: str | None) -> str | None:
    """Extract a suite id (`@S1a2b3c4d`) from a suite title."""
    if not title:
        return None
    match = SUITE_ID_PATTERN.search(title)
    return match.group(1) if match else None


def specific_test_info(title: str | None, file: str | None) -> str | None:
    """Build a `file#ext#Test#title` key identifying a test within a file.

    Args:
        title: Test title
        file: Path of the file declaring the test

    Returns:
        Key string, or None unless both title and file are known
    """
    if not title or not file:
        return None
    return "#".join(os.path.basename(file).split(".")) + "#" + "#".join(title.split(" "))


def is_same_test(test: Any, other: Any) -> bool:
    """Check whether two reported test payloads describe the same test."""
    if not isinstance(test, Mapping) or not isinstance(other, Mapping):
        return False
    return (
        test.get("title") == other.get("title")
        and test.get("suite_title") == other.get("suite_title")
        and list((test.get("example") or {}).values())
        == list((other.get("example") or {}).values())
        and test.get("test_id") == other.get("test_id")
    )


def remove_color_codes(text: str) -> str:
    """Remove terminal color codes from text."""
    return COLOR_CODE_PATTERN.sub("", text)


def strip_ansi(text: str) -> str:
    """Remove every ANSI escape sequence from text."""
    return ANSI_PATTERN.sub("", text)


def is_valid_url(value: str) -> bool:
    """Check that a string is an absolute URL with scheme and host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def current_date_time(now: datetime | None = None) -> str:
    """Timestamp used in artifact names, e.g. `2024_3_7_9_5_2`."""
    now = now or datetime.now()
    return f"{now.year}_{now.month}_{now.day}_{now.hour}_{now.minute}_{now.second}"
