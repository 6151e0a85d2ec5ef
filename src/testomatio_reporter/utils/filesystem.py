"""Directory helpers for report artifacts."""

from __future__ import annotations

import shutil
from pathlib import Path

import structlog

log = structlog.get_logger()


def create_dir(path: Path | str) -> None:
    """Create a directory and its parents if it does not exist yet."""
    path = Path(path)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        log.debug("dir_created", path=str(path))


def clear_dir(path: Path | str) -> None:
    """Remove a directory with all its contents, if present."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
        log.debug("dir_deleted", path=str(path))
    else:
        log.debug("dir_delete_skipped_missing", path=str(path))
