"""Temporary files created while fetching dumps, removed at the end of a run."""

from __future__ import annotations

import logging
import os
import threading
from typing import BinaryIO

logger = logging.getLogger(__name__)

MAX_TEMP_INDEX = 10000

_temp_files: list[str] = []
_temp_files_lock = threading.Lock()


def new_temp_file(directory: str, prefix: str, suffix: str) -> BinaryIO:
    """
    Create a new file named prefix + NNN + suffix in directory.

    The first free index wins; an existing file is never reused.
    """
    for index in range(1, MAX_TEMP_INDEX):
        path = os.path.join(directory, f"{prefix}{index:03d}{suffix}")
        try:
            return open(path, "xb")
        except FileExistsError:
            continue
    raise OSError(f"could not create file of the form {prefix}001{suffix}")


def defer_delete_temp_file(path: str) -> None:
    with _temp_files_lock:
        _temp_files.append(path)


def cleanup_temp_files() -> None:
    """Remove every file registered with defer_delete_temp_file."""
    with _temp_files_lock:
        for path in _temp_files:
            try:
                os.remove(path)
            except OSError as exc:
                logger.warning("could not remove temporary file %s: %s", path, exc)
            else:
                logger.debug("removed temporary file %s", path)
        _temp_files.clear()
