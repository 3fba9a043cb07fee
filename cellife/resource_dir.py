"""Locate a resources folder near the working or application directory."""

from __future__ import annotations

import os
import sys
from pathlib import Path

_MAX_LEVELS_UP = 3


def _default_app_dir() -> Path:
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


def search_and_set_resource_dir(
    folder_name: str, app_dir: str | os.PathLike[str] | None = None
) -> bool:
    """Find ``folder_name`` and make it the working directory.

    The working directory is checked first, then the application directory
    and up to three levels above it. Returns False, leaving the working
    directory unchanged, when the folder is not found.
    """
    working = Path.cwd() / folder_name
    if working.is_dir():
        os.chdir(working)
        return True

    base = Path(app_dir) if app_dir is not None else _default_app_dir()
    for level in range(_MAX_LEVELS_UP + 1):
        candidate = base.joinpath(*([".."] * level), folder_name)
        if candidate.is_dir():
            os.chdir(candidate.resolve())
            return True
    return False