"""Filesystem removal with safety checks for reclaimer."""

import logging
import os
import shutil
from pathlib import Path

from reclaimer.scanner import expand_path

log = logging.getLogger(__name__)

# Paths that must never be removed as a whole (their content may be)
BLOCKED_PATHS = [
    "~",
    "~/Documents",
    "~/Desktop",
    "~/Pictures",
    "~/Music",
    "~/Movies",
    "~/Downloads",
    "/",
    "/System",
    "/Library",
    "/Applications",
    "/Users",
    "/home",
    "/usr",
    "/bin",
    "/sbin",
    "/etc",
    "/var",
    "/private",
]


def _canonical(path: Path) -> Path:
    # A symlink is removed itself, so only its parent is resolved
    if path.is_symlink():
        return path.parent.resolve() / path.name
    return path.resolve()


def is_path_safe(path: Path) -> bool:
    """
    Check if a path is safe to delete.

    ".", ".." and symlinked parents are resolved first, so "~/x/.." is
    recognised as the home directory.

    Args:
        path: Path to check

    Returns:
        True if safe to delete, False if it is a protected location
    """
    # Both the literal and the resolved form must be clear of the list
    forms = {Path(os.path.normpath(path)), _canonical(Path(path))}

    for blocked in BLOCKED_PATHS:
        expanded = expand_path(blocked)
        if forms & {Path(os.path.normpath(expanded)), expanded.resolve()}:
            return False

    return True


def remove_path(path: str | Path) -> bool:
    """
    Permanently delete a file or directory.

    Symbolic links are unlinked, never followed. Directories are
    removed recursively.

    Args:
        path: Path to delete (may contain ~)

    Returns:
        True if the path was removed, False if it did not exist,
        is protected or could not be removed
    """
    target = expand_path(path)

    if not target.is_symlink() and not target.exists():
        log.info("Nothing to delete at %s", target)
        return False

    if not is_path_safe(target):
        log.warning("Refusing to delete protected path %s", target)
        return False

    try:
        if target.is_symlink() or not target.is_dir():
            target.unlink()
        else:
            shutil.rmtree(target)
    except OSError as e:
        log.warning("Could not delete %s: %s", target, e)
        return False

    log.info("Deleted %s", target)
    return True
