"""Link-aware existence checks with repository-escape detection.

A required file can be "present" as a symbolic link that aliases content
outside the audited tree. ``inspect_path`` classifies the entry without
following it, then resolves and canonicalizes the link target to decide
whether it stays inside the repository root.

Inspection never raises for filesystem problems: an unreadable or missing
entry is simply reported as absent.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from rhodibot.compliance.types import PathCheckResult

logger = logging.getLogger(__name__)

_ABSENT = PathCheckResult(exists=False)


def canonicalize(path: Path) -> Path:
    """Resolve ``path`` to an absolute, symlink-free form.

    When strict resolution fails (dangling link, loop, permission error)
    the existing prefix is resolved and the rest normalized; failing that,
    a lexically normalized absolute path is used. Callers never compare
    raw ``..``-bearing paths.
    """
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as exc:
        logger.debug("canonicalize fallback for %s: %s", path, exc)
    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError, ValueError):
        return Path(os.path.abspath(path))


def is_within(candidate: Path, root: Path) -> bool:
    """Path-segment prefix test; ``root`` itself counts as within."""
    return candidate.is_relative_to(root)


def inspect_path(path: Path, repo_root: Path) -> PathCheckResult:
    """Inspect ``path`` without following symlinks.

    Args:
        path: Candidate file or directory
        repo_root: Root of the repository being audited

    Returns:
        PathCheckResult with existence, symlink status, escape status and
        the resolved (pre-canonicalization) link target
    """
    try:
        st = path.lstat()
    except (OSError, ValueError) as exc:
        logger.debug("lstat failed for %s: %s", path, exc)
        return _ABSENT

    if not stat.S_ISLNK(st.st_mode):
        return PathCheckResult(exists=True)

    try:
        raw_target = Path(os.readlink(path))
    except (OSError, ValueError) as exc:
        # Escape status is indeterminate; leave it unflagged.
        logger.debug("readlink failed for %s: %s", path, exc)
        return PathCheckResult(exists=True, is_symlink=True)

    if raw_target.is_absolute():
        resolved_target = raw_target
    else:
        resolved_target = path.parent / raw_target

    canonical_root = canonicalize(repo_root)
    canonical_target = canonicalize(resolved_target)
    escapes_root = not is_within(canonical_target, canonical_root)

    logger.debug(
        "symlink %s -> %s (canonical %s, escapes=%s)",
        path,
        resolved_target,
        canonical_target,
        escapes_root,
    )
    return PathCheckResult(
        exists=True,
        is_symlink=True,
        escapes_root=escapes_root,
        target=resolved_target,
    )


def is_regular_file(path: Path) -> bool:
    """Follow links and report whether ``path`` is a regular file."""
    try:
        return path.is_file()
    except (OSError, ValueError):
        return False


def is_directory(path: Path) -> bool:
    """Follow links and report whether ``path`` is a directory."""
    try:
        return path.is_dir()
    except (OSError, ValueError):
        return False
