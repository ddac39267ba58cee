"""Workspace path sandboxing.

Every workspace operation calls :func:`resolve_path` before touching the
filesystem. Resolution is pure path arithmetic: no I/O, no symlink
resolution, and nothing is cached between calls.
"""

import logging
import os
from pathlib import Path, PurePosixPath

from workspace_mcp.exceptions import PathEscapeError

logger = logging.getLogger(__name__)

# Caller spellings that all mean "the workspace root"
ROOT_ALIASES = {"", "/", "."}


def resolve_path(root: Path | str, raw_path: str) -> Path:
    """Resolve a caller-supplied path against the workspace root.

    Agents frequently write "/src/main.py" meaning "src/main.py relative to
    the workspace", so exactly one leading separator is stripped before
    resolution. Parent segments are then collapsed and the result must be the
    root itself or a strict descendant of it.

    Args:
        root: Absolute workspace root directory
        raw_path: Path as supplied by the caller

    Returns:
        Absolute path inside the workspace

    Raises:
        PathEscapeError: If the normalized path leaves the workspace root

    Example:
        >>> resolve_path("/ws", "/src/app.py")
        PosixPath('/ws/src/app.py')
        >>> resolve_path("/ws", "/../etc/passwd")
        Traceback (most recent call last):
        ...
        PathEscapeError: Path escapes workspace root: /../etc/passwd
    """
    root_str = os.path.normpath(str(root))
    candidate = raw_path.strip()

    if candidate in ROOT_ALIASES:
        return Path(root_str)

    if candidate.startswith(("/", "\\")):
        candidate = candidate[1:]

    # Still absolute (e.g. "//etc") or drive-qualified: cannot be root-relative
    if os.path.isabs(candidate):
        logger.warning(f"Path outside workspace: {raw_path}")
        raise PathEscapeError(raw_path)

    resolved = os.path.normpath(os.path.join(root_str, candidate))
    root_prefix = root_str if root_str.endswith(os.sep) else root_str + os.sep

    if resolved != root_str and not resolved.startswith(root_prefix):
        logger.warning(f"Path traversal attempt detected: {raw_path} -> {resolved}")
        raise PathEscapeError(raw_path)

    logger.debug(f"Path resolved: {raw_path} -> {resolved}")
    return Path(resolved)


def relative_to_root(root: Path | str, resolved: Path | str) -> str:
    """Return the POSIX-style workspace-relative form of a resolved path.

    The workspace root itself maps to an empty string.
    """
    relative = os.path.relpath(str(resolved), os.path.normpath(str(root)))
    if relative == ".":
        return ""
    return PurePosixPath(*Path(relative).parts).as_posix()
