"""Line-window reads of workspace files."""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from workspace_mcp.exceptions import SizeLimitExceededError, WorkspaceIOError
from workspace_mcp.fileio import read_text
from workspace_mcp.sandbox import relative_to_root, resolve_path

logger = logging.getLogger(__name__)

MAX_READ_BYTES = 5 * 1024 * 1024  # 5 MiB
DEFAULT_READ_LIMIT = 500


@dataclass(frozen=True)
class ReadResult:
    """A bounded, line-numbered window of a file."""

    path: str
    content: str
    total_lines: int
    start_line: int
    end_line: int
    truncated: bool

    def to_dict(self) -> dict:
        return asdict(self)


def read_file(
    root: Path,
    relative_path: str,
    offset: int | None = None,
    limit: int | None = None,
    max_bytes: int = MAX_READ_BYTES,
    default_limit: int = DEFAULT_READ_LIMIT,
) -> ReadResult:
    """Read a window of lines from a workspace file.

    The file is split on ``\\n`` (a trailing newline yields a final empty
    line). Each returned line is prefixed with its absolute 1-indexed line
    number, right-justified so the window lines up.

    Args:
        root: Workspace root
        relative_path: Caller-supplied path
        offset: First line to return (1-indexed, default 1)
        limit: Maximum lines to return (default ``default_limit``)
        max_bytes: Size ceiling checked before reading
        default_limit: Window size used when ``limit`` is not given

    Returns:
        ReadResult. ``truncated`` is only set when the window stops short of
        the end of the file and the caller did not ask for a specific limit.

    Raises:
        PathEscapeError: If the path leaves the workspace
        SizeLimitExceededError: If the file is larger than ``max_bytes``
        WorkspaceIOError: If the file cannot be read
    """
    resolved = resolve_path(root, relative_path)
    display_path = relative_to_root(root, resolved)

    if resolved.is_file():
        try:
            file_size = resolved.stat().st_size
        except OSError as e:
            raise WorkspaceIOError(f"Error getting file size for {display_path}: {e}") from e

        if file_size > max_bytes:
            size_mb = file_size / 1024 / 1024
            limit_mb = max_bytes / 1024 / 1024
            raise SizeLimitExceededError(
                f"File too large: {size_mb:.2f}MB (max {limit_mb:g}MB): {display_path}. "
                "Use offset/limit to read specific sections, or use workspace_search "
                "to find specific content."
            )

    content = read_text(resolved, display_path)
    lines = content.split("\n")
    total_lines = len(lines)

    start_line = max(1, offset) if offset is not None else 1
    window = max(1, limit) if limit is not None else default_limit

    start_idx = start_line - 1
    end_idx = min(start_idx + window, total_lines)
    selected = lines[start_idx:end_idx]
    end_line = end_idx if selected else total_lines

    width = max(4, len(str(end_line)))
    numbered = "\n".join(
        f"{start_line + i:>{width}}\t{line}" for i, line in enumerate(selected)
    )

    # An explicit limit is an intentional partial read, not truncation
    truncated = end_idx < total_lines and limit is None

    logger.debug(f"Read {display_path} lines {start_line}-{end_line} of {total_lines}")
    return ReadResult(
        path=display_path,
        content=numbered,
        total_lines=total_lines,
        start_line=start_line,
        end_line=end_line,
        truncated=truncated,
    )
