"""Low-level text file helpers shared by read, write and edit operations."""

import os
import shutil
import tempfile
from pathlib import Path

from workspace_mcp.exceptions import WorkspaceIOError


def read_text(path: Path, display_path: str) -> str:
    """Read a UTF-8 text file without newline translation.

    Args:
        path: Resolved absolute path
        display_path: Workspace-relative path used in error messages

    Returns:
        File content exactly as stored (``\\r\\n`` preserved)

    Raises:
        WorkspaceIOError: If the file is missing, not a regular file,
            unreadable or not valid UTF-8
    """
    if not path.exists():
        raise WorkspaceIOError(f"File not found: {display_path}")
    if not path.is_file():
        raise WorkspaceIOError(f"Path is not a file: {display_path}")

    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise WorkspaceIOError(f"File is not valid UTF-8 text: {display_path} ({e.reason})") from e
    except PermissionError as e:
        raise WorkspaceIOError(f"Permission denied reading file: {display_path}") from e
    except OSError as e:
        raise WorkspaceIOError(f"Error reading file {display_path}: {e}") from e


def atomic_write_text(path: Path, content: str, display_path: str) -> int:
    """Write text atomically (temp file in the same directory + rename).

    The existing file's permission bits are carried over to the new file.

    Args:
        path: Resolved absolute path
        content: Text to write, stored without newline translation
        display_path: Workspace-relative path used in error messages

    Returns:
        Number of bytes written

    Raises:
        WorkspaceIOError: If the write or rename fails
    """
    data = content.encode("utf-8")

    try:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(data)
            if path.exists():
                shutil.copymode(path, temp_path)
            os.replace(temp_path, path)
        except BaseException:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
    except PermissionError as e:
        raise WorkspaceIOError(f"Permission denied writing to: {display_path}") from e
    except OSError as e:
        raise WorkspaceIOError(f"Error writing to {display_path}: {e}") from e

    return len(data)
