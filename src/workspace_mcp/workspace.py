"""Local filesystem workspace.

``LocalWorkspace`` is the per-workspace operation surface: read, write,
edit, list and search. Every call resolves its path through the sandbox
first and holds no state between calls apart from the immutable
configuration, so concurrent calls are independent.

Concurrent edits of the same file are not serialized: each edit re-reads
the file and the last write wins.
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from workspace_mcp.allowlist import is_path_allowed
from workspace_mcp.config.schema import ServerSettings, WorkspaceConfig
from workspace_mcp.editing import BatchEditResult, EditSpec, edit_many
from workspace_mcp.exceptions import AllowlistRejectionError, WorkspaceIOError
from workspace_mcp.fileio import atomic_write_text
from workspace_mcp.reading import ReadResult, read_file
from workspace_mcp.sandbox import relative_to_root, resolve_path
from workspace_mcp.search import SearchProjection, search_workspace

logger = logging.getLogger(__name__)

# Existing files up to this size are read to tell whitespace-only files apart
OVERWRITE_SCAN_BYTES = 64 * 1024


@dataclass(frozen=True)
class FileEntry:
    """One directory listing entry."""

    name: str
    path: str
    type: str  # "file" | "directory" | "symlink"
    size: int | None
    modified: str
    depth: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a whole-file write."""

    path: str
    bytes_written: int
    created: bool
    overwrote_existing: bool

    def to_dict(self) -> dict:
        return asdict(self)


def _entry_for(dir_entry: os.DirEntry, root: Path, depth: int) -> FileEntry | None:
    try:
        stats = dir_entry.stat()
    except OSError:
        # Broken symlinks, permission issues
        return None

    if dir_entry.is_symlink():
        entry_type = "symlink"
    elif dir_entry.is_dir(follow_symlinks=False):
        entry_type = "directory"
    else:
        entry_type = "file"

    return FileEntry(
        name=dir_entry.name,
        path=relative_to_root(root, dir_entry.path),
        type=entry_type,
        size=stats.st_size if entry_type == "file" else None,
        modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc).isoformat(),
        depth=depth,
    )


def _scan(
    directory: Path, root: Path, depth: int, max_depth: int | None, recursive: bool
) -> Iterator[FileEntry]:
    try:
        with os.scandir(directory) as it:
            dir_entries = sorted(it, key=lambda e: e.name)
    except PermissionError as e:
        raise WorkspaceIOError(
            f"Permission denied reading directory: {relative_to_root(root, directory) or '.'}"
        ) from e
    except OSError as e:
        raise WorkspaceIOError(f"Failed to list {relative_to_root(root, directory) or '.'}: {e}") from e

    entries = [entry for entry in (_entry_for(d, root, depth) for d in dir_entries) if entry]
    yield from entries

    if not recursive or (max_depth is not None and depth >= max_depth):
        return

    for entry in entries:
        if entry.type == "directory":
            yield from _scan(root / entry.path, root, depth + 1, max_depth, recursive)


def list_entries(
    root: Path,
    relative_path: str = "",
    recursive: bool = False,
    max_depth: int | None = None,
) -> list[FileEntry]:
    """List a workspace directory.

    Entries are sorted by name within each directory. In recursive mode each
    directory's own entries come first, followed by the contents of its
    subdirectories. Symlinks are reported but never followed.

    Args:
        root: Workspace root
        relative_path: Directory to list ("", "/" or "." for the root)
        recursive: Descend into subdirectories
        max_depth: Deepest level to list when recursive (0 = top level only)

    Returns:
        List of FileEntry with workspace-relative paths

    Raises:
        PathEscapeError: If the path leaves the workspace
        WorkspaceIOError: If the path is missing, not a directory or unreadable
    """
    resolved = resolve_path(root, relative_path)
    display_path = relative_to_root(root, resolved) or "."

    if not resolved.exists():
        raise WorkspaceIOError(f"Path not found: {display_path}")
    if not resolved.is_dir():
        raise WorkspaceIOError(f"Path is not a directory: {display_path}")

    return list(_scan(resolved, Path(os.path.normpath(str(root))), 0, max_depth, recursive))


class LocalWorkspace:
    """Operations on one configured workspace.

    Example:
        >>> config = WorkspaceConfig(root="/home/user/app", name="App", writeAllowlist=["src/**"])
        >>> ws = LocalWorkspace(config)
        >>> ws.read("src/main.py").total_lines
        42
    """

    def __init__(self, config: WorkspaceConfig, settings: ServerSettings | None = None):
        """Initialize LocalWorkspace.

        Args:
            config: Immutable workspace configuration
            settings: Operation limits (defaults if omitted)
        """
        self.config = config
        self.settings = settings or ServerSettings()

    @property
    def root(self) -> Path:
        return self.config.root

    @property
    def name(self) -> str:
        return self.config.name

    def read(self, path: str, offset: int | None = None, limit: int | None = None) -> ReadResult:
        """Read a line window of a file (see :func:`read_file`)."""
        return read_file(
            self.root,
            path,
            offset=offset,
            limit=limit,
            max_bytes=self.settings.max_read_bytes,
            default_limit=self.settings.default_read_limit,
        )

    def write(self, path: str, content: str) -> WriteResult:
        """Write a whole file, creating parent directories as needed.

        Overwriting a non-empty file is allowed but logged as a warning:
        edits are the intended tool for changing existing files.

        Raises:
            PathEscapeError: If the path leaves the workspace
            AllowlistRejectionError: If the path is not allowlisted
            WorkspaceIOError: If the write fails
        """
        resolved = resolve_path(self.root, path)
        display_path = relative_to_root(self.root, resolved)

        if not is_path_allowed(display_path, self.config.write_allowlist):
            raise AllowlistRejectionError(display_path, self.config.write_allowlist, action="Write")

        if resolved.is_dir():
            raise WorkspaceIOError(f"Path is a directory: {display_path}")

        existed_before = resolved.exists()
        overwrote_existing = False
        if existed_before:
            overwrote_existing = self._has_content(resolved, display_path)
            if overwrote_existing:
                logger.warning(
                    f"Overwriting existing file {display_path} in {self.name}. "
                    "Consider workspace_edit for surgical changes."
                )

        try:
            resolved.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceIOError(f"Error creating parent directories for {display_path}: {e}") from e

        bytes_written = atomic_write_text(resolved, content, display_path)
        logger.info(f"Wrote to {self.name}: {display_path} ({bytes_written} bytes)")

        return WriteResult(
            path=display_path,
            bytes_written=bytes_written,
            created=not existed_before,
            overwrote_existing=overwrote_existing,
        )

    def edit(
        self,
        paths: str | list[str],
        old_string: str,
        new_string: str,
        replace_all: bool = False,
        use_regex: bool = False,
    ) -> BatchEditResult:
        """Apply one find/replace to one or more files.

        Per-file failures are reported in the result, never raised.
        """
        targets = [paths] if isinstance(paths, str) else list(paths)
        spec = EditSpec(
            old_pattern=old_string,
            new_pattern=new_string,
            replace_all=replace_all,
            use_regex=use_regex,
        )
        result = edit_many(
            self.root,
            targets,
            spec,
            self.config.write_allowlist,
            self.settings.preview_context_lines,
        )
        logger.info(
            f"Edit in {self.name}: {result.succeeded}/{result.total_files} file(s) succeeded"
        )
        return result

    def list(
        self, path: str = "", recursive: bool = False, max_depth: int | None = None
    ) -> list[FileEntry]:
        """List directory contents (see :func:`list_entries`)."""
        return list_entries(self.root, path, recursive=recursive, max_depth=max_depth)

    async def search(
        self,
        pattern: str,
        path: str | None = None,
        glob: str | None = None,
        output_mode: str = "content",
        context_lines: int | None = None,
        case_insensitive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchProjection:
        """Search the workspace with ripgrep (see :func:`search_workspace`)."""
        return await search_workspace(
            self.root,
            pattern,
            path=path,
            glob=glob,
            output_mode=output_mode,
            context_lines=context_lines,
            case_insensitive=case_insensitive,
            limit=limit,
            offset=offset,
            ripgrep_path=self.settings.ripgrep_path,
            max_output_bytes=self.settings.max_search_output_bytes,
        )

    @staticmethod
    def _has_content(resolved: Path, display_path: str) -> bool:
        """Whether an existing file holds anything besides whitespace.

        Files larger than ``OVERWRITE_SCAN_BYTES`` count as non-empty
        without being read.
        """
        try:
            size = resolved.stat().st_size
            if size == 0:
                return False
            if size > OVERWRITE_SCAN_BYTES:
                return True
            return bool(resolved.read_bytes().strip())
        except OSError as e:
            raise WorkspaceIOError(f"Error reading existing file {display_path}: {e}") from e
