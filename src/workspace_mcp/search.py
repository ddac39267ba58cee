"""Ripgrep-backed search with normalized, paginated projections.

Ripgrep is run with ``--json`` so its output is one structured record per
line. Records are first mapped to a small set of tool-independent events
(match, context, file boundary), and :func:`normalize_events` reassembles
those events into one of three projections:

- ``content``: each matching line with its leading/trailing context
- ``files``: the files containing matches, in discovery order
- ``count``: per-file match counts, in discovery order

Pagination (offset/limit) is applied last, over the fully built projection,
so it never changes which matches exist.
"""

import asyncio
import base64
import json
import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

from workspace_mcp.exceptions import InvalidPatternError, WorkspaceIOError
from workspace_mcp.sandbox import relative_to_root, resolve_path

logger = logging.getLogger(__name__)

OutputMode = Literal["content", "files", "count"]
OUTPUT_MODES: tuple[str, ...] = ("content", "files", "count")

MAX_SEARCH_OUTPUT_BYTES = 10 * 1024 * 1024  # 10 MiB
_READ_CHUNK_BYTES = 64 * 1024
_STDERR_TAIL_BYTES = 4096


# ============================================================================
# Events
# ============================================================================


@dataclass(frozen=True)
class MatchEvent:
    """A matching line."""

    file: str
    line_number: int
    text: str
    kind: Literal["match"] = "match"


@dataclass(frozen=True)
class ContextEvent:
    """A non-matching line near a match. Carries no file of its own."""

    text: str
    line_number: int | None = None
    kind: Literal["context"] = "context"


@dataclass(frozen=True)
class FileBoundaryEvent:
    """A file was opened (``opened=True``) or closed by the search."""

    file: str
    opened: bool
    kind: Literal["boundary"] = "boundary"


SearchEvent = MatchEvent | ContextEvent | FileBoundaryEvent


# ============================================================================
# Projections
# ============================================================================


@dataclass(frozen=True)
class ContentMatch:
    """One matching line with optional context."""

    file: str
    line: int
    content: str
    context_before: tuple[str, ...] | None = None
    context_after: tuple[str, ...] | None = None
    mode: Literal["content"] = "content"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "mode": self.mode,
            "file": self.file,
            "line": self.line,
            "content": self.content,
        }
        if self.context_before is not None:
            result["context_before"] = list(self.context_before)
        if self.context_after is not None:
            result["context_after"] = list(self.context_after)
        return result


@dataclass(frozen=True)
class FileMatch:
    """A file containing at least one match."""

    file: str
    mode: Literal["files"] = "files"

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode, "file": self.file}


@dataclass(frozen=True)
class CountMatch:
    """Number of matching lines in one file."""

    file: str
    count: int
    mode: Literal["count"] = "count"

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode, "file": self.file, "count": self.count}


SearchResult = ContentMatch | FileMatch | CountMatch


@dataclass(frozen=True)
class SearchProjection:
    """Materialized search result for one output mode.

    Attributes:
        mode: Output mode shared by every entry in ``results``
        results: Paginated entries
        total: Number of entries before pagination
        truncated: True if the search output hit the size ceiling and was cut
    """

    mode: OutputMode
    results: tuple[SearchResult, ...] = field(default_factory=tuple)
    total: int = 0
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "total": self.total,
            "returned": len(self.results),
            "truncated": self.truncated,
            "matches": [result.to_dict() for result in self.results],
        }


@dataclass
class _PendingMatch:
    file: str
    line: int
    content: str
    before: list[str] | None = None
    after: list[str] | None = None


def _validate_mode(output_mode: str) -> None:
    if output_mode not in OUTPUT_MODES:
        raise ValueError(
            f"Invalid output mode '{output_mode}'. Valid modes: {', '.join(OUTPUT_MODES)}"
        )


def _paginate(items: Sequence[SearchResult], offset: int, limit: int | None) -> tuple:
    start = max(0, offset)
    if limit is None:
        return tuple(items[start:])
    return tuple(items[start : start + max(0, limit)])


def normalize_events(
    events: Iterable[SearchEvent],
    output_mode: str = "content",
    offset: int = 0,
    limit: int | None = None,
) -> SearchProjection:
    """Reassemble a search event stream into a paginated projection.

    Context lines are buffered until the next match or file boundary. A match
    takes the buffer as its leading context, and the previous match in the
    same file gets a copy of the same lines as trailing context (lines
    between two matches belong to both). A file boundary flushes the buffer
    to the last match and resets, so context never leaks across files.

    Args:
        events: Events in the order the search produced them
        output_mode: "content", "files" or "count"
        offset: Entries to skip (an offset past the end yields no entries)
        limit: Maximum entries to return (None for all)

    Returns:
        SearchProjection for the requested mode

    Raises:
        ValueError: If output_mode is not a known mode
    """
    _validate_mode(output_mode)

    matches: list[_PendingMatch] = []
    counts: dict[str, int] = {}  # insertion order is discovery order
    pending: list[str] = []
    previous: _PendingMatch | None = None

    for event in events:
        if isinstance(event, ContextEvent):
            pending.append(event.text)
        elif isinstance(event, MatchEvent):
            current = _PendingMatch(event.file, event.line_number, event.text)
            if pending:
                current.before = list(pending)
                if previous is not None and previous.file == event.file:
                    previous.after = list(pending)
                pending = []
            matches.append(current)
            previous = current
            counts[event.file] = counts.get(event.file, 0) + 1
        elif isinstance(event, FileBoundaryEvent):
            if pending and previous is not None:
                previous.after = list(pending)
            pending = []
            previous = None

    if pending and previous is not None:
        previous.after = list(pending)

    items: list[SearchResult]
    if output_mode == "content":
        items = [
            ContentMatch(
                file=m.file,
                line=m.line,
                content=m.content,
                context_before=tuple(m.before) if m.before is not None else None,
                context_after=tuple(m.after) if m.after is not None else None,
            )
            for m in matches
        ]
    elif output_mode == "files":
        items = [FileMatch(file=name) for name in counts]
    else:
        items = [CountMatch(file=name, count=count) for name, count in counts.items()]

    return SearchProjection(
        mode=output_mode,  # type: ignore[arg-type]
        results=_paginate(items, offset, limit),
        total=len(items),
    )


# ============================================================================
# Ripgrep adapter
# ============================================================================


def _decode_field(value: Any) -> str:
    """Decode a ripgrep ``{"text": ...}`` or ``{"bytes": <base64>}`` field."""
    if not isinstance(value, dict):
        return ""
    if "text" in value:
        return str(value["text"])
    if "bytes" in value:
        try:
            return base64.b64decode(value["bytes"]).decode("utf-8", errors="replace")
        except (ValueError, TypeError):
            return ""
    return ""


def _strip_line_ending(text: str) -> str:
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return text


def _relative_file(path: str, root: Path) -> str:
    # Ripgrep echoes paths as given; relative ones are relative to its cwd (the root)
    return relative_to_root(root, os.path.join(str(root), path))


def parse_ripgrep_event(line: str, root: Path) -> SearchEvent | None:
    """Map one line of ``rg --json`` output to a search event.

    Args:
        line: One JSON record
        root: Workspace root used to relativize file paths

    Returns:
        The corresponding event, or None for records that carry no event
        (``summary``, malformed JSON, matches without a line number)
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(record, dict):
        return None

    record_type = record.get("type")
    data = record.get("data") or {}

    if record_type in ("begin", "end"):
        path = _decode_field(data.get("path"))
        return FileBoundaryEvent(file=_relative_file(path, root), opened=record_type == "begin")

    if record_type == "match":
        line_number = data.get("line_number")
        if line_number is None:
            return None
        return MatchEvent(
            file=_relative_file(_decode_field(data.get("path")), root),
            line_number=int(line_number),
            text=_strip_line_ending(_decode_field(data.get("lines"))),
        )

    if record_type == "context":
        return ContextEvent(
            text=_strip_line_ending(_decode_field(data.get("lines"))),
            line_number=data.get("line_number"),
        )

    return None


async def _read_bounded(stream: asyncio.StreamReader, max_bytes: int) -> tuple[bytes, bool]:
    chunks: list[bytes] = []
    received = 0
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            return b"".join(chunks), False
        if received + len(chunk) > max_bytes:
            chunks.append(chunk[: max_bytes - received])
            return b"".join(chunks), True
        chunks.append(chunk)
        received += len(chunk)


async def _read_tail(stream: asyncio.StreamReader) -> bytes:
    tail = b""
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            return tail
        tail = (tail + chunk)[-_STDERR_TAIL_BYTES:]


async def run_ripgrep(
    args: list[str],
    cwd: Path,
    ripgrep_path: str = "rg",
    max_output_bytes: int = MAX_SEARCH_OUTPUT_BYTES,
) -> tuple[list[str], bool]:
    """Run ripgrep and collect its output lines under a byte ceiling.

    Arguments are passed as discrete argv tokens; no shell is involved.

    Args:
        args: Ripgrep arguments (without the executable)
        cwd: Working directory for the process
        ripgrep_path: Ripgrep executable
        max_output_bytes: Maximum stdout bytes to keep

    Returns:
        Tuple of (complete output lines, truncated flag). When the ceiling is
        hit the process is killed and the trailing partial line is dropped.

    Raises:
        InvalidPatternError: If ripgrep rejects the regex
        WorkspaceIOError: If ripgrep is missing or fails without output
    """
    try:
        process = await asyncio.create_subprocess_exec(
            ripgrep_path,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise WorkspaceIOError(
            f"Search failed: ripgrep executable '{ripgrep_path}' not found in PATH"
        ) from e
    except OSError as e:
        raise WorkspaceIOError(f"Search failed: could not start ripgrep: {e}") from e

    assert process.stdout is not None and process.stderr is not None
    stderr_task = asyncio.ensure_future(_read_tail(process.stderr))
    stdout, truncated = await _read_bounded(process.stdout, max_output_bytes)

    if truncated:
        logger.warning(f"Search output exceeded {max_output_bytes} bytes; results truncated")
        process.kill()

    stderr = await stderr_task
    returncode = await process.wait()

    lines = stdout.decode("utf-8", errors="replace").split("\n")
    if truncated:
        lines = lines[:-1]
    lines = [line for line in lines if line.strip()]

    if truncated or returncode == 0:
        return lines, truncated
    if returncode == 1:
        # Exit status 1 means "no matches"
        return [], False

    message = stderr.decode("utf-8", errors="replace").strip()
    if "regex parse error" in message:
        raise InvalidPatternError(f"Invalid search pattern: {message}")
    if lines:
        # Exit status 2 with output: some files were unreadable, keep what matched
        logger.warning(f"ripgrep reported errors (exit {returncode}): {message[-500:]}")
        return lines, False
    raise WorkspaceIOError(f"Search failed (exit {returncode}): {message[-500:]}")


def build_ripgrep_args(
    pattern: str,
    search_root: Path,
    glob: str | None = None,
    output_mode: str = "content",
    context_lines: int | None = None,
    case_insensitive: bool = False,
) -> list[str]:
    """Build the ripgrep argument list for a search."""
    # Sorted output keeps offset/limit pages stable across repeated searches
    args = ["--json", "--sort", "path"]
    if case_insensitive:
        args.append("--ignore-case")
    if context_lines and output_mode == "content":
        args.extend(["--context", str(context_lines)])
    if glob:
        args.extend(["--glob", glob])
    # "--" keeps patterns that start with "-" from being read as flags
    args.extend(["--", pattern, str(search_root)])
    return args


async def search_workspace(
    root: Path,
    pattern: str,
    path: str | None = None,
    glob: str | None = None,
    output_mode: str = "content",
    context_lines: int | None = None,
    case_insensitive: bool = False,
    limit: int | None = None,
    offset: int | None = None,
    ripgrep_path: str = "rg",
    max_output_bytes: int = MAX_SEARCH_OUTPUT_BYTES,
) -> SearchProjection:
    """Search a workspace and return the requested projection.

    Args:
        root: Workspace root
        pattern: Regex pattern (ripgrep syntax)
        path: Optional directory or file to scope the search
        glob: Optional glob filter (e.g. "**/*.py")
        output_mode: "content", "files" or "count"
        context_lines: Lines of context around each match (content mode only)
        case_insensitive: Case-insensitive matching
        limit: Maximum entries to return
        offset: Entries to skip

    Returns:
        SearchProjection with workspace-relative file paths

    Raises:
        ValueError: If output_mode is unknown
        PathEscapeError: If path leaves the workspace
        InvalidPatternError: If the pattern is rejected by ripgrep
        WorkspaceIOError: If the search path is missing or ripgrep fails
    """
    _validate_mode(output_mode)

    search_root = resolve_path(root, path or "")
    if not search_root.exists():
        raise WorkspaceIOError(f"Search failed: path not found: {path}")

    args = build_ripgrep_args(
        pattern, search_root, glob, output_mode, context_lines, case_insensitive
    )
    lines, truncated = await run_ripgrep(args, root, ripgrep_path, max_output_bytes)

    parsed = (parse_ripgrep_event(line, root) for line in lines)
    events = (event for event in parsed if event is not None)
    projection = normalize_events(events, output_mode, offset or 0, limit)
    logger.debug(
        f"Search '{pattern}' in {path or '.'}: {projection.total} {output_mode} result(s)"
    )
    return replace(projection, truncated=truncated)
