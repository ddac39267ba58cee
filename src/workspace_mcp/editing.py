"""Find-and-replace editing of workspace files.

Edits are stateless: every call re-reads the file from disk and re-checks
that the pattern exists (and is unique unless ``replace_all`` is set) before
anything is written. Nothing is remembered between calls, so there is no
"read before write" bookkeeping to go stale across reconnects.

Key Features:
- Literal mode (default): the pattern is matched as exact text
- Regex mode: Python ``re`` syntax, replacement supports ``$1``, ``$<name>``,
  ``$&`` and ``$$``
- Uniqueness enforcement with the exact occurrence count on failure
- Before/after preview around the first change
- Atomic writes, only after validation succeeds
- Batch application with per-file isolation of failures
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from workspace_mcp.allowlist import is_path_allowed
from workspace_mcp.exceptions import (
    AllowlistRejectionError,
    InvalidPatternError,
    NotUniqueError,
    PatternNotFoundError,
    WorkspaceError,
)
from workspace_mcp.fileio import atomic_write_text, read_text
from workspace_mcp.sandbox import relative_to_root, resolve_path

logger = logging.getLogger(__name__)

# Sought text is cut to this many characters in not-found messages
NOT_FOUND_EXCERPT_CHARS = 100
DEFAULT_PREVIEW_CONTEXT_LINES = 3

_REPLACEMENT_TOKEN = re.compile(r"\$(?:(\$)|(&)|(\d{1,2})|<([A-Za-z_]\w*)>)")


class EditErrorKind(str, Enum):
    """Failure classification for a single-file edit."""

    NOT_FOUND = "not_found"
    NOT_UNIQUE = "not_unique"
    INVALID_PATTERN = "invalid_pattern"
    NOT_ALLOWLISTED = "not_allowlisted"
    PATH_ESCAPE = "path_escape"
    IO_FAILURE = "io_failure"


class BatchStatus(str, Enum):
    """Aggregate outcome of a batch edit."""

    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class EditSpec:
    """One find/replace operation, applied identically to every target file."""

    old_pattern: str
    new_pattern: str
    replace_all: bool = False
    use_regex: bool = False


@dataclass(frozen=True)
class EditPreview:
    """Line-numbered excerpt of a file before and after an edit."""

    before: str
    after: str
    line_number: int

    def to_dict(self) -> dict[str, Any]:
        return {"before": self.before, "after": self.after, "line_number": self.line_number}


@dataclass(frozen=True)
class EditOutcome:
    """Result of editing one file.

    Exactly one of two shapes: ``success=True`` with ``occurrences``,
    ``lines_changed`` and ``preview``; or ``success=False`` with
    ``error_kind`` and ``error``.
    """

    file: str
    success: bool
    occurrences: int = 0
    lines_changed: int = 0
    preview: EditPreview | None = None
    error_kind: EditErrorKind | None = None
    error: str | None = None

    @classmethod
    def failure(cls, file: str, exc: WorkspaceError) -> "EditOutcome":
        """Build a failed outcome from a workspace exception."""
        return cls(file=file, success=False, error_kind=EditErrorKind(exc.code), error=str(exc))

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {
                "file": self.file,
                "success": False,
                "error_kind": self.error_kind.value if self.error_kind else None,
                "error": self.error,
            }
        return {
            "file": self.file,
            "success": True,
            "occurrences": self.occurrences,
            "lines_changed": self.lines_changed,
            "preview": self.preview.to_dict() if self.preview else None,
        }


@dataclass(frozen=True)
class BatchEditResult:
    """Aggregate of independent per-file edit outcomes, in input order."""

    results: tuple[EditOutcome, ...] = field(default_factory=tuple)

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.results if outcome.success)

    @property
    def failed(self) -> int:
        return self.total_files - self.succeeded

    @property
    def status(self) -> BatchStatus:
        """Distinguish full success, partial success and full failure."""
        if self.total_files > 0 and self.failed == 0:
            return BatchStatus.SUCCEEDED
        if self.succeeded == 0:
            return BatchStatus.FAILED
        return BatchStatus.PARTIAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_files": self.total_files,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "status": self.status.value,
            "results": [outcome.to_dict() for outcome in self.results],
        }


def compile_edit_pattern(spec: EditSpec) -> re.Pattern[str]:
    """Compile the search pattern of an edit.

    Args:
        spec: Edit specification

    Returns:
        Compiled pattern (literal text is escaped first)

    Raises:
        InvalidPatternError: If the pattern is empty or the regex is invalid
    """
    if not spec.old_pattern:
        raise InvalidPatternError("oldString cannot be empty. Provide the exact text to match.")

    if not spec.use_regex:
        return re.compile(re.escape(spec.old_pattern))

    try:
        return re.compile(spec.old_pattern)
    except re.error as e:
        raise InvalidPatternError(f"Invalid regex pattern '{spec.old_pattern}': {e}") from e


def expand_replacement(template: str, match: re.Match[str]) -> str:
    """Expand ``$``-style backreferences in a replacement for one match.

    Supported tokens: ``$1``..``$99`` (numbered group), ``$<name>`` (named
    group), ``$&`` (whole match) and ``$$`` (literal dollar). References to
    groups that do not exist are kept verbatim; groups that did not take part
    in the match expand to an empty string.

    Example:
        >>> m = re.search(r"func (\\w+)\\(", "func myFunc(")
        >>> expand_replacement("fn $1(", m)
        'fn myFunc('
    """
    group_count = match.re.groups

    def _substitute(token: re.Match[str]) -> str:
        if token.group(1):
            return "$"
        if token.group(2):
            return match.group(0)
        digits = token.group(3)
        if digits is not None:
            index = int(digits)
            if 1 <= index <= group_count:
                return match.group(index) or ""
            # "$12" with fewer than 12 groups means group 1 followed by "2"
            if len(digits) == 2 and 1 <= int(digits[0]) <= group_count:
                return (match.group(int(digits[0])) or "") + digits[1]
            return token.group(0)
        name = token.group(4)
        if name in match.re.groupindex:
            return match.group(name) or ""
        return token.group(0)

    return _REPLACEMENT_TOKEN.sub(_substitute, template)


def _replacement_for(spec: EditSpec) -> Callable[[re.Match[str]], str]:
    if spec.use_regex:
        return lambda match: expand_replacement(spec.new_pattern, match)
    # Literal mode inserts the replacement text as-is
    return lambda match: spec.new_pattern


def _excerpt(text: str) -> str:
    if len(text) > NOT_FOUND_EXCERPT_CHARS:
        return text[:NOT_FOUND_EXCERPT_CHARS] + "..."
    return text


def _format_lines(lines: list[str], start: int) -> str:
    return "\n".join(f"{start + i + 1:>4}: {line}" for i, line in enumerate(lines))


def generate_edit_preview(
    original: str,
    edited: str,
    first_match: re.Match[str],
    replacement: str,
    context_lines: int = DEFAULT_PREVIEW_CONTEXT_LINES,
) -> EditPreview:
    """Render the region around the first change in both versions.

    Args:
        original: Content before the edit
        edited: Content after the edit
        first_match: First match of the pattern in ``original``
        replacement: Text that replaced ``first_match``
        context_lines: Unchanged lines shown on each side of the change

    Returns:
        EditPreview with 1-indexed, line-numbered excerpts
    """
    line_number = original.count("\n", 0, first_match.start()) + 1
    old_span = first_match.group(0).count("\n")
    new_span = replacement.count("\n")

    original_lines = original.split("\n")
    edited_lines = edited.split("\n")

    start = max(0, line_number - 1 - context_lines)
    before_end = min(len(original_lines), line_number + old_span + context_lines)
    after_end = min(len(edited_lines), line_number + new_span + context_lines)

    return EditPreview(
        before=_format_lines(original_lines[start:before_end], start),
        after=_format_lines(edited_lines[start:after_end], start),
        line_number=line_number,
    )


def _apply_edit(
    resolved: Path,
    display_path: str,
    spec: EditSpec,
    allowlist: Iterable[str],
    preview_context_lines: int,
) -> EditOutcome:
    patterns = tuple(allowlist)

    if not is_path_allowed(display_path, patterns):
        raise AllowlistRejectionError(display_path, patterns, action="Edit")

    # Always read fresh from disk: safety is re-verified at edit time
    content = read_text(resolved, display_path)
    pattern = compile_edit_pattern(spec)

    matches = list(pattern.finditer(content))
    if not matches:
        if spec.use_regex:
            raise PatternNotFoundError(f"Regex pattern not found in file: {_excerpt(spec.old_pattern)}")
        raise PatternNotFoundError(f"String not found in file: {_excerpt(spec.old_pattern)}")

    occurrences = len(matches)
    if occurrences > 1 and not spec.replace_all:
        raise NotUniqueError(occurrences)

    replace = _replacement_for(spec)
    new_content = pattern.sub(replace, content, count=0 if spec.replace_all else 1)

    preview = generate_edit_preview(
        content, new_content, matches[0], replace(matches[0]), preview_context_lines
    )
    lines_changed = len(new_content.split("\n")) - len(content.split("\n"))

    atomic_write_text(resolved, new_content, display_path)
    logger.info(f"Edited {display_path} ({occurrences} occurrence(s))")

    return EditOutcome(
        file=display_path,
        success=True,
        occurrences=occurrences,
        lines_changed=lines_changed,
        preview=preview,
    )


def edit_file(
    root: Path,
    relative_path: str,
    spec: EditSpec,
    allowlist: Iterable[str],
    preview_context_lines: int = DEFAULT_PREVIEW_CONTEXT_LINES,
) -> EditOutcome:
    """Apply one find/replace to one file.

    Failures are returned as outcomes rather than raised so that batch
    edits can continue past them.

    Args:
        root: Workspace root
        relative_path: Caller-supplied path
        spec: Edit specification
        allowlist: Write/edit allowlist patterns
        preview_context_lines: Context lines around the change in the preview

    Returns:
        EditOutcome describing the success or the classified failure

    Example:
        >>> outcome = edit_file(root, "src/app.py", EditSpec("DEBUG = True", "DEBUG = False"), ["src/**"])
        >>> outcome.occurrences
        1
    """
    try:
        resolved = resolve_path(root, relative_path)
    except WorkspaceError as e:
        logger.debug(f"Edit failed for {relative_path}: {e}")
        return EditOutcome.failure(relative_path, e)

    display_path = relative_to_root(root, resolved)
    try:
        return _apply_edit(resolved, display_path, spec, allowlist, preview_context_lines)
    except WorkspaceError as e:
        logger.debug(f"Edit failed for {display_path}: {e}")
        return EditOutcome.failure(display_path, e)


def edit_many(
    root: Path,
    paths: Iterable[str],
    spec: EditSpec,
    allowlist: Iterable[str],
    preview_context_lines: int = DEFAULT_PREVIEW_CONTEXT_LINES,
) -> BatchEditResult:
    """Apply the same find/replace to each file independently, in order.

    There is no cross-file transaction: a file that fails (pattern missing,
    not unique, not allowlisted, I/O error) does not stop the others.
    """
    patterns = tuple(allowlist)
    outcomes = tuple(
        edit_file(root, path, spec, patterns, preview_context_lines) for path in paths
    )
    return BatchEditResult(results=outcomes)
