"""Custom exceptions for workspace operations.

This module defines the error taxonomy shared by every workspace operation.
Each exception carries a machine-readable ``code`` which the tool boundary
copies into the structured error response, so callers can switch on the
kind of failure without parsing messages.

Exception Hierarchy:
    WorkspaceError (base)
    ├── PathEscapeError
    ├── AllowlistRejectionError
    ├── PatternNotFoundError
    ├── NotUniqueError
    ├── InvalidPatternError
    ├── SizeLimitExceededError
    ├── WorkspaceIOError
    └── UnknownWorkspaceError
"""


class WorkspaceError(Exception):
    """Base exception for all workspace operation errors.

    Attributes:
        code: Machine-readable error code used in error responses
    """

    code = "workspace_error"


class PathEscapeError(WorkspaceError):
    """Path resolves outside the workspace root.

    Attributes:
        raw_path: The caller-supplied path, verbatim

    Example:
        >>> raise PathEscapeError("../../etc/passwd")
    """

    code = "path_escape"

    def __init__(self, raw_path: str):
        """Initialize PathEscapeError.

        Args:
            raw_path: The offending caller-supplied path
        """
        self.raw_path = raw_path
        super().__init__(f"Path escapes workspace root: {raw_path}")


class AllowlistRejectionError(WorkspaceError):
    """Path does not match any pattern of the write allowlist."""

    code = "not_allowlisted"

    def __init__(self, path: str, patterns: list[str] | tuple[str, ...], action: str = "Write"):
        """Initialize AllowlistRejectionError.

        Args:
            path: Workspace-relative path that was rejected
            patterns: Configured allowlist patterns
            action: Operation name used in the message ("Write" or "Edit")
        """
        self.path = path
        self.patterns = list(patterns)
        allowed = ", ".join(self.patterns) if self.patterns else "(none configured)"
        super().__init__(
            f"{action} not allowed: {path} does not match any allowlist pattern. "
            f"Allowed patterns: {allowed}"
        )


class PatternNotFoundError(WorkspaceError):
    """Target string or pattern is absent from the file."""

    code = "not_found"


class NotUniqueError(WorkspaceError):
    """Pattern matches more than once and replace_all was not requested.

    Attributes:
        occurrences: Exact number of matches found
    """

    code = "not_unique"

    def __init__(self, occurrences: int):
        """Initialize NotUniqueError.

        Args:
            occurrences: Number of matches found in the file
        """
        self.occurrences = occurrences
        super().__init__(
            f"Pattern appears {occurrences} times in file (must be unique). "
            "Use replaceAll=true to replace all occurrences, or include more "
            "surrounding context to match exactly one."
        )


class InvalidPatternError(WorkspaceError):
    """Regex pattern failed to compile or the pattern is empty."""

    code = "invalid_pattern"


class SizeLimitExceededError(WorkspaceError):
    """File exceeds the read size ceiling."""

    code = "size_limit_exceeded"


class WorkspaceIOError(WorkspaceError):
    """Underlying filesystem or process error."""

    code = "io_failure"


class UnknownWorkspaceError(WorkspaceError):
    """Workspace name is not configured.

    Attributes:
        name: Requested workspace name
        available: Configured workspace names
    """

    code = "unknown_workspace"

    def __init__(self, name: str, available: list[str]):
        """Initialize UnknownWorkspaceError.

        Args:
            name: Requested workspace name
            available: Names of configured workspaces
        """
        self.name = name
        self.available = available
        listed = ", ".join(available) if available else "none configured"
        super().__init__(f"Unknown workspace: {name}. Available: {listed}")
