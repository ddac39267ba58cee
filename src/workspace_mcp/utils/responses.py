"""Shared response helper functions for workspace tools.

Every tool returns one of two dict shapes so the calling agent can handle
results uniformly:

    {"success": True, "result": ..., "message": ...}
    {"success": False, "error": <code>, "message": ...}
"""

from typing import Any

from workspace_mcp.exceptions import WorkspaceError


def create_success_response(result: Any, message: str = "") -> dict:
    """Create standardized success response.

    Args:
        result: Operation result (can be any JSON-serializable type)
        message: Optional success message for logging/display

    Returns:
        Structured response dict with success=True

    Example:
        >>> create_success_response(result={"total_lines": 3}, message="Read 3 lines")
        {'success': True, 'result': {'total_lines': 3}, 'message': 'Read 3 lines'}
    """
    return {
        "success": True,
        "result": result,
        "message": message,
    }


def create_error_response(error: str, message: str) -> dict:
    """Create standardized error response.

    Args:
        error: Machine-readable error code (e.g., "path_escape")
        message: Human-friendly error message

    Returns:
        Structured response dict with success=False

    Example:
        >>> create_error_response(
        ...     error="not_allowlisted",
        ...     message="Write not allowed: docs/x.md does not match any allowlist pattern."
        ... )
        {'success': False, 'error': 'not_allowlisted', 'message': '...'}
    """
    return {
        "success": False,
        "error": error,
        "message": message,
    }


def error_response_from_exception(exc: WorkspaceError) -> dict:
    """Convert a workspace exception into an error response using its code."""
    return create_error_response(exc.code, str(exc))
