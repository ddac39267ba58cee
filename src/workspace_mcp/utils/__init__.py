"""Utility helpers for workspace-mcp."""

from workspace_mcp.utils.responses import (
    create_error_response,
    create_success_response,
    error_response_from_exception,
)

__all__ = [
    "create_error_response",
    "create_success_response",
    "error_response_from_exception",
]
