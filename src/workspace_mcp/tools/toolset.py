"""Base class for workspace toolsets.

Toolsets encapsulate related tools with shared dependencies, avoiding global
state and enabling dependency injection for testing.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from workspace_mcp.exceptions import WorkspaceError
from workspace_mcp.registry import WorkspaceRegistry
from workspace_mcp.utils.responses import (
    create_error_response,
    create_success_response,
    error_response_from_exception,
)


class WorkspaceToolset(ABC):
    """Base class for workspace toolsets.

    Each toolset receives the immutable WorkspaceRegistry built at startup,
    which makes it easy to construct against temporary directories in tests.

    Example:
        >>> class PingTools(WorkspaceToolset):
        ...     def get_tools(self):
        ...         return [self.ping]
        ...
        ...     async def ping(self) -> dict:
        ...         return self._create_success_response(result=self.registry.names())
    """

    def __init__(self, registry: WorkspaceRegistry):
        """Initialize toolset with the workspace registry.

        Args:
            registry: Configured workspaces by key
        """
        self.registry = registry

    @abstractmethod
    def get_tools(self) -> list[Callable]:
        """Get list of tool functions.

        Tools are async callables with type hints and docstrings that the
        transport layer turns into tool schemas.

        Returns:
            List of callable tool functions
        """
        pass

    def _create_success_response(self, result: Any, message: str = "") -> dict:
        """Create standardized success response.

        Args:
            result: Tool execution result
            message: Optional success message

        Returns:
            Structured response dict with success=True
        """
        return create_success_response(result, message)

    def _create_error_response(self, error: str, message: str) -> dict:
        """Create standardized error response.

        Tools return this instead of raising so the agent can recover.

        Args:
            error: Machine-readable error code (e.g., "path_escape")
            message: Human-friendly error message

        Returns:
            Structured response dict with success=False
        """
        return create_error_response(error, message)

    def _error_from_exception(self, exc: WorkspaceError) -> dict:
        return error_response_from_exception(exc)
