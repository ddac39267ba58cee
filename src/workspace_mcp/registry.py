"""Immutable name-to-workspace table built once at startup."""

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from workspace_mcp.config.schema import ServerSettings, WorkspaceSettings
from workspace_mcp.exceptions import UnknownWorkspaceError
from workspace_mcp.workspace import LocalWorkspace

logger = logging.getLogger(__name__)


class WorkspaceRegistry:
    """Read-only mapping of workspace key to LocalWorkspace.

    The registry is passed by reference to every consumer; nothing can add,
    remove or replace a workspace after construction.

    Example:
        >>> registry = WorkspaceRegistry.from_settings(load_workspace_settings())
        >>> registry.get("app").root
        PosixPath('/home/user/app')
    """

    def __init__(self, workspaces: Mapping[str, LocalWorkspace]):
        self._workspaces = MappingProxyType(dict(workspaces))

    @classmethod
    def from_settings(cls, settings: WorkspaceSettings) -> "WorkspaceRegistry":
        """Build a registry from loaded settings.

        Roots that do not exist are kept but logged, since a workspace may be
        mounted after the server starts.
        """
        server: ServerSettings = settings.server
        workspaces = {}
        for key, config in settings.workspaces.items():
            if not config.root.is_dir():
                logger.warning(f"Workspace '{key}' root does not exist or is not a directory: {config.root}")
            workspaces[key] = LocalWorkspace(config, server)
        return cls(workspaces)

    @property
    def workspaces(self) -> Mapping[str, LocalWorkspace]:
        return self._workspaces

    def get(self, name: str) -> LocalWorkspace:
        """Look up a workspace by key.

        Raises:
            UnknownWorkspaceError: If no workspace is configured under ``name``
        """
        try:
            return self._workspaces[name]
        except KeyError:
            raise UnknownWorkspaceError(name, self.names()) from None

    def names(self) -> list[str]:
        return list(self._workspaces)

    def __contains__(self, name: object) -> bool:
        return name in self._workspaces

    def __iter__(self) -> Iterator[str]:
        return iter(self._workspaces)

    def __len__(self) -> int:
        return len(self._workspaces)
