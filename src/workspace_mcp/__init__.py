"""workspace-mcp - Sandboxed workspace file tools for agents."""

from importlib.metadata import PackageNotFoundError, version

# Read version from package metadata (pyproject.toml)
try:
    __version__ = version("workspace-mcp")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "0.0.0.dev"

from workspace_mcp.config import WorkspaceConfig, WorkspaceSettings, load_workspace_settings
from workspace_mcp.registry import WorkspaceRegistry
from workspace_mcp.workspace import LocalWorkspace

__all__ = [
    "LocalWorkspace",
    "WorkspaceConfig",
    "WorkspaceRegistry",
    "WorkspaceSettings",
    "__version__",
    "load_workspace_settings",
]
