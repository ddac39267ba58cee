"""Workspace tools package."""

from workspace_mcp.tools.toolset import WorkspaceToolset
from workspace_mcp.tools.workspace_tools import WorkspaceTools

__all__ = ["WorkspaceToolset", "WorkspaceTools"]
