"""MCP stdio server exposing the workspace tools."""

import inspect
import logging

from mcp.server.fastmcp import FastMCP

from workspace_mcp.registry import WorkspaceRegistry
from workspace_mcp.tools import WorkspaceTools

logger = logging.getLogger(__name__)

SERVER_NAME = "workspace-mcp"

SERVER_INSTRUCTIONS = """\
Sandboxed access to configured workspaces. Every tool takes the workspace key
first and paths relative to that workspace's root.

- Use workspace_search and workspace_read (with offset/limit) to explore.
- Use workspace_edit for changes to existing files; old_string must match
  exactly once unless replace_all is set.
- Use workspace_write only for new files or complete rewrites.
- Writes and edits are limited to each workspace's write allowlist.
"""


def _describe_workspaces(registry: WorkspaceRegistry) -> str:
    if not len(registry):
        return "No workspaces are configured."
    lines = [
        f"- {key}: {ws.name} ({ws.root})" for key, ws in registry.workspaces.items()
    ]
    return "Available workspaces:\n" + "\n".join(lines)


def build_server(registry: WorkspaceRegistry) -> FastMCP:
    """Create a FastMCP server with the five workspace tools registered.

    Tool descriptions end with the list of configured workspaces so the
    agent knows which keys are valid.

    Args:
        registry: Configured workspaces

    Returns:
        FastMCP server ready to ``run()``
    """
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    tools = WorkspaceTools(registry)
    workspace_listing = _describe_workspaces(registry)

    registered = tools.get_tools()
    for tool in registered:
        description = f"{inspect.getdoc(tool) or ''}\n\n{workspace_listing}"
        server.add_tool(tool, name=tool.__name__, description=description)

    logger.info(f"Registered {len(registered)} tools for {len(registry)} workspace(s)")
    return server
