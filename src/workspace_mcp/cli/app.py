"""CLI entry point for workspace-mcp."""

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from workspace_mcp import __version__
from workspace_mcp.cli.constants import ExitCodes
from workspace_mcp.cli.utils import get_console
from workspace_mcp.config import ConfigurationError, WorkspaceSettings, load_workspace_settings
from workspace_mcp.logging_config import configure_logging
from workspace_mcp.registry import WorkspaceRegistry
from workspace_mcp.server import build_server

app = typer.Typer(help="workspace-mcp - Sandboxed workspace tools over MCP")

console = get_console()
# Stdout belongs to the MCP protocol while serving
err_console = get_console(stderr=True)

logger = logging.getLogger(__name__)

CONFIG_OPTION_HELP = "Workspace configuration file (default: $WORKSPACE_MCP_CONFIG or ./workspace-config.json)"


def _load_settings(config: Path | None, out: Console) -> WorkspaceSettings:
    try:
        return load_workspace_settings(config)
    except ConfigurationError as e:
        out.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(ExitCodes.CONFIG_ERROR) from e


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", help="Show version"),
) -> None:
    """workspace-mcp - Read, write, edit, list and search sandboxed workspaces.

    \b
    Examples:
        workspace-mcp serve                               # Run the stdio server
        workspace-mcp serve --config ~/workspaces.json    # Explicit configuration
        workspace-mcp workspaces                          # Show configured workspaces
    """
    # Environment variables may come from a local .env file
    load_dotenv()

    if version_flag:
        console.print(f"workspace-mcp version {__version__}")
        raise typer.Exit(ExitCodes.SUCCESS)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
) -> None:
    """Run the MCP server over stdio."""
    configure_logging()

    settings = _load_settings(config, err_console)
    registry = WorkspaceRegistry.from_settings(settings)
    if not len(registry):
        err_console.print(
            "[yellow]No workspaces configured. Every tool call will fail until a "
            "configuration file defines at least one workspace.[/yellow]"
        )

    server = build_server(registry)
    logger.info(f"Serving {len(registry)} workspace(s): {', '.join(registry.names()) or 'none'}")

    try:
        server.run()
    except KeyboardInterrupt:
        raise typer.Exit(ExitCodes.INTERRUPTED) from None


@app.command()
def workspaces(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
) -> None:
    """Show configured workspaces."""
    settings = _load_settings(config, console)

    if not settings.workspaces:
        console.print("[yellow]No workspaces configured.[/yellow]")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    table = Table(title="Workspaces", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Root")
    table.add_column("Exists")
    table.add_column("Write Allowlist", style="magenta")

    for key, workspace in settings.workspaces.items():
        exists = "[green]yes[/green]" if workspace.root.is_dir() else "[red]no[/red]"
        allowlist = "\n".join(workspace.write_allowlist) or "[dim](read-only)[/dim]"
        table.add_row(key, workspace.name, str(workspace.root), exists, allowlist)

    console.print(table)
