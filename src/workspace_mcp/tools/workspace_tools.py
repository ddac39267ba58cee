"""Workspace tools exposed to agents.

Each tool takes the workspace key first, delegates to the matching
LocalWorkspace operation and converts the outcome into a structured
response. Every WorkspaceError is recovered here; nothing raised by a
workspace operation reaches the transport.
"""

import logging
from typing import Annotated, Literal

from pydantic import Field

from workspace_mcp.editing import BatchStatus
from workspace_mcp.exceptions import WorkspaceError
from workspace_mcp.tools.toolset import WorkspaceToolset

logger = logging.getLogger(__name__)


class WorkspaceTools(WorkspaceToolset):
    """Read, write, edit, list and search tools over the configured workspaces.

    Example:
        >>> tools = WorkspaceTools(WorkspaceRegistry.from_settings(settings))
        >>> result = await tools.workspace_read("app", "src/main.py", limit=20)
        >>> result["result"]["total_lines"]
        42
    """

    def get_tools(self) -> list:
        """Get list of workspace tools.

        Returns:
            List of workspace tool functions
        """
        return [
            self.workspace_read,
            self.workspace_write,
            self.workspace_edit,
            self.workspace_list,
            self.workspace_search,
        ]

    def _internal_error(self, operation: str, exc: Exception) -> dict:
        logger.exception(f"Unexpected error in {operation}")
        return self._create_error_response(
            error="internal_error", message=f"{operation} failed unexpectedly: {exc}"
        )

    async def workspace_read(
        self,
        workspace: Annotated[str, Field(description="Workspace key")],
        path: Annotated[str, Field(description="File path relative to the workspace root")],
        offset: Annotated[
            int | None, Field(description="First line to return (1-based, default 1)")
        ] = None,
        limit: Annotated[
            int | None, Field(description="Maximum lines to return (default 500)")
        ] = None,
    ) -> dict:
        """Read a file as numbered lines.

        Returns:
            Success response with path, content, total_lines, start_line,
            end_line and truncated. ``truncated`` is only set when the default
            line limit cut the file short; read on with ``offset``.
        """
        try:
            result = self.registry.get(workspace).read(path, offset=offset, limit=limit)
        except WorkspaceError as e:
            return self._error_from_exception(e)
        except Exception as e:
            return self._internal_error("workspace_read", e)

        message = f"Read {result.path} lines {result.start_line}-{result.end_line} of {result.total_lines}"
        if result.truncated:
            message += f". File truncated; continue with offset={result.end_line + 1}"
        return self._create_success_response(result=result.to_dict(), message=message)

    async def workspace_write(
        self,
        workspace: Annotated[str, Field(description="Workspace key")],
        path: Annotated[str, Field(description="File path relative to the workspace root")],
        content: Annotated[str, Field(description="Complete new file content")],
    ) -> dict:
        """Write a whole file. The path must match the workspace write allowlist.

        Overwriting a non-empty file succeeds but the response carries a
        warning: prefer workspace_edit for changes to existing files.
        """
        try:
            result = self.registry.get(workspace).write(path, content)
        except WorkspaceError as e:
            return self._error_from_exception(e)
        except Exception as e:
            return self._internal_error("workspace_write", e)

        action = "Created" if result.created else "Wrote"
        message = f"{action} {result.path} ({result.bytes_written} bytes)"
        if result.overwrote_existing:
            message += ". Warning: overwrote an existing non-empty file; use workspace_edit for surgical changes"
        return self._create_success_response(result=result.to_dict(), message=message)

    async def workspace_edit(
        self,
        workspace: Annotated[str, Field(description="Workspace key")],
        paths: Annotated[
            str | list[str],
            Field(description="File path or list of file paths relative to the workspace root"),
        ],
        old_string: Annotated[str, Field(description="Text (or regex with use_regex) to find")],
        new_string: Annotated[
            str,
            Field(description="Replacement text. With use_regex, $1 / $<name> / $& reference groups"),
        ],
        replace_all: Annotated[
            bool, Field(description="Replace every occurrence instead of requiring exactly one")
        ] = False,
        use_regex: Annotated[bool, Field(description="Treat old_string as a regular expression")] = False,
    ) -> dict:
        """Find and replace in one or more files.

        Without replace_all the pattern must occur exactly once in each file.
        Files are edited independently: one failing file does not stop the
        others. A single-file edit that fails is returned as an error
        response carrying the failure kind.
        """
        targets = [paths] if isinstance(paths, str) else list(paths)
        if not targets:
            return self._create_error_response(
                error="invalid_input", message="At least one path is required"
            )

        try:
            result = self.registry.get(workspace).edit(
                targets, old_string, new_string, replace_all=replace_all, use_regex=use_regex
            )
        except WorkspaceError as e:
            return self._error_from_exception(e)
        except Exception as e:
            return self._internal_error("workspace_edit", e)

        if result.total_files == 1 and result.status == BatchStatus.FAILED:
            outcome = result.results[0]
            return self._create_error_response(
                error=outcome.error_kind.value if outcome.error_kind else "io_failure",
                message=outcome.error or f"Edit failed for {outcome.file}",
            )

        return self._create_success_response(
            result=result.to_dict(),
            message=f"Edited {result.succeeded}/{result.total_files} file(s) ({result.status.value})",
        )

    async def workspace_list(
        self,
        workspace: Annotated[str, Field(description="Workspace key")],
        path: Annotated[str, Field(description="Directory relative to the workspace root")] = "",
        recursive: Annotated[bool, Field(description="Recursively list subdirectories")] = False,
        max_depth: Annotated[
            int | None, Field(description="Deepest level to list when recursive (0 = top level)")
        ] = None,
    ) -> dict:
        """List directory entries with type, size and modification time."""
        try:
            entries = self.registry.get(workspace).list(
                path, recursive=recursive, max_depth=max_depth
            )
        except WorkspaceError as e:
            return self._error_from_exception(e)
        except Exception as e:
            return self._internal_error("workspace_list", e)

        result = {
            "path": path or ".",
            "entries": [entry.to_dict() for entry in entries],
            "count": len(entries),
        }
        return self._create_success_response(
            result=result, message=f"Listed {len(entries)} entries in {path or '.'}"
        )

    async def workspace_search(
        self,
        workspace: Annotated[str, Field(description="Workspace key")],
        pattern: Annotated[str, Field(description="Regular expression (ripgrep syntax)")],
        path: Annotated[
            str | None, Field(description="Directory or file to search (default: whole workspace)")
        ] = None,
        glob: Annotated[
            str | None, Field(description="File filter, e.g. '**/*.py' or '*.{ts,tsx}'")
        ] = None,
        output_mode: Annotated[
            Literal["content", "files", "count"],
            Field(description="content: matching lines, files: file paths, count: matches per file"),
        ] = "content",
        context_lines: Annotated[
            int | None, Field(description="Lines of context around matches (content mode)")
        ] = None,
        case_insensitive: Annotated[bool, Field(description="Case-insensitive search")] = False,
        limit: Annotated[int | None, Field(description="Maximum results to return")] = None,
        offset: Annotated[int | None, Field(description="Results to skip")] = None,
    ) -> dict:
        """Search file contents with ripgrep.

        Results are paginated with offset/limit; ``total`` is the number of
        results before pagination. ``truncated`` means ripgrep produced more
        output than the server keeps, so narrow the search.
        """
        try:
            projection = await self.registry.get(workspace).search(
                pattern,
                path=path,
                glob=glob,
                output_mode=output_mode,
                context_lines=context_lines,
                case_insensitive=case_insensitive,
                limit=limit,
                offset=offset,
            )
        except WorkspaceError as e:
            return self._error_from_exception(e)
        except ValueError as e:
            return self._create_error_response(error="invalid_input", message=str(e))
        except Exception as e:
            return self._internal_error("workspace_search", e)

        message = f"Found {projection.total} result(s), returned {len(projection.results)}"
        if projection.truncated:
            message += ". Output truncated; narrow the search with path or glob"
        return self._create_success_response(result=projection.to_dict(), message=message)
