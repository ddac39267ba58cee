"""Pydantic models for workspace configuration."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workspace_mcp.config.constants import (
    DEFAULT_MAX_READ_BYTES,
    DEFAULT_MAX_SEARCH_OUTPUT_BYTES,
    DEFAULT_PREVIEW_CONTEXT_LINES,
    DEFAULT_READ_LIMIT,
    DEFAULT_RIPGREP_PATH,
)


class WorkspaceConfig(BaseModel):
    """One sandboxed workspace: root directory, display name and write allowlist."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    root: Path = Field(description="Absolute workspace root. '~' and '$HOME' are expanded.")
    name: str = Field(min_length=1, description="Display name")
    write_allowlist: tuple[str, ...] = Field(
        alias="writeAllowlist",
        description="Glob patterns of workspace-relative paths that may be written or edited",
    )

    @field_validator("root", mode="before")
    @classmethod
    def expand_root(cls, v: str | Path) -> Path:
        """Expand $HOME / ~ and require an absolute path."""
        raw = str(v).strip()
        if not raw:
            raise ValueError("root cannot be empty")

        home = os.environ.get("HOME") or str(Path.home())
        if raw == "$HOME" or raw.startswith("$HOME/"):
            raw = home + raw[len("$HOME") :]
        path = Path(raw).expanduser()

        if not path.is_absolute():
            raise ValueError(f"root must be an absolute path, got: {v}")
        return path.resolve()


class ServerSettings(BaseModel):
    """Operation limits shared by every workspace."""

    model_config = ConfigDict(frozen=True)

    max_read_bytes: int = Field(
        default=DEFAULT_MAX_READ_BYTES, gt=0, description="Read size ceiling in bytes"
    )
    default_read_limit: int = Field(
        default=DEFAULT_READ_LIMIT, gt=0, description="Lines returned when no limit is given"
    )
    max_search_output_bytes: int = Field(
        default=DEFAULT_MAX_SEARCH_OUTPUT_BYTES,
        gt=0,
        description="Maximum ripgrep output kept per search",
    )
    preview_context_lines: int = Field(
        default=DEFAULT_PREVIEW_CONTEXT_LINES,
        ge=0,
        description="Context lines on each side of an edit preview",
    )
    ripgrep_path: str = Field(default=DEFAULT_RIPGREP_PATH, description="ripgrep executable")


class WorkspaceSettings(BaseModel):
    """Root configuration model: workspaces by key plus server limits."""

    model_config = ConfigDict(frozen=True)

    workspaces: dict[str, WorkspaceConfig] = Field(default_factory=dict)
    server: ServerSettings = Field(default_factory=ServerSettings)
