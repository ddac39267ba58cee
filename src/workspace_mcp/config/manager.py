"""Workspace configuration loading."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from workspace_mcp.config.constants import CONFIG_ENV_VAR, default_config_path
from workspace_mcp.config.schema import ServerSettings, WorkspaceConfig, WorkspaceSettings

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the configuration file exists but cannot be used."""

    pass


def get_config_path(config_path: Path | None = None) -> Path:
    """Resolve which configuration file to load.

    Priority order:
        1. Explicit ``config_path`` argument
        2. WORKSPACE_MCP_CONFIG environment variable
        3. ./workspace-config.json

    Returns:
        Path to the configuration file (may not exist)
    """
    if config_path is not None:
        return Path(config_path).expanduser()
    if env_path := os.getenv(CONFIG_ENV_VAR):
        return Path(env_path).expanduser()
    return default_config_path()


def _load_workspaces(raw: dict[str, Any]) -> dict[str, WorkspaceConfig]:
    workspaces: dict[str, WorkspaceConfig] = {}

    for key, entry in raw.items():
        try:
            workspaces[key] = WorkspaceConfig.model_validate(entry)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or key for err in e.errors())
            logger.error(
                f"Skipping workspace '{key}': invalid or missing fields ({fields}). "
                "Each workspace needs root, name and writeAllowlist."
            )

    return workspaces


def load_workspace_settings(config_path: Path | None = None) -> WorkspaceSettings:
    """Load workspace configuration from a JSON file.

    Expected format::

        {
          "workspaces": {
            "app": {"root": "~/src/app", "name": "App", "writeAllowlist": ["src/**/*.py"]}
          },
          "server": {"max_read_bytes": 5242880}
        }

    A missing file yields zero workspaces plus a logged diagnostic; there is
    never a hardcoded fallback root. Invalid workspace entries are skipped
    individually.

    Args:
        config_path: Optional explicit path (see :func:`get_config_path`)

    Returns:
        WorkspaceSettings instance

    Raises:
        ConfigurationError: If the file is not valid JSON, lacks a
            "workspaces" object, or has invalid server settings
    """
    path = get_config_path(config_path)

    if not path.exists():
        logger.error(
            f"No workspace configuration found at {path}. Create one or set "
            f"{CONFIG_ENV_VAR} to define workspaces."
        )
        return WorkspaceSettings()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("workspaces"), dict):
        raise ConfigurationError(f'Invalid configuration file {path}: missing "workspaces" object')

    try:
        server = ServerSettings.model_validate(data.get("server") or {})
    except ValidationError as e:
        raise ConfigurationError(f"Server settings validation failed for {path}:\n{e}") from e

    workspaces = _load_workspaces(data["workspaces"])

    if not workspaces:
        logger.error(f"No valid workspaces found in {path}")
    else:
        logger.info(f"Loaded {len(workspaces)} workspace(s) from {path}")

    return WorkspaceSettings(workspaces=workspaces, server=server)
