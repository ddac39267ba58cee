"""Configuration package for workspace-mcp."""

from .constants import CONFIG_ENV_VAR, DEFAULT_CONFIG_FILENAME
from .manager import ConfigurationError, get_config_path, load_workspace_settings
from .schema import ServerSettings, WorkspaceConfig, WorkspaceSettings

__all__ = [
    # Constants
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILENAME",
    # Schema
    "ServerSettings",
    "WorkspaceConfig",
    "WorkspaceSettings",
    # Manager
    "ConfigurationError",
    "get_config_path",
    "load_workspace_settings",
]
