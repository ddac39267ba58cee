"""Configuration constants for workspace-mcp.

Single source of truth for default configuration values, kept separate from
schema.py and manager.py to avoid circular imports.
"""

from pathlib import Path

# Configuration file lookup
CONFIG_ENV_VAR = "WORKSPACE_MCP_CONFIG"
DEFAULT_CONFIG_FILENAME = "workspace-config.json"

# Logging
LOG_LEVEL_ENV_VARS = ("WORKSPACE_MCP_LOG_LEVEL", "LOG_LEVEL")
DEFAULT_LOG_LEVEL = "INFO"

# Operation limits
DEFAULT_MAX_READ_BYTES = 5 * 1024 * 1024  # 5 MiB
DEFAULT_READ_LIMIT = 500
DEFAULT_MAX_SEARCH_OUTPUT_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_PREVIEW_CONTEXT_LINES = 3
DEFAULT_RIPGREP_PATH = "rg"


def default_config_path() -> Path:
    """Path used when neither an explicit path nor the env var is given."""
    return Path.cwd() / DEFAULT_CONFIG_FILENAME
