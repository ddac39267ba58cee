"""Process-wide logging setup."""

import logging
import os
import sys

from workspace_mcp.config.constants import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VARS


def get_log_level() -> str:
    """Log level name from WORKSPACE_MCP_LOG_LEVEL or LOG_LEVEL, else INFO."""
    for env_var in LOG_LEVEL_ENV_VARS:
        if value := os.getenv(env_var):
            return value.upper()
    return DEFAULT_LOG_LEVEL


def configure_logging(level: str | None = None) -> None:
    """Configure root logging to stderr.

    Stdout carries the MCP stdio protocol, so nothing may be logged there.

    Args:
        level: Level name overriding the environment
    """
    log_level = (level or get_log_level()).upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,  # Reconfigure if already configured
    )

    if numeric_level == logging.INFO and log_level != "INFO":
        logging.getLogger(__name__).warning(f"Unknown log level {log_level!r}, using INFO")
