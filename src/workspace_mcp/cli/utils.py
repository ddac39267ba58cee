"""Utility functions for CLI module."""

import os
import platform
import sys

from rich.console import Console


def get_console(stderr: bool = False) -> Console:
    """Create Rich console with proper encoding for Windows.

    On Windows in non-interactive mode (subprocess, pipe, etc.), the default
    encoding is often CP1252 which cannot handle Unicode characters. This
    function detects such cases and forces UTF-8 encoding when possible.

    Args:
        stderr: Write to stderr instead of stdout (required while serving)

    Returns:
        Console: Configured Rich console instance
    """
    stream = sys.stderr if stderr else sys.stdout
    if platform.system() == "Windows" and not stream.isatty():
        try:
            import locale

            encoding = locale.getpreferredencoding() or ""
            if "utf" not in encoding.lower():
                # Force UTF-8 for better Unicode support
                os.environ["PYTHONIOENCODING"] = "utf-8"
                return Console(stderr=stderr, force_terminal=True, legacy_windows=False)
            return Console(stderr=stderr)
        except Exception:
            # Fallback to safe ASCII mode if encoding detection fails
            return Console(stderr=stderr, legacy_windows=True, safe_box=True)
    return Console(stderr=stderr)
