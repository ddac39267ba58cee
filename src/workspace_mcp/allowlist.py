"""Glob allowlist matching for write and edit operations.

The allowlist is the only security boundary for mutation, so matching rejects
by default: a path is allowed only when at least one pattern matches it from
start to end.

Glob syntax:
    *    any run of characters within one path segment
    **   any number of whole segments, including zero
    ?    exactly one character within a segment

Everything else is literal and matching is case-sensitive.
"""

import re
from collections.abc import Iterable


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern into an anchored regular expression.

    Args:
        pattern: Glob pattern such as "src/**/*.py"

    Returns:
        Compiled regex that must match the whole relative path

    Example:
        >>> bool(glob_to_regex("src/**/*.py").match("src/pkg/mod.py"))
        True
        >>> bool(glob_to_regex("src/**/*.py").match("src/mod.py"))
        True
    """
    parts: list[str] = []
    i = 0
    length = len(pattern)

    while i < length:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                at_segment_start = i == 0 or pattern[i - 1] == "/"
                i += 2
                if at_segment_start and i < length and pattern[i] == "/":
                    # "**/" spans zero or more leading segments
                    parts.append("(?:.*/)?")
                    i += 1
                elif at_segment_start and i == length and i > 2:
                    # trailing "/**" also matches the directory itself
                    parts[-1] = "(?:/.*)?"
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1

    return re.compile("".join(parts) + r"\Z")


def is_path_allowed(path: str, patterns: Iterable[str]) -> bool:
    """Check whether a workspace-relative path matches the allowlist.

    Args:
        path: Normalized workspace-relative path (POSIX separators)
        patterns: Allowlist glob patterns

    Returns:
        True if at least one pattern matches the full path, False otherwise
        (including when no patterns are configured)
    """
    for pattern in patterns:
        if glob_to_regex(pattern).match(path):
            return True
    return False
