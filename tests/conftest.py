"""Shared test fixtures for all tests.

Fixtures live in the fixtures/ module, organized by component, and are
re-exported here so pytest discovers them everywhere.
"""

import shutil

import pytest

from tests.fixtures.workspace import (  # noqa: F401
    local_workspace,
    sample_files,
    temp_workspace,
    workspace_config,
    workspace_registry,
)


def pytest_collection_modifyitems(config, items):
    """Skip ripgrep-dependent tests when rg is not installed."""
    if shutil.which("rg"):
        return

    skip_ripgrep = pytest.mark.skip(reason="ripgrep (rg) not found on PATH")
    for item in items:
        if "requires_ripgrep" in item.keywords:
            item.add_marker(skip_ripgrep)
