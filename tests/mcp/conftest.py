"""Fixtures for MCP server tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from flyway_mcp.project import ProjectContext
from tests._fakes import FakeFlywayFactory


@pytest.fixture(autouse=True)
def mcp_context(flyway_factory: FakeFlywayFactory) -> Generator[ProjectContext, None, None]:
    """Give every MCP test a fresh module context backed by a fake Flyway."""
    import flyway_mcp.mcp_server as mcp_mod

    original = mcp_mod.context
    ctx = mcp_mod.reset_project_state(flyway_factory)
    yield ctx
    mcp_mod.context = original
