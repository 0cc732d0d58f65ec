"""Shared pytest fixtures for flyway-mcp tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from flyway_mcp.flyway import FlywayFactory
from flyway_mcp.project import ProjectContext
from tests._fakes import FakeFlywayFactory


@pytest.fixture
def flyway_factory() -> FakeFlywayFactory:
    return FakeFlywayFactory()


@pytest.fixture
def context(flyway_factory: FlywayFactory) -> ProjectContext:
    """A ProjectContext with no active project and a fake Flyway."""
    return ProjectContext(flyway_factory, fallback=[])


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty directory to initialize as a project."""
    d = tmp_path / "proj"
    d.mkdir()
    return d


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
