"""Tests for the flyway-mcp-cli command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from flyway_mcp.cli import cli
from flyway_mcp.errors import FlywayCommandError
from tests._fakes import FakeFlywayFactory


@pytest.fixture
def fake_flyway(monkeypatch: pytest.MonkeyPatch, flyway_factory: FakeFlywayFactory) -> FakeFlywayFactory:
    monkeypatch.setattr("flyway_mcp.cli.cli_factory", lambda command=None: flyway_factory)
    return flyway_factory


class TestInit:
    def test_init_default(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "init", "--database-url", "jdbc:h2:mem:t"])
        assert result.exit_code == 0, result.output
        assert "Project initialized successfully" in result.output
        config = json.loads((project_dir / ".flyway-mcp.json").read_text())
        assert config["migrations_path"] == "./migrations"
        assert config["database_url"] == "jdbc:h2:mem:t"

    def test_init_categories(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        result = cli_runner.invoke(
            cli,
            ["--project", str(project_dir), "init", "--category", "schema=./m/schema", "--category", "data=./m/data"],
        )
        assert result.exit_code == 0, result.output
        assert (project_dir / "m" / "schema").is_dir()
        assert (project_dir / "m" / "data").is_dir()

    def test_init_bad_category_format(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "init", "--category", "schema"])
        assert result.exit_code == 1
        assert "expected name=directory" in result.output

    def test_init_both_modes(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        result = cli_runner.invoke(
            cli,
            ["--project", str(project_dir), "init", "--migrations-path", "./m", "--category", "a=./a"],
        )
        assert result.exit_code == 1
        assert "Cannot specify both" in result.output
        assert not (project_dir / ".flyway-mcp.json").exists()


class TestCreate:
    def test_requires_init(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "create", "x", "--sql", "SELECT 1;"])
        assert result.exit_code == 1
        assert "Run 'flyway-mcp-cli init' first" in result.output

    def test_create_from_option(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "create", "Add Users", "--sql", "SELECT 1;"])
        assert result.exit_code == 0, result.output
        (path,) = (project_dir / "migrations").iterdir()
        assert path.name.endswith("__add_users.sql")
        assert path.read_text() == "SELECT 1;"

    def test_create_from_stdin(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "create", "piped"], input="SELECT 2;\n")
        assert result.exit_code == 0, result.output
        (path,) = (project_dir / "migrations").iterdir()
        assert path.read_text() == "SELECT 2;\n"

    def test_create_from_explicit_stdin_dash(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "create", "dash", "--file", "-"], input="SELECT 3;")
        assert result.exit_code == 0, result.output
        (path,) = (project_dir / "migrations").iterdir()
        assert path.read_text() == "SELECT 3;"

    def test_create_from_file(
        self, cli_runner: CliRunner, project_dir: Path, tmp_path: Path, fake_flyway: FakeFlywayFactory
    ) -> None:
        sql_file = tmp_path / "input.sql"
        sql_file.write_text("CREATE TABLE t (id INT);")
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "create", "from file", "--file", str(sql_file)])
        assert result.exit_code == 0, result.output
        (path,) = (project_dir / "migrations").iterdir()
        assert path.read_text() == "CREATE TABLE t (id INT);"

    def test_create_invalid_category(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init", "--category", "schema=./s"])
        result = cli_runner.invoke(
            cli, ["--project", str(project_dir), "create", "x", "--sql", "SELECT 1;", "--category", "nope"]
        )
        assert result.exit_code == 1
        assert 'Invalid category "nope"' in result.output


class TestUpdatePathAndConfig:
    def test_update_path(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "update-path", "./sql"])
        assert result.exit_code == 0, result.output
        assert "manually move" in result.output
        shown = cli_runner.invoke(cli, ["--project", str(project_dir), "config"])
        assert json.loads(shown.output)["migrations_path"] == "./sql"


class TestFlywayCommands:
    def test_info(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "info"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"operation": "info", "success": True}
        assert fake_flyway.last.calls == [("info", None)]

    def test_baseline_options(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "baseline", "--version", "3"])
        assert result.exit_code == 0, result.output
        assert fake_flyway.last.calls == [("baseline", {"baselineVersion": "3"})]

    def test_clean_needs_confirmation(self, cli_runner: CliRunner, project_dir: Path, fake_flyway: FakeFlywayFactory) -> None:
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "clean"], input="n\n")
        assert result.exit_code != 0
        assert fake_flyway.last.calls == []

    def test_upstream_failure(self, cli_runner: CliRunner, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        factory = FakeFlywayFactory()

        def _factory(database_url: str | None, locations: list[str]) -> object:
            fake = factory(database_url, locations)
            fake.results["migrate"] = FlywayCommandError("migrate", 1, "Connection refused")  # type: ignore[attr-defined]
            return fake

        monkeypatch.setattr("flyway_mcp.cli.cli_factory", lambda command=None: _factory)
        cli_runner.invoke(cli, ["--project", str(project_dir), "init"])
        result = cli_runner.invoke(cli, ["--project", str(project_dir), "migrate"])
        assert result.exit_code == 1
        assert "Connection refused" in result.output
