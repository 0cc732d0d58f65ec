"""Command-line mirror of the flyway-mcp tools.

Operates on the project given by ``--project`` (default: cwd).

Usage:
    flyway-mcp-cli init                                  # Create .flyway-mcp.json + migrations/
    flyway-mcp-cli init --category schema=./migrations/schema --category data=./migrations/data
    flyway-mcp-cli create "add users table" --sql "CREATE TABLE users (id SERIAL);"
    flyway-mcp-cli update-path ./db/migrations           # Point new migrations elsewhere
    flyway-mcp-cli config                                # Show the project config
    flyway-mcp-cli info | migrate | validate | clean | repair
    flyway-mcp-cli baseline --version 1 --description "existing schema"
"""

from __future__ import annotations

import asyncio
import json as json_mod
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from flyway_mcp import __version__
from flyway_mcp.core import CONFIG_FILENAME, read_config
from flyway_mcp.errors import FlywayMcpError
from flyway_mcp.flyway import cli_factory
from flyway_mcp.messages import init_message, migration_message, path_update_message
from flyway_mcp.migration_files import create_migration
from flyway_mcp.project import ProjectContext


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open_project(ctx: click.Context) -> ProjectContext:
    """Activate the --project root. It must already hold a config file."""
    root: Path = ctx.obj["project"]
    project = ProjectContext(cli_factory(ctx.obj["flyway_command"]))
    try:
        if read_config(root) is None:
            _fail(f"No {CONFIG_FILENAME} found in {root}. Run 'flyway-mcp-cli init' first.")
        project.initialize(root)
    except FlywayMcpError as e:
        _fail(str(e))
    return project


def _parse_categories(values: tuple[str, ...]) -> dict[str, str] | None:
    if not values:
        return None
    categories: dict[str, str] = {}
    for value in values:
        if "=" not in value:
            _fail(f"Invalid category format: {value} (expected name=directory)")
        name, directory = value.split("=", 1)
        categories[name.strip()] = directory.strip()
    return categories


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="flyway-mcp-cli")
@click.option(
    "--project",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root (default: current directory)",
)
@click.option("--flyway-command", default=None, help="Flyway executable (default: $FLYWAY_COMMAND or 'flyway')")
@click.pass_context
def cli(ctx: click.Context, project: Path, flyway_command: str | None) -> None:
    """Manage Flyway migrations for a project."""
    ctx.ensure_object(dict)
    ctx.obj["project"] = project.absolute()
    ctx.obj["flyway_command"] = flyway_command


@cli.command()
@click.option("--database-url", default=None, help="Database connection string")
@click.option("--migrations-path", default=None, help="Migrations directory (default: ./migrations)")
@click.option("--category", "categories", multiple=True, help="Structured mode category as name=directory (repeatable)")
@click.pass_context
def init(ctx: click.Context, database_url: str | None, migrations_path: str | None, categories: tuple[str, ...]) -> None:
    """Create or load .flyway-mcp.json for the project."""
    project = ProjectContext(cli_factory(ctx.obj["flyway_command"]))
    try:
        result = project.initialize(
            ctx.obj["project"],
            database_url=database_url,
            migrations_path=migrations_path,
            migration_categories=_parse_categories(categories),
        )
    except FlywayMcpError as e:
        _fail(str(e))
    click.echo(init_message(result))


@cli.command()
@click.argument("description")
@click.option("--sql", default=None, help="SQL text (default: read from --file or stdin)")
@click.option("--file", "sql_file", type=click.File("r"), default="-", help="Read SQL from this file (default: stdin)")
@click.option("--category", default=None, help="Category (structured mode)")
@click.pass_context
def create(ctx: click.Context, description: str, sql: str | None, sql_file: Any, category: str | None) -> None:
    """Write a new V<timestamp>__<description>.sql migration."""
    if sql is None:
        sql = sql_file.read()
    project = _open_project(ctx)
    try:
        migration = create_migration(project, description, sql, category)
    except FlywayMcpError as e:
        _fail(str(e))
    click.echo(migration_message(migration))


@cli.command("update-path")
@click.argument("new_path")
@click.pass_context
def update_path(ctx: click.Context, new_path: str) -> None:
    """Change the migrations directory (single-directory projects)."""
    project = _open_project(ctx)
    try:
        update = project.update_path(new_path)
    except FlywayMcpError as e:
        _fail(str(e))
    click.echo(path_update_message(update))


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Print the project's .flyway-mcp.json."""
    project = _open_project(ctx)
    active = project.require_active()
    click.echo(json_mod.dumps(active.config.to_dict(), indent=2))


# ---------------------------------------------------------------------------
# Flyway pass-through commands
# ---------------------------------------------------------------------------


def _run_flyway(ctx: click.Context, verb: str, *args: Any) -> None:
    project = _open_project(ctx)
    flyway = project.require_active().flyway
    try:
        result = asyncio.run(getattr(flyway, verb)(*args))
    except FlywayMcpError as e:
        _fail(str(e))
    click.echo(json_mod.dumps(result, indent=2, default=str))


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show applied and pending migrations."""
    _run_flyway(ctx, "info")


@cli.command()
@click.pass_context
def migrate(ctx: click.Context) -> None:
    """Apply pending migrations."""
    _run_flyway(ctx, "migrate")


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate applied migrations against the migration files."""
    _run_flyway(ctx, "validate")


@cli.command()
@click.confirmation_option(prompt="This drops every object in the configured schemas. Continue?")
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Drop all objects in the configured schemas."""
    _run_flyway(ctx, "clean")


@cli.command()
@click.option("--version", "baseline_version", default=None, help="Baseline version (Flyway default: 1)")
@click.option("--description", "baseline_description", default=None, help="Baseline description")
@click.pass_context
def baseline(ctx: click.Context, baseline_version: str | None, baseline_description: str | None) -> None:
    """Baseline an existing database."""
    options: dict[str, str] = {}
    if baseline_version is not None:
        options["baselineVersion"] = baseline_version
    if baseline_description is not None:
        options["baselineDescription"] = baseline_description
    _run_flyway(ctx, "baseline", options)


@cli.command()
@click.pass_context
def repair(ctx: click.Context) -> None:
    """Repair the schema history table."""
    _run_flyway(ctx, "repair")


if __name__ == "__main__":
    cli()
