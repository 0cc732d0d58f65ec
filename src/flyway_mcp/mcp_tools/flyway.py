"""MCP tools that run Flyway commands or write migration files."""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

from mcp.types import TextContent, Tool

from flyway_mcp.mcp_tools.common import Handler, _json, _no_args_tool, _parse_args, _text
from flyway_mcp.messages import migration_message
from flyway_mcp.migration_files import create_migration
from flyway_mcp.project import ProjectContext


class BaselineArgs(TypedDict, total=False):
    baselineVersion: str
    baselineDescription: str


class CreateMigrationArgs(TypedDict):
    description: str
    sql: str
    category: NotRequired[str]


def register() -> tuple[list[Tool], dict[str, Handler]]:
    """Return (tool_definitions, handler_map) for Flyway tools."""
    tools = [
        _no_args_tool(
            "flyway_info",
            "Get information about the current state of the database schema, including applied migrations and pending migrations",
        ),
        _no_args_tool(
            "flyway_migrate",
            "Apply all pending migrations to the database. This will execute migration files that have not yet been applied.",
        ),
        _no_args_tool(
            "flyway_validate",
            "Validate the applied migrations against the available migration files. "
            "Checks for conflicts, missing migrations, or checksum mismatches.",
        ),
        _no_args_tool(
            "flyway_clean",
            "WARNING: Drops all objects in the configured schemas. This will delete all tables, views, procedures, etc. "
            "USE WITH EXTREME CAUTION - typically only for development.",
        ),
        Tool(
            name="flyway_baseline",
            description=(
                "Baseline an existing database, marking the current state as the starting point for migrations. "
                "Useful for existing databases."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "baselineVersion": {"type": "string", "description": "Version to use for baseline (default: 1)"},
                    "baselineDescription": {"type": "string", "description": "Description for the baseline"},
                },
            },
        ),
        _no_args_tool(
            "flyway_repair",
            "Repair the Flyway schema history table. Removes failed migration entries and realigns checksums.",
        ),
        Tool(
            name="create_migration",
            description=(
                "Create a new Flyway migration file with the proper naming convention and content. "
                "This is the ONLY way to create schema changes. Projects in structured mode require a category."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "description": {
                        "type": "string",
                        "description": 'Description of the migration (e.g., "create_users_table")',
                    },
                    "sql": {"type": "string", "description": "SQL content for the migration"},
                    "category": {
                        "type": "string",
                        "description": "Migration category (required in structured mode, ignored otherwise)",
                    },
                },
                "required": ["description", "sql"],
            },
        ),
    ]

    handlers: dict[str, Handler] = {
        "flyway_info": _handle_info,
        "flyway_migrate": _handle_migrate,
        "flyway_validate": _handle_validate,
        "flyway_clean": _handle_clean,
        "flyway_baseline": _handle_baseline,
        "flyway_repair": _handle_repair,
        "create_migration": _handle_create_migration,
    }
    return tools, handlers


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_info(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    return _json(await context.require_active().flyway.info())


async def _handle_migrate(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    return _json(await context.require_active().flyway.migrate())


async def _handle_validate(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    return _json(await context.require_active().flyway.validate())


async def _handle_clean(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    return _json(await context.require_active().flyway.clean())


async def _handle_baseline(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    args = _parse_args(arguments, BaselineArgs)
    options = {key: value for key, value in args.items() if key in ("baselineVersion", "baselineDescription")}
    return _json(await context.require_active().flyway.baseline(options))


async def _handle_repair(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    return _json(await context.require_active().flyway.repair())


async def _handle_create_migration(context: ProjectContext, arguments: dict[str, Any]) -> list[TextContent]:
    args = _parse_args(arguments, CreateMigrationArgs)
    migration = create_migration(context, args["description"], args["sql"], args.get("category"))
    return _text(migration_message(migration))
