"""MCP server for Flyway migrations.

Exposes project setup, migration-file creation and the Flyway commands
(info, migrate, validate, clean, baseline, repair) as MCP tools. Nothing
works until ``initialize_project`` has picked the active project.

Usage:
    flyway-mcp                                # Wait for initialize_project
    flyway-mcp --project /path/to/project     # Activate a project at startup
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from flyway_mcp.errors import FlywayMcpError, UnknownToolError
from flyway_mcp.flyway import FlywayFactory, cli_factory, mask_url
from flyway_mcp.mcp_tools import flyway as flyway_tools
from flyway_mcp.mcp_tools import project as project_tools
from flyway_mcp.mcp_tools.common import Handler
from flyway_mcp.project import ProjectContext
from flyway_mcp.validation import validate_arguments

# ---------------------------------------------------------------------------
# Server setup
# ---------------------------------------------------------------------------

server = Server("flyway-mcp")
context = ProjectContext()
_logger: logging.Logger | None = None


def _collect() -> tuple[list[Tool], dict[str, Handler]]:
    tools: list[Tool] = []
    handlers: dict[str, Handler] = {}
    for module in (project_tools, flyway_tools):
        module_tools, module_handlers = module.register()
        tools.extend(module_tools)
        handlers.update(module_handlers)
    return tools, handlers


_TOOLS, _HANDLERS = _collect()
_SCHEMAS: dict[str, dict[str, Any]] = {tool.name: tool.inputSchema for tool in _TOOLS}


def _get_context() -> ProjectContext:
    return context


def reset_project_state(flyway_factory: FlywayFactory | None = None) -> ProjectContext:
    """Replace the module context with a fresh one (no active project).

    Returns the new context. Used by tests and by ``main()``.
    """
    global context
    context = ProjectContext(flyway_factory)
    return context


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@server.list_tools()  # type: ignore[untyped-decorator,no-untyped-call]
async def list_tools() -> list[Tool]:
    return list(_TOOLS)


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    t0 = time.monotonic()
    log_args = _loggable_args(arguments)
    try:
        result = await _dispatch(name, arguments, _get_context())
    except Exception as exc:
        if _logger:
            _logger.error("tool_error", extra={"tool": name, "args_data": log_args, "error": str(exc)}, exc_info=True)
        raise
    else:
        duration_ms = round((time.monotonic() - t0) * 1000, 1)
        if _logger:
            _logger.info("tool_call", extra={"tool": name, "args_data": log_args, "duration_ms": duration_ms})
        return result


def _loggable_args(arguments: dict[str, Any] | None) -> dict[str, Any] | None:
    if not arguments or not isinstance(arguments.get("database_url"), str):
        return arguments
    return {**arguments, "database_url": mask_url(arguments["database_url"])}


async def _dispatch(name: str, arguments: dict[str, Any] | None, ctx: ProjectContext) -> list[TextContent]:
    handler = _HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)
    args = validate_arguments(arguments, _SCHEMAS[name])
    return await handler(ctx, args)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


async def _run(project_path: Path | None, flyway_command: str | None, log_dir: Path) -> None:
    global _logger

    from flyway_mcp.logging import setup_logging

    _logger = setup_logging(log_dir)
    ctx = reset_project_state(cli_factory(flyway_command))

    if project_path is not None:
        try:
            ctx.initialize(project_path)
        except FlywayMcpError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)

    _logger.info("mcp_server_start", extra={"tool": "server", "args_data": {"project": str(project_path or "")}})

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    import asyncio

    from flyway_mcp.logging import default_log_dir

    parser = argparse.ArgumentParser(description="Flyway MCP server")
    parser.add_argument("--project", type=Path, default=None, help="Project root to activate at startup")
    parser.add_argument("--flyway-command", default=None, help="Flyway executable (default: $FLYWAY_COMMAND or 'flyway')")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for flyway-mcp.log (default: ~/.flyway-mcp)")
    args = parser.parse_args()

    asyncio.run(_run(args.project, args.flyway_command, args.log_dir or default_log_dir()))


if __name__ == "__main__":
    main()
