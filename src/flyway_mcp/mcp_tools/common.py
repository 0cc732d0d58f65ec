"""Pure helpers shared across MCP tool modules.

No dependency on ``mcp_server`` module globals, so tool modules can import
this freely.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, cast

from mcp.types import TextContent, Tool

from flyway_mcp.project import ProjectContext

_T = TypeVar("_T")

Handler = Callable[[ProjectContext, dict[str, Any]], Awaitable[list[TextContent]]]


def _parse_args(arguments: dict[str, Any], cls: type[_T]) -> _T:
    """Cast validated MCP arguments to a TypedDict for static analysis.

    The server validates against the tool's inputSchema before dispatch;
    this cast() only narrows the type.
    """
    return cast(_T, arguments)


def _text(content: object) -> list[TextContent]:
    if isinstance(content, str):
        return [TextContent(type="text", text=content)]
    return [TextContent(type="text", text=json.dumps(content, indent=2, default=str))]


def _no_args_tool(name: str, description: str) -> Tool:
    return Tool(name=name, description=description, inputSchema={"type": "object", "properties": {}})


def _json(content: object) -> list[TextContent]:
    """Serialize *content* as JSON even when it is a bare string."""
    return [TextContent(type="text", text=json.dumps(content, indent=2, default=str))]
