"""Argument validation shared by the MCP tools and the CLI.

Pure functions -- no MCP or Click dependencies.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator

from flyway_mcp.errors import ArgumentValidationError


def _location(error: Any) -> str:
    if error.absolute_path:
        return ".".join(str(p) for p in error.absolute_path)
    if error.validator == "required":
        # "'sql' is a required property" -> report against the missing field
        return str(error.message).split("'")[1] if "'" in error.message else "arguments"
    return "arguments"


def schema_problems(arguments: Any, schema: dict[str, Any]) -> list[str]:
    """Return ``field: message`` strings for every schema violation."""
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(arguments), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_location(e)}: {e.message}" for e in errors]


def validate_arguments(arguments: dict[str, Any] | None, schema: dict[str, Any]) -> dict[str, Any]:
    """Check *arguments* against a tool input schema.

    Returns the arguments (``{}`` for None) or raises ArgumentValidationError
    listing every problem.
    """
    args = {} if arguments is None else arguments
    problems = schema_problems(args, schema)
    if problems:
        raise ArgumentValidationError(problems)
    return args
