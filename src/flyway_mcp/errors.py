"""Exception taxonomy shared by the MCP tools, the CLI and the core modules."""

from __future__ import annotations

from collections.abc import Iterable


class FlywayMcpError(Exception):
    """Base class for every error raised by flyway-mcp itself."""


class ConfigurationError(FlywayMcpError):
    """Invalid project configuration (arguments or .flyway-mcp.json contents)."""


class ProjectNotFoundError(ConfigurationError):
    """The project root handed to initialize does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Project directory does not exist: {path}")


class NoActiveProjectError(FlywayMcpError):
    """An operation needs an initialized project and none is active."""

    def __init__(self) -> None:
        super().__init__(
            "No project has been initialized. Call 'initialize_project' first to set the active project.\n\n"
            'Example: initialize_project({"project_path": "/absolute/path/to/your/project"})\n\n'
            "This creates a .flyway-mcp.json config file and the migrations directory in the project."
        )


class ArgumentValidationError(FlywayMcpError):
    """Tool arguments do not match the tool's input schema."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(f"Invalid arguments: {', '.join(problems)}")


class CategoryError(FlywayMcpError):
    """Structured-mode category lookup failed."""

    def __init__(self, message: str, valid_categories: Iterable[str]) -> None:
        self.valid_categories = sorted(valid_categories)
        super().__init__(f"{message}. Valid categories: {', '.join(self.valid_categories)}")


class CategoryRequiredError(CategoryError):
    def __init__(self, valid_categories: Iterable[str]) -> None:
        super().__init__("Category is required in structured mode", valid_categories)


class InvalidCategoryError(CategoryError):
    def __init__(self, category: str, valid_categories: Iterable[str]) -> None:
        self.category = category
        super().__init__(f'Invalid category "{category}"', valid_categories)


class UnknownToolError(FlywayMcpError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class FlywayCommandError(FlywayMcpError):
    """The flyway executable failed or could not be started."""

    def __init__(self, command: str, returncode: int | None, message: str) -> None:
        self.command = command
        self.returncode = returncode
        self.message = message
        if returncode is None:
            super().__init__(f"flyway {command} failed: {message}")
        else:
            super().__init__(f"flyway {command} failed (exit {returncode}): {message}")
