"""flyway-mcp: Flyway migrations for agents over MCP."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("flyway-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from flyway_mcp.core import ProjectConfig
from flyway_mcp.project import ProjectContext

__all__ = ["ProjectConfig", "ProjectContext", "__version__"]
