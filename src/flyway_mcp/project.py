"""The active-project slot.

A :class:`ProjectContext` remembers at most one project: its root, its
parsed ``.flyway-mcp.json`` and a Flyway handle bound to that config.
Every MCP tool except ``initialize_project`` requires it to be set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from flyway_mcp.core import (
    DEFAULT_MIGRATIONS_PATH,
    FILESYSTEM_PREFIX,
    ProjectConfig,
    SingleDirectoryMode,
    StructuredMode,
    config_path,
    fallback_locations,
    read_config,
    resolve_location,
    write_config,
)
from flyway_mcp.errors import (
    CategoryRequiredError,
    ConfigurationError,
    InvalidCategoryError,
    NoActiveProjectError,
    ProjectNotFoundError,
)
from flyway_mcp.flyway import FlywayFactory, FlywayHandle, cli_factory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryStatus:
    category: str | None
    path: Path
    created: bool


@dataclass(frozen=True)
class InitResult:
    root: Path
    config_path: Path
    config_created: bool
    config: ProjectConfig
    directories: list[DirectoryStatus] = field(default_factory=list)


@dataclass(frozen=True)
class PathUpdate:
    old_path: str
    new_path: str
    old_directory: Path
    new_directory: Path
    config_path: Path


@dataclass(frozen=True)
class ActiveProject:
    root: Path
    config: ProjectConfig
    flyway: FlywayHandle


class ProjectContext:
    """Holds the single active project for a server process."""

    def __init__(
        self,
        flyway_factory: FlywayFactory | None = None,
        *,
        fallback: list[str] | None = None,
    ) -> None:
        self.flyway_factory = flyway_factory or cli_factory()
        self._fallback = fallback
        self._active: ActiveProject | None = None

    @property
    def active(self) -> ActiveProject | None:
        return self._active

    def reset(self) -> None:
        """Forget the active project."""
        self._active = None

    def require_active(self) -> ActiveProject:
        if self._active is None:
            raise NoActiveProjectError
        return self._active

    # -- initialize -------------------------------------------------------

    def initialize(
        self,
        root_path: str | Path,
        *,
        database_url: str | None = None,
        migrations_path: str | None = None,
        migration_categories: dict[str, str] | None = None,
    ) -> InitResult:
        """Load or create the project config and make the project active.

        An existing ``.flyway-mcp.json`` always wins: the keyword arguments
        only shape a brand-new config.
        """
        if migrations_path is not None and migration_categories is not None:
            msg = "Cannot specify both migrations_path and migration_categories"
            raise ConfigurationError(msg)

        root = Path(root_path).absolute()
        if not root.is_dir():
            raise ProjectNotFoundError(str(root_path))

        config = read_config(root)
        config_created = config is None
        if config is None:
            config = ProjectConfig.new(
                migrations_path=migrations_path,
                migration_categories=migration_categories,
                database_url=database_url,
            )

        statuses = []
        for category, directory in config.directories(root).items():
            created = not directory.is_dir()
            directory.mkdir(parents=True, exist_ok=True)
            statuses.append(DirectoryStatus(category, directory, created))

        if config_created:
            write_config(root, config)

        self._active = ActiveProject(root, config, self.flyway_factory(config.database_url, config.locations(root)))
        logger.info(
            "Project initialized at %s (%s mode, config %s)",
            root,
            config.mode.name,
            "created" if config_created else "existing",
        )
        return InitResult(
            root=root,
            config_path=config_path(root),
            config_created=config_created,
            config=config,
            directories=statuses,
        )

    # -- directory resolution --------------------------------------------

    def resolve_directory(self, category: str | None = None) -> Path:
        """Return the directory new migration files should be written to."""
        if self._active is None:
            return self._fallback_directory()

        root, config = self._active.root, self._active.config
        mode = config.mode
        if isinstance(mode, StructuredMode):
            if not category:
                raise CategoryRequiredError(mode.categories)
            if category not in mode.categories:
                raise InvalidCategoryError(category, mode.categories)
            return resolve_location(root, mode.categories[category])
        return resolve_location(root, mode.path)

    def _fallback_directory(self) -> Path:
        locations = self._fallback if self._fallback is not None else fallback_locations()
        for location in locations:
            if location.startswith(FILESYSTEM_PREFIX):
                return Path(location.removeprefix(FILESYSTEM_PREFIX))
        return Path(DEFAULT_MIGRATIONS_PATH)

    # -- path update -----------------------------------------------------

    def update_path(self, new_path: str) -> PathUpdate:
        """Point single-directory mode at *new_path*.

        Only the config changes; migration files already on disk stay where
        they are and must be moved by hand.
        """
        active = self.require_active()
        mode = active.config.mode
        if not isinstance(mode, SingleDirectoryMode):
            msg = (
                "update_migration_path only applies to single-directory projects. "
                "This project uses migration_categories; edit .flyway-mcp.json to change category directories."
            )
            raise ConfigurationError(msg)
        if not new_path.strip():
            msg = "new_migrations_path must be a non-empty string"
            raise ConfigurationError(msg)

        old_path = mode.path
        config = replace(active.config, mode=SingleDirectoryMode(new_path))
        path = write_config(active.root, config)
        self._active = ActiveProject(active.root, config, self.flyway_factory(config.database_url, config.locations(active.root)))
        logger.info("Migration path changed from %s to %s", old_path, new_path)
        return PathUpdate(
            old_path=old_path,
            new_path=new_path,
            old_directory=resolve_location(active.root, old_path),
            new_directory=resolve_location(active.root, new_path),
            config_path=path,
        )
