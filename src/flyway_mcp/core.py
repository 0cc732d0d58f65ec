"""Project configuration for flyway-mcp.

Each project root carries a ``.flyway-mcp.json`` file recording where new
migration files go and, optionally, the database connection string Flyway
should use. A config is in exactly one of two modes:

* single directory -- ``migrations_path`` names one directory;
* structured       -- ``migration_categories`` maps category names to
  directories (e.g. ``schema``, ``data``, ``seed``).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from flyway_mcp.errors import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILENAME = ".flyway-mcp.json"
DEFAULT_MIGRATIONS_PATH = "./migrations"
FILESYSTEM_PREFIX = "filesystem:"

_KNOWN_KEYS = frozenset({"migrations_path", "migration_categories", "database_url", "created_at"})


# ---------------------------------------------------------------------------
# Config modes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleDirectoryMode:
    path: str

    name = "single directory"


@dataclass(frozen=True)
class StructuredMode:
    categories: dict[str, str]

    name = "structured"


ConfigMode = SingleDirectoryMode | StructuredMode


def resolve_location(root: Path, location: str) -> Path:
    """Resolve a configured directory against the project root.

    Absolute paths are returned untouched; relative ones are joined to *root*
    and normalized (``./migrations`` -> ``<root>/migrations``).
    """
    if os.path.isabs(location):
        return Path(location)
    return Path(os.path.normpath(root / location))


@dataclass
class ProjectConfig:
    """In-memory form of ``.flyway-mcp.json``."""

    mode: ConfigMode
    created_at: str
    database_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        *,
        migrations_path: str | None = None,
        migration_categories: dict[str, str] | None = None,
        database_url: str | None = None,
    ) -> ProjectConfig:
        """Build a fresh config. Defaults to single-directory ``./migrations``."""
        if migrations_path is not None and migration_categories is not None:
            msg = "Cannot specify both migrations_path and migration_categories"
            raise ConfigurationError(msg)
        if migrations_path is not None and not migrations_path.strip():
            msg = "migrations_path must be a non-empty string"
            raise ConfigurationError(msg)
        mode: ConfigMode
        if migration_categories is not None:
            if not migration_categories:
                msg = "migration_categories must name at least one category"
                raise ConfigurationError(msg)
            mode = StructuredMode(dict(migration_categories))
        else:
            mode = SingleDirectoryMode(migrations_path or DEFAULT_MIGRATIONS_PATH)
        return cls(mode=mode, created_at=datetime.now(UTC).isoformat(), database_url=database_url)

    @classmethod
    def from_dict(cls, data: Any, *, source: str = CONFIG_FILENAME) -> ProjectConfig:
        if not isinstance(data, dict):
            msg = f"{source} must contain a JSON object"
            raise ConfigurationError(msg)
        has_path = "migrations_path" in data
        has_categories = "migration_categories" in data
        if has_path and has_categories:
            msg = f"{source}: cannot specify both migrations_path and migration_categories"
            raise ConfigurationError(msg)

        mode: ConfigMode
        if has_categories:
            categories = data["migration_categories"]
            if (
                not isinstance(categories, dict)
                or not categories
                or not all(isinstance(k, str) and isinstance(v, str) for k, v in categories.items())
            ):
                msg = f"{source}: migration_categories must map category names to directory strings"
                raise ConfigurationError(msg)
            mode = StructuredMode(dict(categories))
        elif has_path:
            path = data["migrations_path"]
            if not isinstance(path, str) or not path:
                msg = f"{source}: migrations_path must be a non-empty string"
                raise ConfigurationError(msg)
            mode = SingleDirectoryMode(path)
        else:
            msg = f"{source}: one of migrations_path or migration_categories is required"
            raise ConfigurationError(msg)

        database_url = data.get("database_url")
        if database_url is not None and not isinstance(database_url, str):
            msg = f"{source}: database_url must be a string"
            raise ConfigurationError(msg)

        return cls(
            mode=mode,
            created_at=str(data.get("created_at", "")),
            database_url=database_url,
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if isinstance(self.mode, StructuredMode):
            data["migration_categories"] = dict(self.mode.categories)
        else:
            data["migrations_path"] = self.mode.path
        if self.database_url is not None:
            data["database_url"] = self.database_url
        data["created_at"] = self.created_at
        data.update(self.extra)
        return data

    @property
    def categories(self) -> list[str]:
        if isinstance(self.mode, StructuredMode):
            return sorted(self.mode.categories)
        return []

    def directories(self, root: Path) -> dict[str | None, Path]:
        """Map each configured location to its absolute directory.

        Keys are category names in structured mode and ``None`` in
        single-directory mode.
        """
        if isinstance(self.mode, StructuredMode):
            return {name: resolve_location(root, loc) for name, loc in self.mode.categories.items()}
        return {None: resolve_location(root, self.mode.path)}

    def locations(self, root: Path) -> list[str]:
        """Flyway ``-locations`` values for every configured directory."""
        return [f"{FILESYSTEM_PREFIX}{path}" for path in self.directories(root).values()]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def config_path(root: Path) -> Path:
    return root / CONFIG_FILENAME


def read_config(root: Path) -> ProjectConfig | None:
    """Read ``<root>/.flyway-mcp.json``. Returns None if the file is missing.

    Raises ConfigurationError if the file exists but is not a valid config.
    """
    path = config_path(root)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"{path} is not valid JSON: {exc}"
        raise ConfigurationError(msg) from exc
    return ProjectConfig.from_dict(data, source=str(path))


def write_config(root: Path, config: ProjectConfig) -> Path:
    """Write ``<root>/.flyway-mcp.json`` and return its path."""
    path = config_path(root)
    path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote %s", path)
    return path


def fallback_locations() -> list[str]:
    """Locations from ``FLYWAY_LOCATIONS`` (comma separated), if set."""
    raw = os.environ.get("FLYWAY_LOCATIONS", "")
    return [loc.strip() for loc in raw.split(",") if loc.strip()]
