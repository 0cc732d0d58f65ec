"""Flyway migration file naming and writing.

Files are named ``V<YYYYMMDDHHMMSS>__<description>.sql`` using the UTC
clock, so versions sort chronologically as plain integers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from flyway_mcp.project import ProjectContext

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def migration_timestamp(now: datetime | None = None) -> str:
    """Return the 14-digit UTC version stamp for *now* (default: current time)."""
    now = now or datetime.now(UTC)
    if now.tzinfo is not None:
        now = now.astimezone(UTC)
    return now.strftime(TIMESTAMP_FORMAT)


def sanitize_description(description: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to ``_``, trim underscores."""
    return _NON_ALNUM_RE.sub("_", description.lower()).strip("_")


def migration_filename(version: str, description: str) -> str:
    return f"V{version}__{description}.sql"


@dataclass(frozen=True)
class MigrationFile:
    path: Path
    version: str
    description: str
    category: str | None
    content: str

    @property
    def filename(self) -> str:
        return self.path.name


def create_migration(
    context: ProjectContext,
    description: str,
    sql: str,
    category: str | None = None,
    *,
    now: datetime | None = None,
) -> MigrationFile:
    """Write *sql* verbatim to a new migration file in the active project.

    Two calls within the same second with the same description target the
    same filename; the later one overwrites the earlier.
    """
    active = context.require_active()
    directory = context.resolve_directory(category)
    directory.mkdir(parents=True, exist_ok=True)

    version = migration_timestamp(now)
    clean = sanitize_description(description)
    path = directory / migration_filename(version, clean)
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(sql)

    logger.info("Wrote migration %s", path)
    return MigrationFile(
        path=path,
        version=version,
        description=clean,
        category=category if active.config.categories else None,
        content=sql,
    )
