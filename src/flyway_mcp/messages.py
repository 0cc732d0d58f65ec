"""Human-readable status texts returned by the tools and printed by the CLI."""

from __future__ import annotations

from flyway_mcp.migration_files import MigrationFile
from flyway_mcp.project import InitResult, PathUpdate


def _marker(created: bool) -> str:
    return "(created)" if created else "(already existed)"


def init_message(result: InitResult) -> str:
    config = result.config
    lines = [
        "Project initialized successfully!",
        "",
        f"Project: {result.root}",
        f"Mode: {config.mode.name}",
    ]
    if config.categories:
        lines.append("Migration categories:")
        for status in result.directories:
            lines.append(f"  - {status.category}: {status.path} {_marker(status.created)}")
    else:
        status = result.directories[0]
        lines.append(f"Migrations: {status.path} {_marker(status.created)}")
    lines.append(f"Config: {result.config_path} {_marker(result.config_created)}")
    if config.database_url:
        lines.append("Database: configured")
    else:
        lines.append(f"Database: not configured (add database_url to {result.config_path.name} to run Flyway commands)")

    lines += [
        "",
        "This project is now active. All migration operations will use this project's configuration.",
        "",
        "Next steps:",
    ]
    if config.categories:
        lines.append(f"1. Create migrations using 'create_migration' with a category ({', '.join(config.categories)})")
    else:
        lines.append("1. Create migrations using 'create_migration'")
    lines.append("2. Apply migrations using 'flyway_migrate'")
    return "\n".join(lines)


def path_update_message(update: PathUpdate) -> str:
    old, new = update.old_directory, update.new_directory
    return "\n".join(
        [
            "Migration path updated successfully!",
            "",
            f"Old path: {update.old_path} ({old})",
            f"New path: {update.new_path} ({new})",
            f"Config: {update.config_path} (updated)",
            "",
            "IMPORTANT: Existing migration files were NOT moved.",
            "New migrations will be created in the new location. To keep Flyway's history consistent,",
            "manually move any existing migration files:",
            "",
            f"  mkdir -p {new}",
            f"  mv {old}/*.sql {new}/",
            f"  rmdir {old}  # only if now empty",
        ]
    )


def migration_message(migration: MigrationFile) -> str:
    lines = [
        "Migration file created successfully:",
        "",
        f"Path: {migration.path}",
        f"Version: {migration.version}",
        f"Description: {migration.description}",
    ]
    if migration.category:
        lines.append(f"Category: {migration.category}")
    lines += [
        "",
        "Content:",
        migration.content,
        "",
        "Next steps:",
        "1. Review the migration file",
        "2. Run 'flyway_migrate' to apply the migration",
    ]
    return "\n".join(lines)
