"""
Plugin Migrator

Applies a plugin's migrations (`<plugin>/db/migrate/<version>_<name>.py`)
and records the version each plugin is at in a schema info table.

Each migration module defines:

    def upgrade(connection): ...
    def downgrade(connection): ...

Both receive a SQLAlchemy Connection inside a transaction; the schema info
row is updated in the same transaction, so a failing step leaves the plugin
at the previous version.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, select
from sqlalchemy.engine import Connection, Engine

from engines.exceptions import MigrationFailed

if TYPE_CHECKING:
    from engines.config import EnginesSettings
    from engines.plugin import Plugin

logger = logging.getLogger(__name__)


class Migrator:
    """Runs plugin migrations against a SQLAlchemy engine."""

    def __init__(self, engine: Engine, schema_info_table: str = "plugin_schema_info"):
        self.engine = engine
        self.metadata = MetaData()
        self.schema_info = Table(
            schema_info_table,
            self.metadata,
            Column("plugin_name", String(255), primary_key=True),
            Column("version", Integer, nullable=False, default=0),
        )

    @classmethod
    def from_settings(cls, settings: EnginesSettings) -> Migrator:
        return cls(create_engine(settings.database_url), settings.schema_info_table)

    def initialize_schema_information(self) -> None:
        self.metadata.create_all(self.engine)

    def current_version(self, plugin: Plugin) -> int:
        """The version recorded for the plugin, 0 if it was never migrated."""
        self.initialize_schema_information()
        with self.engine.connect() as conn:
            version = conn.execute(
                select(self.schema_info.c.version).where(self.schema_info.c.plugin_name == plugin.name)
            ).scalar()
        return version or 0

    def migrate_plugin(self, plugin: Plugin, version: int | None = None) -> int:
        """
        Migrate a plugin up or down to `version` (its latest migration if None).

        Returns:
            The version the plugin is at afterwards.

        Raises:
            MigrationFailed: a migration file could not be loaded or applied.
        """
        files = plugin.migration_files()
        target = version if version is not None else (plugin.latest_migration() or 0)
        current = self.current_version(plugin)

        if target == current:
            logger.debug("Plugin %s already at version %d", plugin.name, current)
            return current

        if target > current:
            for step in [v for v in files if current < v <= target]:
                self._run(plugin, step, files[step], "upgrade", step)
                current = step
        else:
            versions = list(files)
            for step in [v for v in reversed(versions) if target < v <= current]:
                previous = max([v for v in versions if v < step] + [0])
                current = max(previous, target)
                self._run(plugin, step, files[step], "downgrade", current)

        logger.info("Plugin %s migrated to version %d", plugin.name, current)
        return current

    def _run(self, plugin: Plugin, step: int, path: Path, direction: str, new_version: int) -> None:
        logger.debug("Running %s of %s migration %d (%s)", direction, plugin.name, step, path.name)
        module = self._load_module(plugin, step, path)
        migration = getattr(module, direction, None)
        if not callable(migration):
            raise MigrationFailed(plugin.name, step, path, f"no {direction}() defined")
        try:
            with self.engine.begin() as conn:
                migration(conn)
                self._record_version(conn, plugin.name, new_version)
        except Exception as exc:
            raise MigrationFailed(plugin.name, step, path, str(exc)) from exc

    def _load_module(self, plugin: Plugin, step: int, path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(f"_engines_migration_{plugin.name}_{step}", path)
        if spec is None or spec.loader is None:
            raise MigrationFailed(plugin.name, step, path, "not an importable file")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise MigrationFailed(plugin.name, step, path, str(exc)) from exc
        return module

    def _record_version(self, conn: Connection, plugin_name: str, version: int) -> None:
        table = self.schema_info
        exists = conn.execute(select(table.c.plugin_name).where(table.c.plugin_name == plugin_name)).first()
        if exists:
            conn.execute(table.update().where(table.c.plugin_name == plugin_name).values(version=version))
        else:
            conn.execute(table.insert().values(plugin_name=plugin_name, version=version))
