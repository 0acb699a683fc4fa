"""
Plugin

An instance of Plugin is created for each plugin directory the host loads and
stored in the bootstrapper's PluginList:

    engines.plugins["plugin_name"]

If a plugin keeps code in directories other than the defaults, its authors
can declare them before the plugin is loaded:

    engines.plugins["my_plugin"].code_paths.append("app/sweepers")

Other attributes (controller_paths, public_directory) can be set the same way.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from engines.assets import mirror_files_for
from engines.base import PluginBase
from engines.exceptions import EnginesError, PluginInvalid
from engines.paths import PathSet, select_existing_paths

if TYPE_CHECKING:
    from engines.context import LoadContext
    from engines.migrator import Migrator

logger = logging.getLogger(__name__)

# Code paths added to the load path and the dependency load path
DEFAULT_CODE_PATHS = ("app/controllers", "app/helpers", "app/models", "components", "lib")

# Code paths registered with the routing layer
DEFAULT_CONTROLLER_PATHS = ("app/controllers", "components")

# Candidate public directories, first existing one wins
PUBLIC_DIRECTORY_CANDIDATES = ("assets", "public")

# Files whose presence marks a directory as a plugin even without code paths
PLUGIN_MARKERS = ("init.py", "__init__.py")

LOCALE_PATTERNS = ("*.yml", "*.yaml", "*.json", "*.py")

MIGRATION_VERSION = re.compile(r"0*(\d+)_")


class Plugin(PluginBase):
    """A plugin directory and everything it contributes to the host."""

    def __init__(self, directory: str | Path, name: str | None = None):
        self.directory = Path(directory).absolute()
        self.name = name or self.directory.name
        self.loaded = False
        self.code_paths: list[str] = list(DEFAULT_CODE_PATHS)
        self.controller_paths: list[str] = list(DEFAULT_CONTROLLER_PATHS)
        self.public_directory = self.default_public_directory()

    def default_public_directory(self) -> Path | None:
        """`assets` if the plugin has it, otherwise `public`, otherwise None."""
        existing = select_existing_paths(self.directory / p for p in PUBLIC_DIRECTORY_CANDIDATES)
        return existing[0] if existing else None

    # ── Path selection ────────────────────────────────────────────────────────

    def select_existing_paths(self, attribute: str) -> list[Path]:
        """Existing absolute paths for "code_paths" or "controller_paths"."""
        return PathSet(self.directory, getattr(self, attribute)).existing()

    def valid(self) -> bool:
        if not self.directory.is_dir():
            return False
        if self.select_existing_paths("code_paths") or self.select_existing_paths("controller_paths"):
            return True
        return any((self.directory / marker).is_file() for marker in PLUGIN_MARKERS)

    def load_paths(self) -> list[Path]:
        if not self.valid():
            raise PluginInvalid(self.name, self.directory)
        return self.select_existing_paths("code_paths")

    def locale_files(self) -> list[Path]:
        locale_path = self.directory / "locales"
        if not locale_path.is_dir():
            return []
        files = {f for pattern in LOCALE_PATTERNS for f in locale_path.glob(pattern) if f.is_file()}
        return sorted(files)

    # ── Loading ───────────────────────────────────────────────────────────────

    def load(self, ctx: LoadContext) -> None:
        if self.loaded:
            return

        code_paths: list[str] = []
        try:
            self.load_paths()
            code_paths = ctx.add_code_paths(
                self.name, self.directory, PathSet(self.directory, self.code_paths).existing_relative()
            )
            ctx.add_controller_paths(self.select_existing_paths("controller_paths"))
            views = self.directory / "app" / "views"
            if views.is_dir():
                ctx.add_view_path(views)
            self.add_plugin_locale_paths(ctx)
            mirror_files_for(self, ctx.settings.public_directory)
        except EnginesError as exc:
            ctx.discard_code_paths(self.name, code_paths)
            exc.details.setdefault("plugin", self.name)
            logger.warning("Plugin %s failed to load: %s", self.name, exc)
            raise

        self.loaded = True
        logger.debug("Plugin %s loaded from %s", self.name, self.directory)

    def add_plugin_locale_paths(self, ctx: LoadContext) -> None:
        locale_files = self.locale_files()
        if locale_files:
            ctx.add_locale_files(locale_files)

    # ── Public assets ─────────────────────────────────────────────────────────

    def public_asset_directory(self, public_directory: Path) -> str:
        """URL path of this plugin's mirrored files, e.g. "plugin_assets/blog"."""
        return f"{Path(public_directory).name}/{self.name}"

    # ── Migrations ────────────────────────────────────────────────────────────

    @property
    def migration_directory(self) -> Path:
        return self.directory / "db" / "migrate"

    def migration_files(self) -> dict[int, Path]:
        """
        Migration files keyed by version; names without a version prefix are ignored.

        When two files share a version the first by file name is kept and the
        other is reported with a warning.
        """
        files: dict[int, Path] = {}
        if not self.migration_directory.is_dir():
            return files
        for path in sorted(self.migration_directory.glob("*.py")):
            match = MIGRATION_VERSION.match(path.name)
            if not match:
                continue
            version = int(match.group(1))
            if version in files:
                logger.warning(
                    "Plugin %s has duplicate migration version %d: ignoring %s, using %s",
                    self.name, version, path.name, files[version].name,
                )
                continue
            files[version] = path
        return dict(sorted(files.items()))

    def migrations(self) -> list[int]:
        return list(self.migration_files())

    def latest_migration(self) -> int | None:
        """Version of the newest migration, or None when the plugin has none."""
        migrations = self.migrations()
        return migrations[-1] if migrations else None

    def migrate(self, migrator: Migrator, version: int | None = None) -> int:
        return migrator.migrate_plugin(self, version)
