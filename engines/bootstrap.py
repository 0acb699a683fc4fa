"""
Engines bootstrapper

Runs once at process start:

    engines = Engines(settings, ctx)
    engines.init(initializer)       # before the host loads its plugins
    initializer.load_plugins(engines)
    engines.after_initialize()      # once the host has finished initialising

init() records where the host's default load paths end, turns plugins the
host already loaded into Plugin instances, makes sure the shared public
directory exists, and notices a trailing "*" in the configured plugin list.
after_initialize() then loads every remaining plugin if that "*" was present.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from engines.assets import initialize_base_public_directory
from engines.base import PluginBase
from engines.config import EnginesSettings, get_settings
from engines.context import LoadContext
from engines.exceptions import EnginesError
from engines.plugin import Plugin
from engines.registry import PluginList

if TYPE_CHECKING:
    from engines.host import HostInitializer

logger = logging.getLogger(__name__)

WILDCARD = "*"


def check_for_star_wildcard(plugins: list[str]) -> tuple[list[str], bool]:
    """Split a trailing "*" off a plugin list. Returns (plugins, load_all)."""
    if plugins and plugins[-1] == WILDCARD:
        return plugins[:-1], True
    return list(plugins), False


def plugin_name(path: str | Path) -> str:
    return Path(path).name


class Engines:
    """Orchestrates plugin loading for one startup sequence."""

    def __init__(
        self,
        settings: EnginesSettings | None = None,
        ctx: LoadContext | None = None,
        plugins: PluginList | None = None,
    ):
        self.settings = settings or get_settings()
        self.ctx = ctx or LoadContext(settings=self.settings)
        self.plugins = plugins
        self.initializer: HostInitializer | None = None
        self.load_all_plugins = False
        self.failures: dict[str, EnginesError] = {}

    @property
    def version(self) -> str:
        from engines import __version__

        return __version__

    @property
    def current(self) -> PluginBase | None:
        """The plugin loaded most recently."""
        return self.plugins.last() if self.plugins is not None else None

    # ── Startup ───────────────────────────────────────────────────────────────

    def init(self, initializer: HostInitializer) -> None:
        self.initializer = initializer
        self.load_all_plugins = False

        self.ctx.store_load_path_markers()

        if self.plugins is None:
            self.plugins = PluginList()
        self.enginize_previously_loaded_plugins()

        initialize_base_public_directory(self.settings.public_directory)

        self.check_for_star_wildcard()

        logger.debug("engines has started.")

    def enginize_previously_loaded_plugins(self) -> None:
        """Create Plugin instances for plugins the host loaded before the engines."""
        for name in self.initializer.loaded_plugins:
            if self.plugins.is_registered(name):
                continue
            root = self.find_plugin_path(name)
            if root is None:
                logger.warning("Previously loaded plugin %s not found in any plugin root", name)
                continue
            logger.debug("enginizing plugin: %s from %s", name, root / name)
            self.load_plugin(root / name)
        logger.debug("plugins is now: %s", ", ".join(self.plugins.names()))

    def check_for_star_wildcard(self) -> None:
        """Remove a trailing "*" from the host's plugin list and remember it."""
        plugins, load_all = check_for_star_wildcard(self.initializer.plugins)
        if load_all:
            self.initializer.plugins[:] = plugins
            self.load_all_plugins = True

    def after_initialize(self) -> None:
        """Load all remaining plugins if the plugin list ended with "*"."""
        if not self.load_all_plugins:
            return
        logger.debug("loading remaining plugins from %s", [str(p) for p in self.initializer.plugin_paths])
        self.initializer.load_all_plugins(self)
        logger.info("Plugin initialisation complete, %d plugins loaded", len(self.plugins))

    # ── Loading ───────────────────────────────────────────────────────────────

    def load_plugin(self, plugin: PluginBase | str | Path) -> PluginBase | None:
        """
        Load and register a plugin unless one with the same name is registered.

        A plugin that fails to load is recorded in `failures` and skipped, so
        the remaining plugins still load; with `fail_fast` the error propagates.

        Returns:
            The registered plugin for that name, or None if loading failed.
        """
        if self.plugins is None:
            self.plugins = PluginList()
        if not isinstance(plugin, PluginBase):
            plugin = Plugin(plugin)

        existing = self.plugins.get(plugin.name)
        if existing is not None:
            logger.debug("Plugin %s already loaded, ignoring %s", plugin.name, plugin.directory)
            return existing

        try:
            plugin.load(self.ctx)
        except EnginesError as exc:
            self.failures[plugin.name] = exc
            if self.settings.fail_fast:
                raise
            logger.error("Skipping plugin %s: %s", plugin.name, exc)
            return None

        self.failures.pop(plugin.name, None)
        self.plugins.register(plugin)
        return plugin

    # ── Helpers ───────────────────────────────────────────────────────────────

    @property
    def plugin_paths(self) -> list[Path]:
        if self.initializer is not None:
            return [Path(p) for p in self.initializer.plugin_paths]
        return [Path(p) for p in self.settings.plugin_paths]

    def find_plugin_path(self, name: str) -> Path | None:
        """The first plugin root holding a directory called `name`, or None."""
        return next((root for root in self.plugin_paths if (root / str(name)).is_dir()), None)

    plugin_name = staticmethod(plugin_name)
