"""
Host initializer

The bootstrapper only needs a narrow view of the host framework's own plugin
loader: the configured plugin list, the plugin roots, the names of plugins
the host loaded before the engines took over, and a way to load "everything
else". HostInitializer describes that view; PluginInitializer is the default
implementation used by the bundled FastAPI application and the tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from engines.exceptions import PluginNotFound

if TYPE_CHECKING:
    from engines.bootstrap import Engines
    from engines.config import EnginesSettings

logger = logging.getLogger(__name__)


class HostInitializer(Protocol):
    plugins: list[str]
    plugin_paths: list[Path]
    loaded_plugins: list[str]

    def load_all_plugins(self, engines: Engines) -> None: ...


class PluginInitializer:
    """Directory-based host: every subdirectory of a plugin root is a plugin."""

    def __init__(self, settings: EnginesSettings, loaded_plugins: Iterable[str] = ()):
        self.settings = settings
        self.plugins: list[str] = list(settings.plugins)
        self.plugin_paths: list[Path] = [Path(p) for p in settings.plugin_paths]
        self.loaded_plugins: list[str] = list(loaded_plugins)

    def discover(self) -> list[Path]:
        """
        Every plugin directory under the plugin roots.

        Roots are searched in order and directories sorted by name within a
        root; when two roots hold the same name, the first root wins.
        """
        found: dict[str, Path] = {}
        for root in self.plugin_paths:
            if not root.is_dir():
                logger.debug("Plugin root %s does not exist", root)
                continue
            for path in sorted(p for p in root.iterdir() if p.is_dir() and not p.name.startswith((".", "_"))):
                found.setdefault(path.name, path)
        return list(found.values())

    def load_plugins(self, engines: Engines) -> None:
        """Load the configured plugins, in configuration order."""
        for name in self.plugins:
            if name == "*":
                continue
            root = engines.find_plugin_path(name)
            if root is None:
                if self.settings.fail_fast:
                    raise PluginNotFound(name)
                logger.warning("Configured plugin %s not found in %s", name, self.plugin_paths)
                continue
            engines.load_plugin(root / name)
            if name not in self.loaded_plugins:
                self.loaded_plugins.append(name)

    def load_all_plugins(self, engines: Engines) -> None:
        """Attempt to load every discoverable plugin; registered ones are skipped."""
        for path in self.discover():
            engines.load_plugin(path)
            if path.name not in self.loaded_plugins:
                self.loaded_plugins.append(path.name)
