"""
Plugin Registry

PluginList: ordered, append-only collection of loaded plugins keyed by name.
Registration order is load order, so the last entry is the plugin that was
loaded most recently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from engines.exceptions import PluginNotFound

if TYPE_CHECKING:
    from engines.base import PluginBase

logger = logging.getLogger(__name__)


class PluginList:
    """
    Registry of loaded plugins.

    A name can only be registered once; plugins discovered a second time
    (for example from another plugin root) are ignored.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, PluginBase] = {}

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, plugin: PluginBase) -> bool:
        """Register a plugin. Returns False if its name was already taken."""
        if plugin.name in self._plugins:
            logger.debug("Plugin %s already registered, skipping %s", plugin.name, plugin.directory)
            return False
        self._plugins[plugin.name] = plugin
        logger.info("Plugin registered: %s", plugin.name)
        return True

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, name: str) -> PluginBase | None:
        """Return the plugin with the given name, or None if not registered."""
        return self._plugins.get(str(name))

    lookup = get

    def __getitem__(self, name: str) -> PluginBase:
        plugin = self.get(name)
        if plugin is None:
            raise PluginNotFound(str(name))
        return plugin

    def last(self) -> PluginBase | None:
        """The most recently registered plugin."""
        if not self._plugins:
            return None
        return next(reversed(self._plugins.values()))

    def names(self) -> Iterator[str]:
        yield from self._plugins

    def is_registered(self, name: str) -> bool:
        return str(name) in self._plugins

    def __contains__(self, item: object) -> bool:
        name = getattr(item, "name", item)
        return isinstance(name, str) and name in self._plugins

    def __iter__(self) -> Iterator[PluginBase]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    def __repr__(self) -> str:
        return f"<PluginList [{', '.join(self.names())}]>"
