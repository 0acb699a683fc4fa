"""
Plugin Base Class

PluginBase: the small interface the bootstrapper and host depend on. Anything
that can be named, report its code paths and public directory, and load
itself into a LoadContext can be registered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from engines.context import LoadContext


class PluginBase(ABC):
    """
    Abstract base class for loadable plugins.

    Subclasses must provide `name`, `directory` and `load()`. `loaded` only
    ever goes from False to True.
    """

    name: str
    directory: Path
    public_directory: Path | None = None
    loaded: bool = False

    @abstractmethod
    def load(self, ctx: LoadContext) -> None:
        """
        Inject the plugin into the host described by `ctx`.

        Must be idempotent: calling it on an already loaded plugin returns
        without side effects.
        """

    @abstractmethod
    def load_paths(self) -> list[Path]:
        """Absolute code paths this plugin contributes to the load path."""

    def __repr__(self) -> str:
        state = "loaded" if self.loaded else "unloaded"
        return f"<{type(self).__name__} {self.name} ({state}) at {self.directory}>"
