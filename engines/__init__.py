"""
Engines: plugin loading for web applications

Public API:
    Plugin          : one plugin directory and what it contributes
    PluginList      : ordered registry of loaded plugins
    Engines         : startup orchestration (init / after_initialize)
    LoadContext     : the host search lists plugins are spliced into
    EnginesSettings : configuration
"""

__version__ = "1.2.0"

from .bootstrap import Engines, check_for_star_wildcard
from .config import EnginesSettings, get_settings
from .context import LoadContext, LoadPathBoundary
from .plugin import Plugin
from .registry import PluginList

__all__ = [
    "Engines",
    "EnginesSettings",
    "LoadContext",
    "LoadPathBoundary",
    "Plugin",
    "PluginList",
    "check_for_star_wildcard",
    "get_settings",
]
