"""
Load context: the host search lists plugins are spliced into.

A LoadContext bundles every list the plugin engine mutates during startup:

    load_path              : module search path (may be bound to sys.path)
    dependency_load_paths  : autoload/dependency search path
    locale_load_path       : locale resource files
    controller_paths       : directories registered with the routing layer
    view_paths             : template directories

One context covers one startup sequence. Tests build a fresh context each
time instead of touching process-wide state.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from engines.config import EnginesSettings

logger = logging.getLogger(__name__)


@dataclass
class LoadPathBoundary:
    """
    Position in a host search list after which plugin paths are inserted.

    `marker` is the entry that was last in the list when the boundary was
    recorded (None if the list was empty). Plugin paths go right after the
    marker, behind the plugin paths already spliced there, so host defaults
    stay first and plugins keep their registration order. Entries appended
    to the list later by other code end up after every plugin path.

    `occurrence` is which appearance of the marker was the tail, since a
    search list such as sys.path can hold the same entry more than once.
    """

    marker: str | None = None
    occurrence: int = 1
    spliced: list[str] = field(default_factory=list)

    @classmethod
    def record(cls, entries: list[str]) -> LoadPathBoundary:
        if not entries:
            return cls()
        return cls(marker=entries[-1], occurrence=entries.count(entries[-1]))

    def insertion_index(self, entries: list[str]) -> int:
        index = 0
        if self.marker is not None:
            positions = [i for i, entry in enumerate(entries) if entry == self.marker]
            if not positions:
                logger.warning("Load path marker %s is gone; appending plugin paths", self.marker)
                return len(entries)
            index = positions[min(self.occurrence, len(positions)) - 1] + 1
        spliced = set(self.spliced)
        while index < len(entries) and entries[index] in spliced:
            index += 1
        return index

    def splice(self, entries: list[str], paths: Iterable[str]) -> list[str]:
        """Insert `paths` after the boundary, skipping entries already present."""
        index = self.insertion_index(entries)
        inserted: list[str] = []
        for path in paths:
            if path in entries:
                logger.debug("Skipping duplicate load path entry %s", path)
                continue
            entries.insert(index, path)
            index += 1
            self.spliced.append(path)
            inserted.append(path)
        return inserted


@dataclass
class LoadContext:
    settings: EnginesSettings
    load_path: list[str] = field(default_factory=list)
    dependency_load_paths: list[str] = field(default_factory=list)
    locale_load_path: list[str] = field(default_factory=list)
    controller_paths: list[str] = field(default_factory=list)
    view_paths: list[str] = field(default_factory=list)
    load_path_boundary: LoadPathBoundary | None = None
    dependency_load_path_boundary: LoadPathBoundary | None = None
    # relative code path segment -> name of the plugin that claimed it
    code_segments: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_process(cls, settings: EnginesSettings, **lists: list[str]) -> LoadContext:
        """Context whose module search path is the interpreter's own sys.path."""
        return cls(settings=settings, load_path=sys.path, **lists)

    # ── Boundaries ────────────────────────────────────────────────────────────

    def store_load_path_markers(self) -> None:
        """Remember the current tail of both host search lists."""
        self.load_path_boundary = LoadPathBoundary.record(self.load_path)
        logger.debug("Host final load path: %s", self.load_path_boundary.marker)
        self.dependency_load_path_boundary = LoadPathBoundary.record(self.dependency_load_paths)
        logger.debug("Host final dependency load path: %s", self.dependency_load_path_boundary.marker)

    # ── Code paths ────────────────────────────────────────────────────────────

    def add_code_paths(self, plugin_name: str, directory: Path, relative_paths: Iterable[str]) -> list[str]:
        """
        Splice a plugin's existing code paths into both host search lists.

        With disable_code_mixing, a relative segment (e.g. "lib") already
        claimed by an earlier plugin is left out for every later plugin.

        Returns:
            The absolute paths that were accepted for this plugin.
        """
        if self.load_path_boundary is None or self.dependency_load_path_boundary is None:
            self.store_load_path_markers()

        accepted: list[str] = []
        for relative in relative_paths:
            owner = self.code_segments.get(relative)
            if self.settings.disable_code_mixing and owner is not None and owner != plugin_name:
                logger.debug("Code mixing disabled: %s/%s already provided by %s", plugin_name, relative, owner)
                continue
            self.code_segments.setdefault(relative, plugin_name)
            accepted.append(str(directory / relative))

        self.load_path_boundary.splice(self.load_path, accepted)
        self.dependency_load_path_boundary.splice(self.dependency_load_paths, accepted)
        return accepted

    def discard_code_paths(self, plugin_name: str, paths: Iterable[str]) -> None:
        """Undo add_code_paths for a plugin whose load was aborted."""
        for path in paths:
            for entries, boundary in (
                (self.load_path, self.load_path_boundary),
                (self.dependency_load_paths, self.dependency_load_path_boundary),
            ):
                if boundary is not None and path in boundary.spliced:
                    boundary.spliced.remove(path)
                    if path in entries:
                        entries.remove(path)
        released = [segment for segment, owner in self.code_segments.items() if owner == plugin_name]
        for segment in released:
            del self.code_segments[segment]
        logger.debug("Discarded code paths of %s, released segments %s", plugin_name, released)

    # ── Routing, views, locales ───────────────────────────────────────────────

    def add_controller_paths(self, paths: Iterable[str | Path]) -> None:
        for path in map(str, paths):
            if path not in self.controller_paths:
                self.controller_paths.append(path)

    def add_view_path(self, path: str | Path) -> None:
        if str(path) not in self.view_paths:
            self.view_paths.append(str(path))

    def add_locale_files(self, files: Iterable[str | Path]) -> list[str]:
        """
        Insert locale files right before the first application-owned entry.

        Plugin locales thus load after framework defaults but before the
        application's own files, which can override them. Without any
        application entry the files are appended.
        """
        new_files = [str(f) for f in files if str(f) not in self.locale_load_path]
        index = next(
            (i for i, entry in enumerate(self.locale_load_path) if self.is_application_path(entry)),
            len(self.locale_load_path),
        )
        self.locale_load_path[index:index] = new_files
        return new_files

    # ── Lookups ───────────────────────────────────────────────────────────────

    def is_application_path(self, path: str | Path) -> bool:
        """True for paths under the host root that are not inside a plugin root."""
        resolved = Path(path).resolve()
        if not resolved.is_relative_to(self.settings.root.resolve()):
            return False
        return not any(resolved.is_relative_to(Path(root).resolve()) for root in self.settings.plugin_paths)

    def find_code_files(self, relative: str | Path) -> list[Path]:
        """Every `<entry>/<relative>` on the dependency load path, in search order."""
        matches: list[Path] = []
        for entry in self.dependency_load_paths:
            if self.settings.disable_application_code_loading and self.is_application_path(entry):
                continue
            candidate = Path(entry) / relative
            if candidate.is_file():
                matches.append(candidate)
                if self.settings.disable_code_mixing:
                    break
        return matches

    def find_view(self, relative: str | Path) -> Path | None:
        for entry in self.view_paths:
            if self.settings.disable_application_view_loading and self.is_application_path(entry):
                continue
            candidate = Path(entry) / relative
            if candidate.is_file():
                return candidate
        return None
