"""
Path selection helpers.

A plugin declares the directories it *may* contribute (code paths, controller
paths, asset directories); only the ones that actually exist on disk are used.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path


def select_existing_paths(paths: Iterable[str | Path]) -> list[Path]:
    """Return the paths that exist on disk, keeping their original order."""
    return [Path(p) for p in paths if Path(p).exists()]


@dataclass
class PathSet:
    """
    Ordered candidate paths relative to a plugin directory.

    Attributes:
        directory: The plugin directory the candidates are relative to.
        candidates: Relative path strings, e.g. "app/models", "lib".
    """

    directory: Path
    candidates: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[str]:
        return iter(self.candidates)

    def existing_relative(self) -> list[str]:
        """Relative candidates whose absolute path exists, in declared order."""
        return [p for p in self.candidates if (self.directory / p).exists()]

    def existing(self) -> list[Path]:
        """Absolute paths of the candidates that exist, in declared order."""
        return select_existing_paths(self.directory / p for p in self.candidates)
