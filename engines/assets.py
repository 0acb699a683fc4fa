"""
Asset mirroring

Copies each plugin's public files (its `assets` or `public` directory) into
a shared directory under the host's public root, one subdirectory per
plugin. Files are only written when missing or changed, and files that exist
only in the destination are never removed.
"""

from __future__ import annotations

import filecmp
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from engines.exceptions import DirectoryCreateFailed, FileCopyFailed, FileWriteFailed

if TYPE_CHECKING:
    from engines.plugin import Plugin

logger = logging.getLogger(__name__)

README_NAME = "README"

README_MESSAGE = """\
Files in this directory are automatically generated from your plugins.
They are copied from the 'assets' (or 'public') directory of each plugin into
this directory each time the application starts.
Any edits you make will NOT persist across the next restart; instead you
should edit the files within the <plugin_name>/assets/ directory itself.
"""


def initialize_base_public_directory(public_directory: Path) -> None:
    """Ensure the shared public directory exists and carries the README warning."""
    if not public_directory.exists():
        logger.debug("Creating public plugin files directory '%s'", public_directory)
        try:
            public_directory.mkdir(parents=True)
        except OSError as exc:
            raise DirectoryCreateFailed(public_directory, str(exc)) from exc

    target = public_directory / README_NAME
    if not target.exists():
        try:
            target.write_text(README_MESSAGE, encoding="utf-8")
        except OSError as exc:
            raise FileWriteFailed(target, str(exc)) from exc


def mirror_files_from(source: Path, destination: Path) -> list[Path]:
    """
    Mirror every file under `source` into `destination`.

    Args:
        source:      Directory to copy from. Nothing happens if it is missing.
        destination: Directory to copy into, created when absent.

    Returns:
        The destination files that were (re)written.

    Raises:
        DirectoryCreateFailed: a destination directory could not be created.
        FileCopyFailed: a file could not be copied, or a directory sits at its destination.
    """
    if not source.is_dir():
        return []

    entries = sorted(source.rglob("*"))
    source_dirs = [p for p in entries if p.is_dir()]
    source_files = [p for p in entries if not p.is_dir()]

    for directory in [source, *source_dirs]:
        target_dir = destination / directory.relative_to(source)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateFailed(target_dir, str(exc)) from exc

    # stat signatures can collide after an in-place edit within the mtime resolution
    filecmp.clear_cache()
    written: list[Path] = []
    for file in source_files:
        target = destination / file.relative_to(source)
        if target.is_dir():
            raise FileCopyFailed(file, target, "destination is a directory")
        try:
            if target.exists() and filecmp.cmp(file, target, shallow=False):
                continue
            shutil.copy(file, target)
        except OSError as exc:
            raise FileCopyFailed(file, target, str(exc)) from exc
        written.append(target)

    logger.debug("Mirrored %d of %d files from %s", len(written), len(source_files), source)
    return written


def mirror_files_for(plugin: Plugin, public_directory: Path) -> list[Path]:
    """Mirror a plugin's public directory into `<public_directory>/<plugin name>`."""
    if plugin.public_directory is None:
        return []

    initialize_base_public_directory(public_directory)
    logger.debug("Mirroring public files for %s from %s", plugin.name, plugin.public_directory)
    return mirror_files_from(Path(plugin.public_directory), public_directory / plugin.name)
