"""
Custom Exception Classes for the plugin engine

This module defines the errors raised while discovering, loading, mirroring
and migrating plugins. Every error carries the paths involved in `details`
so a failed startup can be diagnosed from the log alone.
"""

from pathlib import Path
from typing import Any

from fastapi import status


class EnginesError(Exception):
    """Base exception class for all plugin engine exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Plugin Exceptions
# ============================================================================


class PluginInvalid(EnginesError):
    """Raised when a plugin directory is missing or contributes nothing loadable"""

    def __init__(self, name: str, directory: str | Path):
        super().__init__(
            message=f"Plugin '{name}' at '{directory}' is missing or contains no code paths",
            details={"plugin": name, "directory": str(directory)},
        )


class PluginNotFound(EnginesError):
    """Raised when a plugin is explicitly requested but cannot be located"""

    def __init__(self, name: str):
        super().__init__(
            message=f"Plugin '{name}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"plugin": name},
        )


# ============================================================================
# Asset Mirroring Exceptions
# ============================================================================


class DirectoryCreateFailed(EnginesError):
    """Raised when a destination directory cannot be created"""

    def __init__(self, path: str | Path, reason: str | None = None):
        message = f"Could not create directory {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, details={"path": str(path)})


class FileCopyFailed(EnginesError):
    """Raised when an asset file cannot be copied into the public directory"""

    def __init__(self, source: str | Path, destination: str | Path, reason: str | None = None):
        message = f"Could not copy {source} to {destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, details={"source": str(source), "destination": str(destination)})


class FileWriteFailed(EnginesError):
    """Raised when a generated file cannot be written into the public directory"""

    def __init__(self, path: str | Path, reason: str | None = None):
        message = f"Could not write {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, details={"path": str(path)})


# ============================================================================
# Migration Exceptions
# ============================================================================


class MigrationFailed(EnginesError):
    """Raised when a plugin migration step cannot be applied"""

    def __init__(self, plugin: str, version: int, path: str | Path | None = None, reason: str | None = None):
        message = f"Migration {version} of plugin '{plugin}' failed"
        if reason:
            message = f"{message}: {reason}"
        details: dict[str, Any] = {"plugin": plugin, "version": version}
        if path is not None:
            details["path"] = str(path)
        super().__init__(message=message, details=details)
