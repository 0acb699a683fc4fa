"""
Plugin Diagnostics Routes

GET  /plugins                 → list loaded plugins in load order
GET  /plugins/{name}          → get single plugin by name
POST /plugins/{name}/migrate  → migrate plugin to a version (latest by default)

The Engines instance and the Migrator are read from `app.state`, where the
application factory in main.py puts them during startup.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from engines.bootstrap import Engines
from engines.exceptions import MigrationFailed, PluginNotFound
from engines.migrator import Migrator
from engines.plugin import Plugin

router = APIRouter(tags=["Plugins"])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class MigrateRequest(BaseModel):
    version: int | None = None


class PluginResponse(BaseModel):
    name: str
    directory: str
    loaded: bool
    code_paths: list[str]
    controller_paths: list[str]
    public_asset_directory: str | None
    migrations: list[int]
    latest_migration: int | None


class MigrateResponse(BaseModel):
    name: str
    version: int


# ── Helpers ────────────────────────────────────────────────────────────────────


def get_engines(request: Request) -> Engines:
    return request.app.state.engines


def get_migrator(request: Request) -> Migrator:
    return request.app.state.migrator


def _build_response(plugin: Plugin, engines: Engines) -> PluginResponse:
    public = None
    if plugin.public_directory is not None:
        public = plugin.public_asset_directory(engines.settings.public_directory)
    return PluginResponse(
        name=plugin.name,
        directory=str(plugin.directory),
        loaded=plugin.loaded,
        code_paths=[str(p) for p in plugin.select_existing_paths("code_paths")],
        controller_paths=[str(p) for p in plugin.select_existing_paths("controller_paths")],
        public_asset_directory=public,
        migrations=plugin.migrations(),
        latest_migration=plugin.latest_migration(),
    )


def _get_or_404(name: str, engines: Engines) -> Plugin:
    try:
        return engines.plugins[name]
    except (PluginNotFound, TypeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Plugin not found: {name}",
        ) from exc


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/", response_model=list[PluginResponse])
async def list_plugins(engines: Engines = Depends(get_engines)) -> list[PluginResponse]:
    """List loaded plugins in load order."""
    if engines.plugins is None:
        return []
    return [_build_response(p, engines) for p in engines.plugins]


@router.get("/{name}", response_model=PluginResponse)
async def get_plugin(name: str, engines: Engines = Depends(get_engines)) -> PluginResponse:
    return _build_response(_get_or_404(name, engines), engines)


@router.post("/{name}/migrate", response_model=MigrateResponse)
async def migrate_plugin(
    name: str,
    payload: MigrateRequest,
    engines: Engines = Depends(get_engines),
    migrator: Migrator = Depends(get_migrator),
) -> MigrateResponse:
    """Migrate a plugin to the requested version, or its latest migration."""
    plugin = _get_or_404(name, engines)
    try:
        version = plugin.migrate(migrator, payload.version)
    except MigrationFailed as exc:
        logger.error("Plugin migration failed: %s", exc)
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return MigrateResponse(name=plugin.name, version=version)
