"""
Pytest configuration and fixtures for plugin engine tests
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from engines.config import EnginesSettings  # noqa: E402
from engines.context import LoadContext  # noqa: E402
from utils.plugin_tree import write_tree  # noqa: E402


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    """A host application root with a plugin root and some application code."""
    root = tmp_path / "host"
    (root / "app" / "models").mkdir(parents=True)
    (root / "app" / "views").mkdir(parents=True)
    (root / "plugins").mkdir()
    return root


@pytest.fixture
def settings(app_root: Path) -> EnginesSettings:
    return EnginesSettings(root=app_root, database_url="sqlite://", _env_file=None)


@pytest.fixture
def ctx(settings: EnginesSettings) -> LoadContext:
    """A fresh context with a couple of host defaults on every list."""
    root = settings.root
    return LoadContext(
        settings=settings,
        load_path=["/usr/lib/python3/site-packages", str(root / "app" / "models")],
        dependency_load_paths=[str(root / "app" / "models")],
        locale_load_path=["/usr/lib/python3/site-packages/framework/locale/en.yml"],
        view_paths=[str(root / "app" / "views")],
    )


@pytest.fixture
def make_plugin(app_root: Path):
    """
    Factory building a plugin directory under <root>/plugins.

    Usage:
        path = make_plugin("blog", dirs=["lib"], files={"assets/app.css": "body {}"})
    """

    def _make(
        name: str,
        dirs: list[str] | tuple[str, ...] = ("lib",),
        files: dict[str, str] | None = None,
        root: Path | None = None,
    ) -> Path:
        path = (root or app_root / "plugins") / name
        path.mkdir(parents=True, exist_ok=True)
        for d in dirs:
            (path / d).mkdir(parents=True, exist_ok=True)
        write_tree(path, files or {})
        return path

    return _make
