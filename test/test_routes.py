"""
Tests for the FastAPI application and plugin diagnostics routes

The app is created with an isolated LoadContext so sys.path is untouched.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from engines.config import EnginesSettings
from engines.context import LoadContext
from main import boot_plugins, create_app

from utils.plugin_tree import migration_source


@pytest.fixture
def client(settings: EnginesSettings, ctx: LoadContext, make_plugin):
    make_plugin(
        "blog",
        dirs=["lib", "app/controllers"],
        files={
            "assets/blog.css": "body { color: red; }",
            "db/migrate/001_create_posts.py": migration_source("posts"),
        },
    )
    make_plugin("shop")
    settings.plugins = ["blog", "*"]
    with TestClient(create_app(settings, ctx)) as client:
        yield client


class TestBootPlugins:
    def test_full_startup_sequence(self, settings: EnginesSettings, ctx: LoadContext, make_plugin):
        make_plugin("a")
        make_plugin("b")
        settings.plugins = ["b", "*"]
        engines = boot_plugins(settings, ctx)
        assert list(engines.plugins.names()) == ["b", "a"]
        assert engines.load_all_plugins is True

    def test_failures_do_not_stop_startup(self, settings: EnginesSettings, ctx: LoadContext, make_plugin):
        make_plugin("broken", dirs=[])
        make_plugin("good")
        settings.plugins = ["broken", "good"]
        engines = boot_plugins(settings, ctx)
        assert list(engines.plugins.names()) == ["good"]
        assert "broken" in engines.failures


class TestPluginRoutes:
    def test_list_plugins(self, client: TestClient):
        response = client.get("/plugins/")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["blog", "shop"]

    def test_get_plugin(self, client: TestClient):
        data = client.get("/plugins/blog").json()
        assert data["loaded"] is True
        assert data["public_asset_directory"] == "plugin_assets/blog"
        assert data["migrations"] == [1]
        assert data["latest_migration"] == 1
        assert data["controller_paths"][0].endswith("app/controllers")

    def test_plugin_without_assets(self, client: TestClient):
        data = client.get("/plugins/shop").json()
        assert data["public_asset_directory"] is None
        assert data["latest_migration"] is None

    def test_unknown_plugin_404(self, client: TestClient):
        response = client.get("/plugins/ghost")
        assert response.status_code == 404
        assert "ghost" in response.json()["detail"]

    def test_migrate_plugin(self, client: TestClient):
        response = client.post("/plugins/blog/migrate", json={})
        assert response.status_code == 200
        assert response.json() == {"name": "blog", "version": 1}

    def test_migrate_unknown_plugin(self, client: TestClient):
        assert client.post("/plugins/ghost/migrate", json={}).status_code == 404

    def test_mirrored_assets_are_served(self, client: TestClient):
        response = client.get("/plugin_assets/blog/blog.css")
        assert response.status_code == 200
        assert "color: red" in response.text

    def test_readme_is_served(self, client: TestClient):
        assert client.get("/plugin_assets/README").status_code == 200
