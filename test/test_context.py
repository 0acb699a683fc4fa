"""
Tests for the load context

Covers boundary recording and splicing, duplicate suppression, the
no-code-mixing rule, locale insertion and code/view lookups.
"""

from pathlib import Path

import pytest

from engines.context import LoadContext, LoadPathBoundary

# ══════════════════════════════════════════════════════════════════════════════
# 1. LoadPathBoundary
# ══════════════════════════════════════════════════════════════════════════════


class TestLoadPathBoundary:
    def test_record_uses_last_entry(self):
        assert LoadPathBoundary.record(["a", "b"]).marker == "b"

    def test_record_empty_list(self):
        assert LoadPathBoundary.record([]).marker is None

    def test_splice_after_marker(self):
        entries = ["core", "framework", "later"]
        boundary = LoadPathBoundary(marker="framework")
        boundary.splice(entries, ["p1", "p2"])
        assert entries == ["core", "framework", "p1", "p2", "later"]

    def test_successive_splices_keep_registration_order(self):
        entries = ["core"]
        boundary = LoadPathBoundary.record(entries)
        boundary.splice(entries, ["a/lib"])
        entries.append("unrelated")
        boundary.splice(entries, ["b/lib"])
        assert entries == ["core", "a/lib", "b/lib", "unrelated"]

    def test_empty_list_inserts_at_start(self):
        entries: list[str] = []
        boundary = LoadPathBoundary.record(entries)
        entries.append("added-later")
        boundary.splice(entries, ["p"])
        assert entries == ["p", "added-later"]

    def test_duplicates_are_not_inserted(self):
        entries = ["core", "a/lib"]
        boundary = LoadPathBoundary(marker="core")
        inserted = boundary.splice(entries, ["a/lib", "a/models"])
        assert inserted == ["a/models"]
        assert entries.count("a/lib") == 1

    def test_missing_marker_appends(self):
        entries = ["x"]
        boundary = LoadPathBoundary(marker="gone")
        boundary.splice(entries, ["p"])
        assert entries == ["x", "p"]

    def test_record_counts_repeated_marker(self):
        boundary = LoadPathBoundary.record(["/site", "/a", "/b", "/a"])
        assert boundary.marker == "/a"
        assert boundary.occurrence == 2

    def test_repeated_marker_splices_after_its_last_occurrence(self):
        entries = ["/site", "/a", "/b", "/a"]
        boundary = LoadPathBoundary.record(entries)
        boundary.splice(entries, ["/plugin/lib"])
        assert entries == ["/site", "/a", "/b", "/a", "/plugin/lib"]


# ══════════════════════════════════════════════════════════════════════════════
# 2. Code paths
# ══════════════════════════════════════════════════════════════════════════════


class TestAddCodePaths:
    def test_paths_land_after_host_defaults(self, ctx: LoadContext, tmp_path: Path):
        host_defaults = list(ctx.load_path)
        ctx.store_load_path_markers()
        ctx.add_code_paths("a", tmp_path / "a", ["lib"])
        assert ctx.load_path[: len(host_defaults)] == host_defaults
        assert ctx.load_path[len(host_defaults)] == str(tmp_path / "a" / "lib")

    def test_both_lists_are_spliced(self, ctx: LoadContext, tmp_path: Path):
        ctx.store_load_path_markers()
        ctx.add_code_paths("a", tmp_path / "a", ["lib"])
        assert str(tmp_path / "a" / "lib") in ctx.load_path
        assert ctx.dependency_load_paths[-1] == str(tmp_path / "a" / "lib")

    def test_boundary_recorded_lazily(self, ctx: LoadContext, tmp_path: Path):
        assert ctx.load_path_boundary is None
        ctx.add_code_paths("a", tmp_path / "a", ["lib"])
        assert ctx.load_path_boundary is not None
        assert ctx.load_path[-1] == str(tmp_path / "a" / "lib")

    def test_code_mixing_allowed_by_default(self, ctx: LoadContext, tmp_path: Path):
        ctx.add_code_paths("a", tmp_path / "a", ["lib"])
        ctx.add_code_paths("b", tmp_path / "b", ["lib"])
        assert str(tmp_path / "a" / "lib") in ctx.load_path
        assert str(tmp_path / "b" / "lib") in ctx.load_path

    def test_disable_code_mixing_keeps_first_segment(self, ctx: LoadContext, tmp_path: Path):
        ctx.settings.disable_code_mixing = True
        ctx.add_code_paths("a", tmp_path / "a", ["lib"])
        accepted = ctx.add_code_paths("b", tmp_path / "b", ["lib", "app/models"])

        assert accepted == [str(tmp_path / "b" / "app/models")]
        assert str(tmp_path / "a" / "lib") in ctx.load_path
        assert str(tmp_path / "b" / "lib") not in ctx.load_path
        assert str(tmp_path / "b" / "lib") not in ctx.dependency_load_paths

    def test_discard_releases_segments_and_paths(self, ctx: LoadContext, tmp_path: Path):
        ctx.settings.disable_code_mixing = True
        host_defaults = list(ctx.load_path)
        accepted = ctx.add_code_paths("a", tmp_path / "a", ["lib"])

        ctx.discard_code_paths("a", accepted)

        assert ctx.load_path == host_defaults
        assert ctx.code_segments == {}
        assert ctx.add_code_paths("b", tmp_path / "b", ["lib"]) == [str(tmp_path / "b" / "lib")]


# ══════════════════════════════════════════════════════════════════════════════
# 3. Controllers, views, locales
# ══════════════════════════════════════════════════════════════════════════════


class TestRegistration:
    def test_controller_paths_ordered_without_duplicates(self, ctx: LoadContext):
        ctx.add_controller_paths(["a/controllers", "a/components"])
        ctx.add_controller_paths(["a/controllers", "b/controllers"])
        assert ctx.controller_paths == ["a/controllers", "a/components", "b/controllers"]

    def test_view_paths_appended_once(self, ctx: LoadContext):
        ctx.add_view_path("/plugins/a/app/views")
        ctx.add_view_path("/plugins/a/app/views")
        assert ctx.view_paths[-1] == "/plugins/a/app/views"
        assert ctx.view_paths.count("/plugins/a/app/views") == 1


class TestLocaleFiles:
    def test_inserted_before_first_application_entry(self, ctx: LoadContext):
        root = ctx.settings.root
        framework = ctx.locale_load_path[0]
        app_locale = str(root / "config" / "locales" / "en.yml")
        ctx.locale_load_path.append(app_locale)

        ctx.add_locale_files([root / "plugins" / "blog" / "locales" / "en.yml"])

        assert ctx.locale_load_path == [
            framework,
            str(root / "plugins" / "blog" / "locales" / "en.yml"),
            app_locale,
        ]

    def test_plugin_root_entries_are_not_application_entries(self, ctx: LoadContext):
        root = ctx.settings.root
        first_plugin = str(root / "plugins" / "a" / "locales" / "en.yml")
        ctx.add_locale_files([first_plugin])
        ctx.add_locale_files([root / "plugins" / "b" / "locales" / "en.yml"])
        assert ctx.locale_load_path[-2:] == [first_plugin, str(root / "plugins" / "b" / "locales" / "en.yml")]

    def test_appended_without_application_entry(self, ctx: LoadContext):
        ctx.add_locale_files(["/elsewhere/fr.yml"])
        assert ctx.locale_load_path[-1] == "/elsewhere/fr.yml"
        assert len(ctx.locale_load_path) == 2

    def test_files_not_inserted_twice(self, ctx: LoadContext):
        ctx.add_locale_files(["/elsewhere/fr.yml"])
        assert ctx.add_locale_files(["/elsewhere/fr.yml"]) == []
        assert ctx.locale_load_path.count("/elsewhere/fr.yml") == 1


# ══════════════════════════════════════════════════════════════════════════════
# 4. Lookups
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def mixed_ctx(ctx: LoadContext, make_plugin) -> LoadContext:
    """Application and plugin both define models/post.py."""
    root = ctx.settings.root
    (root / "app" / "models" / "post.py").write_text("# app")
    plugin = make_plugin("blog", dirs=[], files={"app/models/post.py": "# plugin", "app/views/post.html": "plugin"})
    ctx.store_load_path_markers()
    ctx.add_code_paths("blog", plugin, ["app/models"])
    ctx.add_view_path(plugin / "app" / "views")
    return ctx


class TestLookups:
    def test_is_application_path(self, ctx: LoadContext):
        root = ctx.settings.root
        assert ctx.is_application_path(root / "app" / "models")
        assert not ctx.is_application_path(root / "plugins" / "blog" / "lib")
        assert not ctx.is_application_path("/usr/lib/python3")

    def test_find_code_files_returns_every_match(self, mixed_ctx: LoadContext):
        matches = mixed_ctx.find_code_files("post.py")
        assert [m.read_text() for m in matches] == ["# app", "# plugin"]

    def test_find_code_files_without_mixing(self, mixed_ctx: LoadContext):
        mixed_ctx.settings.disable_code_mixing = True
        assert [m.read_text() for m in mixed_ctx.find_code_files("post.py")] == ["# app"]

    def test_find_code_files_without_application_code(self, mixed_ctx: LoadContext):
        mixed_ctx.settings.disable_application_code_loading = True
        assert [m.read_text() for m in mixed_ctx.find_code_files("post.py")] == ["# plugin"]

    def test_find_view_prefers_application(self, mixed_ctx: LoadContext):
        root = mixed_ctx.settings.root
        (root / "app" / "views" / "post.html").write_text("app")
        assert mixed_ctx.find_view("post.html").read_text() == "app"

    def test_find_view_without_application_views(self, mixed_ctx: LoadContext):
        root = mixed_ctx.settings.root
        (root / "app" / "views" / "post.html").write_text("app")
        mixed_ctx.settings.disable_application_view_loading = True
        assert mixed_ctx.find_view("post.html").read_text() == "plugin"

    def test_find_view_missing(self, mixed_ctx: LoadContext):
        assert mixed_ctx.find_view("nope.html") is None
