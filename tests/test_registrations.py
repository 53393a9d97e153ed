"""Unit tests for host project registration (module_maker.registrations).

Tests cover:
- The edit set built for a module (autoload, provider, routes, navigation)
- planned() per kind and configuration
- register(): only existing module route files, idempotency, skeletons
- unregister(): byte-identical host files afterwards
- status(), including unreadable registry files
- Provider registries and layouts without their sentinel line
"""

from __future__ import annotations

import json

import pytest

from module_maker.config import Config, ModuleKind, RouteRegistration
from module_maker.registrations import HostRegistrar

pytestmark = pytest.mark.unit


def _module_routes(config: Config, name: str, *route_types: str) -> None:
    routes = config.module_path(name) / "Routes"
    routes.mkdir(parents=True, exist_ok=True)
    for route_type in route_types:
        (routes / f"{route_type}.php").write_text("<?php\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Edit construction
# ---------------------------------------------------------------------------


class TestEdits:
    def test_edit_names(self, config):
        edits = HostRegistrar(config).edits("Blog")
        assert list(edits) == ["autoload", "provider", "web_routes", "api_routes", "navigation"]

    def test_autoload_entry(self, config):
        edit = HostRegistrar(config).edits("Blog")["autoload"]
        assert edit.keys == ("autoload", "psr-4")
        assert edit.key == "Modules\\Blog\\"
        assert edit.value == "modules/Blog/"

    def test_route_includes_match_route_type(self, config):
        edits = HostRegistrar(config).edits("Blog")
        assert edits["web_routes"].path == config.web_routes_file
        assert edits["web_routes"].body == ("require_once __DIR__ . '/../modules/Blog/Routes/web.php';",)
        assert edits["api_routes"].path == config.api_routes_file
        assert edits["api_routes"].body == ("require_once __DIR__ . '/../modules/Blog/Routes/api.php';",)

    def test_navigation_link_uses_plural(self, config):
        edit = HostRegistrar(config).edits("Category")["navigation"]
        assert edit.body[0].startswith('<a href="/categories"')
        assert edit.body[1].strip() == "Categories"

    def test_custom_namespace(self, host_project):
        config = Config(root_path=host_project, namespace="App\\Modules", modules_dir="app/Modules")
        edits = HostRegistrar(config).edits("Blog")
        assert edits["autoload"].key == "App\\Modules\\Blog\\"
        assert edits["autoload"].value == "app/Modules/Blog/"
        assert edits["provider"].body == ("App\\Modules\\Blog\\Providers\\BlogServiceProvider::class,",)


class TestPlanned:
    def test_basic(self, config):
        assert HostRegistrar(config).planned(ModuleKind.BASIC) == [
            "autoload", "provider", "web_routes", "api_routes",
        ]

    @pytest.mark.parametrize("kind", [ModuleKind.UI, ModuleKind.COMBINED])
    def test_ui_kinds_get_navigation(self, config, kind):
        assert HostRegistrar(config).planned(kind)[-1] == "navigation"

    def test_routes_disabled(self, host_project):
        config = Config(root_path=host_project, auto_register_routes=False, register_navigation=False)
        assert HostRegistrar(config).planned(ModuleKind.COMBINED) == ["autoload", "provider"]

    def test_web_only(self, host_project):
        config = Config(root_path=host_project, route_registration=RouteRegistration.WEB)
        assert HostRegistrar(config).planned(ModuleKind.BASIC) == ["autoload", "provider", "web_routes"]


# ---------------------------------------------------------------------------
# register / unregister
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_basic(self, config):
        _module_routes(config, "Blog", "web", "api")
        applied = HostRegistrar(config).register("Blog", ModuleKind.BASIC)
        assert applied == ["autoload", "provider", "web_routes", "api_routes"]

        composer = json.loads(config.composer_file.read_text(encoding="utf-8"))
        assert composer["autoload"]["psr-4"]["Modules\\Blog\\"] == "modules/Blog/"
        providers = config.providers_file.read_text(encoding="utf-8")
        assert (
            "    Modules\\Blog\\Providers\\BlogServiceProvider::class,\n"
            "    // module-maker:end Blog\n"
            "];\n"
        ) in providers
        assert "Routes/web.php" in config.web_routes_file.read_text(encoding="utf-8")
        assert "Routes/api.php" in config.api_routes_file.read_text(encoding="utf-8")
        assert "Blog" not in config.layout_file.read_text(encoding="utf-8")

    def test_register_is_idempotent(self, config, host_snapshot):
        _module_routes(config, "Blog", "web", "api")
        registrar = HostRegistrar(config)
        registrar.register("Blog", ModuleKind.COMBINED)
        after_first = host_snapshot(config.root_path)
        assert registrar.register("Blog", ModuleKind.COMBINED) == []
        assert host_snapshot(config.root_path) == after_first

    def test_missing_module_route_file_is_skipped(self, config):
        _module_routes(config, "Blog", "web")
        applied = HostRegistrar(config).register("Blog", ModuleKind.BASIC)
        assert "web_routes" in applied
        assert "api_routes" not in applied
        assert "module-maker" not in config.api_routes_file.read_text(encoding="utf-8")

    def test_navigation_for_ui_module(self, config):
        _module_routes(config, "Blog", "web", "api")
        HostRegistrar(config).register("Blog", ModuleKind.UI)
        layout = config.layout_file.read_text(encoding="utf-8")
        assert "{{-- module-maker:begin Blog --}}" in layout
        assert layout.index('href="/blogs"') < layout.index("{{-- module-maker:navigation --}}")

    def test_missing_host_files_get_skeletons(self, tmp_path):
        config = Config(root_path=tmp_path, run_post_hooks=False)
        _module_routes(config, "Blog", "web", "api")
        HostRegistrar(config).register("Blog", ModuleKind.COMBINED)
        assert config.providers_file.read_text(encoding="utf-8").startswith("<?php\n\nreturn [\n")
        assert "Routes/web.php" in config.web_routes_file.read_text(encoding="utf-8")
        assert "module-maker:navigation" in config.layout_file.read_text(encoding="utf-8")
        assert "Modules\\Blog\\" in json.loads(config.composer_file.read_text(encoding="utf-8"))["autoload"]["psr-4"]


class TestUnregister:
    @pytest.mark.parametrize("kind", list(ModuleKind))
    def test_round_trip_restores_host_files(self, config, host_snapshot, kind):
        before = host_snapshot(config.root_path)
        _module_routes(config, "Blog", "web", "api")
        registrar = HostRegistrar(config)
        registrar.register("Blog", kind)
        assert host_snapshot(config.root_path) != before

        registrar.unregister("Blog")
        assert host_snapshot(config.root_path) == before

    def test_other_modules_survive(self, config):
        _module_routes(config, "Blog", "web", "api")
        _module_routes(config, "BlogPost", "web", "api")
        registrar = HostRegistrar(config)
        registrar.register("Blog", ModuleKind.COMBINED)
        registrar.register("BlogPost", ModuleKind.COMBINED)

        registrar.unregister("Blog")
        status = registrar.status("BlogPost", ModuleKind.COMBINED)
        assert all(status.values())
        assert not any(registrar.status("Blog", ModuleKind.COMBINED).values())

    def test_unregister_ignores_configuration(self, host_project, host_snapshot):
        before = host_snapshot(host_project)
        enabled = Config(root_path=host_project)
        _module_routes(enabled, "Blog", "web", "api")
        HostRegistrar(enabled).register("Blog", ModuleKind.COMBINED)

        disabled = Config(root_path=host_project, auto_register_routes=False, register_navigation=False)
        removed = HostRegistrar(disabled).unregister("Blog")
        assert set(removed) == {"autoload", "provider", "web_routes", "api_routes", "navigation"}
        assert host_snapshot(host_project) == before

    def test_unregister_unknown_module_is_noop(self, config, host_snapshot):
        before = host_snapshot(config.root_path)
        assert HostRegistrar(config).unregister("Ghost") == []
        assert host_snapshot(config.root_path) == before


class TestStatus:
    def test_status_before_and_after(self, config):
        _module_routes(config, "Blog", "web", "api")
        registrar = HostRegistrar(config)
        assert registrar.status("Blog", ModuleKind.BASIC) == {
            "autoload": False, "provider": False, "web_routes": False, "api_routes": False,
        }
        registrar.register("Blog", ModuleKind.BASIC)
        assert all(registrar.status("Blog", ModuleKind.BASIC).values())

    def test_status_with_unparsable_registry(self, config):
        _module_routes(config, "Blog", "web", "api")
        registrar = HostRegistrar(config)
        registrar.register("Blog", ModuleKind.BASIC)
        config.composer_file.write_text("{not json", encoding="utf-8")
        config.web_routes_file.write_bytes(b"<?php // caf\xe9\n")

        status = registrar.status("Blog", ModuleKind.BASIC)
        assert status["autoload"] is False
        assert status["web_routes"] is False
        assert status["provider"] is True


class TestNavigationSentinel:
    def test_layout_without_sentinel_is_left_alone(self, config):
        layout = "<html>\n<body>\n    <nav><a href=\"/\">Home</a></nav>\n</body>\n</html>\n"
        config.layout_file.write_text(layout, encoding="utf-8")
        _module_routes(config, "Blog", "web", "api")
        warnings: list[str] = []

        applied = HostRegistrar(config).register("Blog", ModuleKind.UI, on_warning=warnings.append)

        assert "navigation" not in applied
        assert "web_routes" in applied
        assert config.layout_file.read_text(encoding="utf-8") == layout
        assert len(warnings) == 1
        assert "module-maker:navigation" in warnings[0]

    def test_warning_callback_is_optional(self, config):
        config.layout_file.write_text("<html></html>\n", encoding="utf-8")
        _module_routes(config, "Blog", "web")
        assert "navigation" not in HostRegistrar(config).register("Blog", ModuleKind.UI)

    def test_one_line_provider_array_is_left_alone(self, config):
        providers = "<?php\n\nreturn [App\\Providers\\AppServiceProvider::class];\n"
        config.providers_file.write_text(providers, encoding="utf-8")
        _module_routes(config, "Blog", "web", "api")
        warnings: list[str] = []

        applied = HostRegistrar(config).register("Blog", ModuleKind.BASIC, on_warning=warnings.append)

        assert "provider" not in applied
        assert "autoload" in applied
        assert config.providers_file.read_text(encoding="utf-8") == providers
        assert len(warnings) == 1
        assert "Skipped provider registration" in warnings[0]
        assert "'];'" in warnings[0]
