"""Tests for stub rendering (module_maker.scaffolder.templates).

Covers:
- render_text literal substitution
- Replacement values are never re-expanded
- Unknown {{tokens}} and Blade syntax pass through untouched
- Stub resolution order and StubMissingError
- list_stubs / render_to_file
"""

from __future__ import annotations

import re

import pytest

from module_maker.errors import StubMissingError
from module_maker.naming import ModuleNames
from module_maker.scaffolder.templates import BUNDLED_STUBS_DIR, TemplateRenderer, render_text

pytestmark = pytest.mark.unit

EXPECTED_STUBS = {
    "config", "controller", "factory", "livewire-component", "livewire-view",
    "migration", "model", "request", "routes-api", "routes-api-livewire",
    "routes-web", "routes-web-full", "routes-web-livewire", "seeder",
    "seeder-plain", "service-provider", "test-feature", "test-feature-plain",
    "test-unit", "view-create",
    "view-edit", "view-index",
}


# ---------------------------------------------------------------------------
# render_text
# ---------------------------------------------------------------------------


class TestRenderText:
    def test_basic_substitution(self):
        assert render_text("class {{module}}Controller", {"{{module}}": "Blog"}) == "class BlogController"

    def test_every_occurrence_is_replaced(self):
        assert render_text("{{module}}/{{module}}", {"{{module}}": "Blog"}) == "Blog/Blog"

    def test_longer_tokens_win(self):
        tokens = {"{{module}}": "Blog", "{{moduleLower}}": "blog"}
        assert render_text("{{moduleLower}}:{{module}}", tokens) == "blog:Blog"

    def test_values_are_not_rescanned(self):
        tokens = {"{{module}}": "{{moduleLower}}", "{{moduleLower}}": "blog"}
        assert render_text("{{module}}", tokens) == "{{moduleLower}}"

    def test_unknown_tokens_survive(self):
        assert render_text("{{other}} {{ $title }}", {"{{module}}": "Blog"}) == "{{other}} {{ $title }}"

    def test_empty_inputs(self):
        assert render_text("", {"{{module}}": "Blog"}) == ""
        assert render_text("{{module}}", {}) == "{{module}}"

    def test_backslashes_in_values_are_literal(self):
        assert render_text("namespace {{ns}};", {"{{ns}}": "Modules\\Blog"}) == "namespace Modules\\Blog;"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TestTemplateRenderer:
    def test_bundled_stubs_always_searched(self):
        renderer = TemplateRenderer()
        assert renderer.stub_dirs == [BUNDLED_STUBS_DIR]
        assert set(renderer.list_stubs()) == EXPECTED_STUBS

    def test_override_directory_wins(self, tmp_path):
        (tmp_path / "model.stub").write_text("custom {{module}}\n", encoding="utf-8")
        renderer = TemplateRenderer([tmp_path])
        assert renderer.resolve("model") == tmp_path / "model.stub"
        assert renderer.resolve("controller").parent == BUNDLED_STUBS_DIR
        assert renderer.render("model", {"{{module}}": "Blog"}) == "custom Blog\n"
        assert renderer.list_stubs()["model"] == tmp_path / "model.stub"

    def test_missing_directories_are_ignored(self, tmp_path):
        renderer = TemplateRenderer([tmp_path / "missing"])
        assert renderer.resolve("model").parent == BUNDLED_STUBS_DIR
        assert set(renderer.list_stubs()) == EXPECTED_STUBS

    def test_missing_stub(self, tmp_path):
        renderer = TemplateRenderer([tmp_path])
        with pytest.raises(StubMissingError) as exc_info:
            renderer.resolve("nonexistent")
        assert exc_info.value.stub == "nonexistent"
        assert BUNDLED_STUBS_DIR in exc_info.value.searched

    def test_render_to_file(self, tmp_path):
        target = tmp_path / "out" / "Blog.php"
        renderer = TemplateRenderer()
        renderer.render_to_file("model", target, ModuleNames("Blog", "Modules").replacements())
        content = target.read_text(encoding="utf-8")
        assert "namespace Modules\\Blog\\Models;" in content
        assert "class Blog extends Model" in content
        assert "protected $table = 'blogs';" in content

    @pytest.mark.parametrize("stub", sorted(EXPECTED_STUBS))
    def test_every_bundled_stub_is_fully_rendered(self, stub):
        rendered = TemplateRenderer().render(stub, ModuleNames("BlogPost", "Modules").replacements())
        assert not re.findall(r"\{\{[A-Za-z]+\}\}", rendered)
