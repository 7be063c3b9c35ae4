"""
tests/test_renderer.py
Tests for daogen.renderer.TemplateRenderer.
"""

from __future__ import annotations

import pathlib

import pytest

from daogen.errors import TemplateRenderError
from daogen.renderer import TemplateRenderer


def test_render_context_values(template_dir: pathlib.Path) -> None:
    renderer = TemplateRenderer(template_dir)
    text = renderer.render(
        "dao.j2",
        {"className": "UserDao", "primaryKeys": [{"name": "userId"}]},
    )
    assert text == "class UserDao:\n    key = (user_id, )\n"


def test_missing_template(template_dir: pathlib.Path) -> None:
    renderer = TemplateRenderer(template_dir)
    with pytest.raises(TemplateRenderError) as excinfo:
        renderer.render("nope.j2", {})
    assert excinfo.value.template_name == "nope.j2"


def test_undefined_reference(template_dir: pathlib.Path) -> None:
    renderer = TemplateRenderer(template_dir)
    with pytest.raises(TemplateRenderError):
        renderer.render("broken.j2", {"className": "User"})


def test_syntax_error(template_dir: pathlib.Path) -> None:
    (template_dir / "syntax.j2").write_text("{% for x in %}", encoding="utf-8")
    renderer = TemplateRenderer(template_dir)
    with pytest.raises(TemplateRenderError):
        renderer.render("syntax.j2", {})


def test_no_html_escaping(template_dir: pathlib.Path) -> None:
    (template_dir / "generic.j2").write_text("List<{{ typeName }}> & co", encoding="utf-8")
    renderer = TemplateRenderer(template_dir)
    assert renderer.render("generic.j2", {"typeName": "Map<K, V>"}) == "List<Map<K, V>> & co"


def test_naming_filters(template_dir: pathlib.Path) -> None:
    (template_dir / "filters.j2").write_text(
        "{{ 'user_id' | camelize }} {{ 'UserDao' | lower_first }}", encoding="utf-8"
    )
    renderer = TemplateRenderer(template_dir)
    assert renderer.render("filters.j2", {}) == "UserId userDao"
