import logging
from pathlib import Path

import pytest
from jinja2 import TemplateNotFound

from folio.templates import FALLBACK_TEMPLATE, TemplateEngine, TemplateLoader


def create_templates(tmp_path: Path) -> Path:
    templates = tmp_path / "templates"
    (templates / "partials").mkdir(parents=True)
    (templates / "default.jinja").write_text(
        "<main>{{ partial('nav') }}{{ content }}</main>", encoding="utf-8"
    )
    (templates / "partials" / "nav.jinja").write_text(
        "<nav>{{ request.page }}</nav>", encoding="utf-8"
    )
    return templates


def test_loader_reads_templates_and_partials(tmp_path):
    loader = TemplateLoader(create_templates(tmp_path))
    assert loader.load_template("default").startswith("<main>")
    assert loader.load_partial("nav") == "<nav>{{ request.page }}</nav>"


def test_loader_missing_returns_none(tmp_path, caplog):
    loader = TemplateLoader(create_templates(tmp_path))
    with caplog.at_level(logging.WARNING, logger="folio.templates"):
        assert loader.load_template("missing") is None
        assert loader.load_partial("missing") is None
    assert len(caplog.records) == 2


def test_loader_rejects_unsafe_names(tmp_path):
    templates = create_templates(tmp_path)
    (tmp_path / "outside.jinja").write_text("secret", encoding="utf-8")
    loader = TemplateLoader(templates)
    assert loader.load_template("../outside") is None
    assert loader.load_template("/etc/passwd") is None
    assert loader.load_partial("../default") is None


def test_get_source_for_jinja(tmp_path):
    loader = TemplateLoader(create_templates(tmp_path))
    engine = TemplateEngine(loader)
    source, filename, uptodate = loader.get_source(engine.env, "partials/nav")
    assert "nav" in source
    assert filename.endswith("nav.jinja")
    assert uptodate()
    with pytest.raises(TemplateNotFound):
        loader.get_source(engine.env, "absent")
    with pytest.raises(TemplateNotFound):
        loader.get_source(engine.env, "partials/../../secret")


def test_partial_renders_with_context(tmp_path):
    engine = TemplateEngine(TemplateLoader(create_templates(tmp_path)))
    template = engine.load_page_template("default")
    html = engine.expand(template, {"request": {"page": "hello"}, "content": "<p>x</p>"})
    assert html == "<main><nav>hello</nav>&lt;p&gt;x&lt;/p&gt;</main>"


def test_missing_partial_expands_to_nothing(tmp_path):
    engine = TemplateEngine(TemplateLoader(create_templates(tmp_path)))
    html = engine.expand("<header>{{ partial('absent') }}</header>{{ title }}", {"title": "T"})
    assert html == "<header></header>T"


def test_include_resolves_through_loader(tmp_path):
    engine = TemplateEngine(TemplateLoader(create_templates(tmp_path)))
    html = engine.expand(
        '{% include "partials/nav" %}|{% include "partials/absent" ignore missing %}',
        {"request": {"page": "p"}},
    )
    assert html == "<nav>p</nav>|"


def test_include_of_missing_partial_renders_nothing(tmp_path, caplog):
    engine = TemplateEngine(TemplateLoader(create_templates(tmp_path)))
    with caplog.at_level(logging.WARNING, logger="folio.templates"):
        html = engine.expand(
            '<body>{% include "partials/absent" %}{{ title }}</body>', {"title": "T"}
        )
    assert html == "<body>T</body>"
    assert any("partials/absent" in rec.getMessage() for rec in caplog.records)


def test_missing_page_template_uses_fallback(tmp_path):
    engine = TemplateEngine(TemplateLoader(tmp_path / "nothing"))
    assert engine.load_page_template("default") == FALLBACK_TEMPLATE


def test_expand_escapes_but_raw_does_not(tmp_path):
    engine = TemplateEngine(TemplateLoader(tmp_path))
    context = {"value": "<b>&</b>"}
    assert engine.expand("{{ value }}", context) == "&lt;b&gt;&amp;&lt;/b&gt;"
    assert engine.expand_raw("{{ value }}", context) == "<b>&</b>"


def test_undefined_values_render_empty(tmp_path):
    engine = TemplateEngine(TemplateLoader(tmp_path))
    assert engine.expand_raw("a{{ page.missing }}b{{ nothing }}c", {"page": {}}) == "abc"
