from pathlib import Path

import pytest

from folio.context import ContextBuilder
from folio.errors import RenderError
from folio.pipeline import RenderPipeline
from folio.renderers import MarkdownRenderer, html_from_markdown
from folio.taxonomy import build_index
from folio.templates import TemplateEngine, TemplateLoader


def create_project(tmp_path: Path) -> Path:
    static = tmp_path / "static"
    templates = tmp_path / "templates"
    (static / "tags").mkdir(parents=True)
    (templates / "partials").mkdir(parents=True)
    (static / "hello.md").write_text(
        "---\ntitle: Hello\ntags: intro, demo\n---\n# Hi {{request.page}}\n",
        encoding="utf-8",
    )
    (static / "post.md").write_text(
        "---\ntitle: Post\ntemplate: post\ntags: demo\n---\nSome *text*.\n",
        encoding="utf-8",
    )
    (static / "tags" / "children.md").write_text(
        "---\nparent: tags\n---\n"
        "{% for ref in references.pages %}- [{{ ref.title }}]({{ ref.link }})\n{% endfor %}",
        encoding="utf-8",
    )
    (static / "list.jinja").write_text(
        "<ul>{% for term in site.taxonomy.tags %}<li>{{ term.title }}</li>{% endfor %}</ul>",
        encoding="utf-8",
    )
    (static / "data.json").write_text('{"a": 1}', encoding="utf-8")
    (templates / "default.jinja").write_text(
        "<html><title>{{ page.title }}</title>{{ partial('missing') }}{{ content }}</html>",
        encoding="utf-8",
    )
    (templates / "post.jinja").write_text(
        "<article>{{ content }}</article>", encoding="utf-8"
    )
    return tmp_path


def make_pipeline(root: Path) -> RenderPipeline:
    return RenderPipeline(TemplateEngine(TemplateLoader(root / "templates")))


def context_for(root: Path, query: str, path: Path):
    index = build_index(root / "static")
    return ContextBuilder().build("GET", query, path, {"port": 3000}, index)


def test_markdown_expands_body_before_conversion(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "hello.md"
    context = context_for(root, "/hello", path)
    html = make_pipeline(root).render(context, path)
    assert html == "<html><title>Hello</title><h1>Hi hello</h1>\n</html>"
    assert context.page == {"title": "Hello", "tags": "intro, demo"}
    assert context.content == "<h1>Hi hello</h1>\n"


def test_named_template(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "post.md"
    html = make_pipeline(root).render(context_for(root, "/post", path), path)
    assert html == "<article><p>Some <em>text</em>.</p>\n</article>"


def test_missing_template_falls_back_to_content(tmp_path):
    root = create_project(tmp_path)
    (root / "templates" / "post.jinja").unlink()
    path = root / "static" / "post.md"
    html = make_pipeline(root).render(context_for(root, "/post", path), path)
    assert html == "<p>Some <em>text</em>.</p>\n"


def test_children_page_lists_references(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "tags" / "children.md"
    context = context_for(root, "/tags/demo", path)
    html = make_pipeline(root).render(context, path)
    assert [p.link for p in context.references["pages"]] == ["/hello", "/post"]
    assert '<a href="/hello">Hello</a>' in html
    assert '<a href="/post">Post</a>' in html


def test_template_file_is_expanded(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "list.jinja"
    html = make_pipeline(root).render(context_for(root, "/list.jinja", path), path)
    assert html == "<ul><li>intro</li><li>demo</li></ul>"


def test_other_files_are_raw_bytes(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "data.json"
    body = make_pipeline(root).render(context_for(root, "/data.json", path), path)
    assert body == b'{"a": 1}'


def test_missing_file_raises_render_error(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "gone.md"
    with pytest.raises(RenderError) as excinfo:
        make_pipeline(root).render(context_for(root, "/gone", path), path)
    assert excinfo.value.source_path == path
    assert isinstance(excinfo.value.original_error, OSError)


def test_template_syntax_error_raises_render_error(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "bad.jinja"
    path.write_text("{% for x in %}", encoding="utf-8")
    with pytest.raises(RenderError) as excinfo:
        make_pipeline(root).render(context_for(root, "/bad.jinja", path), path)
    assert "syntax error" in excinfo.value.message


def test_metadata_only_markdown_renders_empty_body(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "meta.md"
    path.write_text("---\ntitle: Meta\n", encoding="utf-8")
    html = make_pipeline(root).render(context_for(root, "/meta", path), path)
    assert html == "<html><title>Meta</title></html>"


def test_custom_markdown_converter(tmp_path):
    root = create_project(tmp_path)
    path = root / "static" / "post.md"
    pipeline = RenderPipeline(
        TemplateEngine(TemplateLoader(root / "templates")),
        markdown=lambda text: f"<pre>{text.strip()}</pre>",
    )
    html = pipeline.render(context_for(root, "/post", path), path)
    assert html == "<article><pre>Some *text*.</pre></article>"


def test_markdown_renderer_highlights_known_languages():
    html = MarkdownRenderer().render("```python\nprint('x')\n```\n")
    assert 'class="highlight"' in html
    plain = html_from_markdown("```nosuchlang\na < b\n```\n")
    assert plain == '<pre><code class="language-nosuchlang">a &lt; b\n</code></pre>\n'


def test_markdown_renderer_keeps_raw_html():
    html = html_from_markdown('<div class="x">hi</div>\n')
    assert '<div class="x">hi</div>' in html
    assert "<p>" not in html
