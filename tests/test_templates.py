import logging

from canopy.components import Component
from canopy.descriptors import Src
from canopy.directory import Directory
from canopy.loaders import FrontMatterLoader
from canopy.page import Page
from canopy.protocols import Loader, PageRenderer, Walker, Writer
from canopy.renderers import MarkdownRenderer, RendererRegistry
from canopy.templates import JinjaPageRenderer, TemplateEngine
from canopy.walker import FileWalker
from canopy.writer import SiteWriter


def make_page(path, ext, source):
    page = Page(Src(path=path, ext=ext))
    page.plugin_data["source"] = source
    page.content = source
    page.update_dest({"ext": ".html"})
    return page


def test_markdown_renderer_collects_headings():
    page = make_page("/notes", ".md", "# Intro\n\n## Intro\n\nText ~~old~~\n")
    MarkdownRenderer().render(page, {})
    assert '<h1 id="intro">Intro</h1>' in page.content
    assert '<h2 id="intro-1">Intro</h2>' in page.content
    assert "<del>old</del>" in page.content
    assert page.plugin_data["toc"] == [("intro", "Intro", 1), ("intro-1", "Intro", 2)]


def test_registry_picks_first_matching_renderer(tmp_path):
    registry = RendererRegistry()
    assert isinstance(registry.get_renderer(make_page("/a", ".md", "")), MarkdownRenderer)
    assert registry.get_renderer(make_page("/a", ".html", "")) is None

    engine = TemplateEngine(tmp_path, registry=registry)
    assert isinstance(engine.registry.get_renderer(make_page("/a", ".jinja", "")), JinjaPageRenderer)


def test_render_page_applies_layout(tmp_path):
    (tmp_path / "_layouts").mkdir()
    (tmp_path / "_layouts" / "base.html.jinja").write_text(
        "<main>{{ site.name }}|{{ title }}|{{ content }}</main>", encoding="utf-8"
    )
    engine = TemplateEngine(tmp_path, {"name": "Demo"})
    page = make_page("/hello", ".md", "Hi *there*")
    page.own_data = {"layout": "base", "title": "T"}

    engine.render_page(page)
    assert page.content == "<main>Demo|T|<p>Hi <em>there</em></p>\n</main>"

    # Rendering again starts over from the stored source
    engine.render_page(page)
    assert page.content == "<main>Demo|T|<p>Hi <em>there</em></p>\n</main>"


def test_layout_skipped_for_non_html_output(tmp_path):
    (tmp_path / "_layouts").mkdir()
    (tmp_path / "_layouts" / "base.html").write_text("<main>{{ content }}</main>", encoding="utf-8")
    engine = TemplateEngine(tmp_path)
    feed = Page.create("/feed.xml", "<rss/>")
    feed.set_own_value("layout", "base")
    engine.render_page(feed)
    assert feed.content == "<rss/>"


def test_missing_layout_logs_warning(tmp_path, caplog):
    engine = TemplateEngine(tmp_path)
    page = make_page("/plain", ".html", "<p>Plain</p>")
    page.own_data = {"layout": "nowhere"}
    with caplog.at_level(logging.WARNING, logger="canopy.templates"):
        engine.render_page(page)
    assert page.content == "<p>Plain</p>"
    assert "Layout 'nowhere' not found" in caplog.text


def test_jinja_page_sees_components_and_page(tmp_path):
    root = Directory()
    root.register_component(Component("hi", lambda: "<b>hi</b>"))
    docs = root.create_directory("docs")
    page = make_page("/docs/x", ".jinja", "{{ comp.hi() }} {{ page.src.slug }} {{ '<i>' }}")
    docs.set_page("x.jinja", page)

    TemplateEngine(tmp_path).render_page(page)
    assert page.content == "<b>hi</b> x &lt;i&gt;"


def test_collaborators_satisfy_protocols(tmp_path):
    engine = TemplateEngine(tmp_path)
    assert isinstance(FileWalker(tmp_path), Walker)
    assert isinstance(FrontMatterLoader(), Loader)
    assert isinstance(MarkdownRenderer(), PageRenderer)
    assert isinstance(JinjaPageRenderer(engine), PageRenderer)
    assert isinstance(SiteWriter(tmp_path, tmp_path / "out"), Writer)
