"""Template rendering engine for Canopy.

This module uses Jinja2 to render ``.jinja`` page bodies, to wrap HTML
pages in the layout named by their effective ``layout`` data, and to
compile ``_components`` templates.

Key classes:
- TemplateEngine: Renders pages through the renderer registry and layouts.
- JinjaPageRenderer: PageRenderer for ``.jinja`` sources.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup

from .components import Component, ComponentProxy, load_components
from .html_utils import is_html_ext
from .page import Page
from .renderers import RendererRegistry

logger = logging.getLogger(__name__)

LAYOUTS_DIR = "_layouts"

__all__ = ["JinjaPageRenderer", "TemplateEngine"]


class JinjaPageRenderer:
    """Renders ``.jinja`` page sources as Jinja templates."""

    def __init__(self, engine: TemplateEngine):
        self.engine = engine

    def can_render(self, page: Page) -> bool:
        return page.src.ext.lower().endswith(".jinja")

    def render(self, page: Page, context: dict[str, Any]) -> None:
        source = page.content
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        page.content = self.engine.render_string(source or "", context)


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        site_dir: Directory containing site content and ``_layouts``.
        site_data: Global values exposed to every template as ``site``.
        env: Jinja2 environment.
        registry: Renderers applied to page sources before layouts.
    """

    def __init__(
        self,
        site_dir: Path,
        site_data: dict[str, Any] | None = None,
        registry: RendererRegistry | None = None,
    ):
        """Initialize the template engine.

        Args:
            site_dir: Directory with content, layouts and components.
            site_data: Global values for templates.
            registry: Optional custom renderer registry.
        """
        self.site_dir = site_dir
        self.site_data = site_data or {}
        self.env = Environment(
            loader=FileSystemLoader([site_dir / LAYOUTS_DIR]),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self.env.globals["site"] = self.site_data
        self.registry = registry or RendererRegistry()
        self.registry.register(JinjaPageRenderer(self))

    def load_components(self, folder: Path) -> dict[str, Component]:
        """Compile the component templates of a ``_components`` folder."""
        return load_components(folder, self.env)

    def context_for(self, page: Page) -> dict[str, Any]:
        """Build the template context of a page.

        The page's effective data is exposed at the top level, together with
        ``page`` and ``comp`` (the components visible from its directory).
        """
        parent = page.parent
        components = parent.get_components() if parent is not None else {}
        return {
            **page.data,
            "page": page,
            "comp": ComponentProxy(components),
        }

    def render_page(self, page: Page) -> None:
        """Render a page in place: source renderer first, then its layout.

        Args:
            page: Page to render. Its content is reset from
                ``plugin_data["source"]`` when present, so re-rendering is safe.
        """
        if "source" in page.plugin_data:
            page.content = page.plugin_data["source"]
        context = self.context_for(page)
        renderer = self.registry.get_renderer(page)
        if renderer is not None:
            renderer.render(page, context)
        layout = context.get("layout")
        if layout and is_html_ext(page.dest.ext):
            self._apply_layout(page, str(layout), context)

    def _apply_layout(self, page: Page, layout: str, context: dict[str, Any]) -> None:
        template = self._resolve_layout_template(layout)
        if template is None:
            logger.warning("Layout %r not found for %s; rendering body only.", layout, page.src_key)
            return
        body = page.content
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        page.content = template.render(**{**context, "content": Markup(body or "")})

    def _resolve_layout_template(self, layout: str):
        """Resolve a layout name to a Jinja2 template.

        Args:
            layout: Layout name, with or without extension.

        Returns:
            Jinja2 Template object, or None if no candidate exists.
        """
        candidates = [
            f"{layout}.html.jinja",
            f"{layout}.jinja",
            f"{layout}.html",
            layout,
        ]
        for name in candidates:
            try:
                return self.env.get_template(name)
            except TemplateNotFound:
                continue
        return None

    def render_string(self, template: str, context: dict[str, Any]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        tmpl = self.env.from_string(template)
        return tmpl.render(**context)
