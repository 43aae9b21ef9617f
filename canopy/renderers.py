"""Content renderers for Canopy.

Renderers implement the PageRenderer protocol: they read a page's
effective data and content and write new content back through
``page.content``. Each renderer handles one kind of source.

Key classes:
- MarkdownRenderer: Renders Markdown pages to HTML.
- RendererRegistry: Picks the renderer for a page.
"""

from __future__ import annotations

import re
from typing import Any

import mistune

from .page import Page


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"<[^>]+>", "", slug)
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _AnchoredRenderer(mistune.HTMLRenderer):
    """Markdown renderer adding ``id`` attributes to headings.

    Attributes:
        headings: (id, text, level) tuples collected during rendering.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[tuple[str, str, int]] = []
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        self.headings.append((heading_id, text, level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'


class MarkdownRenderer:
    """Renders Markdown sources to HTML.

    Headings receive anchor ids; the collected headings are stored in
    ``page.plugin_data["toc"]`` for layouts that build a table of contents.
    """

    def can_render(self, page: Page) -> bool:
        """Check if the page comes from a ``.md`` source."""
        return page.src.ext.lower() == ".md"

    def render(self, page: Page, context: dict[str, Any]) -> None:
        """Convert the page's Markdown content to HTML in place.

        Args:
            page: Page to render.
            context: Unused; Markdown has no template variables.
        """
        source = page.content
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        renderer = _AnchoredRenderer()
        markdown = mistune.create_markdown(
            renderer=renderer, plugins=["strikethrough", "footnotes", "table", "url"]
        )
        page.content = markdown(source or "")
        page.plugin_data["toc"] = renderer.headings


class RendererRegistry:
    """Registry for content renderers.

    Renderers are consulted in registration order; the first one whose
    ``can_render`` matches wins.
    """

    def __init__(self):
        self._renderers: list = []
        self.register(MarkdownRenderer())

    def register(self, renderer) -> None:
        """Register a new renderer.

        Args:
            renderer: A PageRenderer implementation.
        """
        self._renderers.append(renderer)

    def get_renderer(self, page: Page):
        """Get the renderer for a page.

        Args:
            page: Page about to be rendered.

        Returns:
            The first renderer that can handle the page, or None.
        """
        for renderer in self._renderers:
            if renderer.can_render(page):
                return renderer
        return None
