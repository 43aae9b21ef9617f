"""Pages: the leaf nodes of the content tree.

A Page holds one data bag, one content value, a Src and a Dest. Its content
is kept either as raw text/bytes or as a parsed HTML document, never both;
whichever was set or read last is authoritative.

Key classes:
- Page: A single output page.
"""

from __future__ import annotations

import posixpath
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Literal, Union

from .descriptors import Dest, Src
from .html_utils import Document, document_to_string, is_html_ext, string_to_document
from .node import Node

if TYPE_CHECKING:
    from .directory import Directory

Content = Union[str, bytes]

PrettyUrls = Literal["none", "no-html-extension"]
PRETTY_URL_MODES = ("none", "no-html-extension")


class Page(Node):
    """A page of the site.

    Attributes:
        src: Source descriptor. Virtual (empty path) for pages created with
            ``Page.create``.
        dest: Destination descriptor.
        plugin_data: Internal bag for renderers and plugins. Never cascaded.
    """

    def __init__(self, src: Src | None = None):
        super().__init__(src)
        self.plugin_data: dict[str, Any] = {}
        self._content: Content | None = None
        self._document: Document | None = None
        self._pretty_urls: PrettyUrls = "none"

    @classmethod
    def create(
        cls, url: str, content: Content, pretty_urls: PrettyUrls = "none"
    ) -> Page:
        """Create a page with no backing source file.

        Args:
            url: Output URL, e.g. ``/feed.xml`` or ``/tags/python/``.
            content: Page content.
            pretty_urls: URL mode passed to ``update_dest``.

        Returns:
            New detached Page.
        """
        if url.endswith("/"):
            path, ext = posixpath.join(url, "index"), ".html"
        else:
            path, ext = posixpath.splitext(url)
        page = cls()
        page.own_data = {"url": url, "content": content}
        page.content = content
        page.update_dest({"path": path, "ext": ext}, pretty_urls)
        return page

    def duplicate(self, index: int | None = None, data: dict[str, Any] | None = None) -> Page:
        """Create a sibling page sharing this page's source identity.

        Args:
            index: Optional marker appended to ``src.path`` as ``[index]`` so
                incremental tracking keys stay distinct.
            data: Values overlaid on this page's effective data.

        Returns:
            New Page with the same parent, a copy of the Dest and own data
            equal to the overlaid effective data (without ``page``).
        """
        page = type(self)(replace(self.src))
        page.parent = self.parent
        page.dest = replace(self.dest)
        merged = {**self.data, **(data or {})}
        merged.pop("page", None)
        page.own_data = merged
        if index is not None:
            page.src.path = f"{page.src.path}[{index}]"
        return page

    def update_dest(
        self, dest: dict[str, Any] | None = None, pretty_urls: PrettyUrls = "none"
    ) -> str:
        """Merge partial Dest fields and derive the page ``url``.

        Args:
            dest: Any of ``path``, ``ext`` and ``hash``.
            pretty_urls: ``"no-html-extension"`` drops ``.html`` from URLs.

        Returns:
            The derived url, also stored in the page's own data.
        """
        if dest:
            self.dest = replace(self.dest, **dest)
        self._pretty_urls = pretty_urls
        path, ext = self.dest.path, self.dest.ext
        if ext == ".html" and posixpath.basename(path) == "index":
            url = posixpath.dirname(path).rstrip("/") + "/"
        elif pretty_urls == "no-html-extension" and ext == ".html":
            url = path
        else:
            url = path + ext
        if self._own_data.get("url") != url:
            self.set_own_value("url", url)
        return url

    @Node.parent.setter
    def parent(self, parent: Directory | None) -> None:
        """Reparent the page, re-deriving its url once one has been derived."""
        Node.parent.fset(self, parent)
        if parent is not None and "url" in self._own_data:
            self.update_dest(pretty_urls=self._pretty_urls)

    @property
    def output_path(self) -> str:
        """Relative, filesystem-safe output path (``dest.path + dest.ext``)."""
        return (self.dest.path + self.dest.ext).lstrip("/")

    @property
    def src_key(self) -> str:
        """Key identifying this page's source across incremental builds."""
        return self.src.path + self.src.ext

    @property
    def content(self) -> Content | None:
        """Raw content, serializing the parsed document if that is current."""
        if self._document is not None:
            serialized = document_to_string(self._document)
            self._content, self._document = serialized, None
        return self._content

    @content.setter
    def content(self, content: Content | None) -> None:
        if content is not None and not isinstance(content, bytes):
            content = str(content)
        self._content, self._document = content, None

    @property
    def document(self) -> Document | None:
        """Parsed HTML document, or None for non-HTML destinations."""
        if self._document is None and self._content is not None:
            if not is_html_ext(self.dest.ext):
                return None
            parsed = string_to_document(self._content)
            self._content, self._document = None, parsed
        return self._document

    @document.setter
    def document(self, document: Document | None) -> None:
        self._content, self._document = None, document
