"""Directories: the composite nodes of the content tree.

A Directory owns its child pages and subdirectories through two ordered,
name-keyed mappings (separate namespaces), a set of static files and an
optional component registry. The root Directory is the whole site.

Traversal (``get_pages``, ``get_static_files``, ``get_directories``) is lazy
and depth-first: a directory's own entries come first, in insertion order,
followed by each child directory's entries. Every call returns a fresh
generator. Mutating the tree while a generator is running is not supported.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Iterator

from .components import Component
from .descriptors import Src, StaticFile
from .node import Node
from .page import Page
from .utils import join_path

logger = logging.getLogger(__name__)


class Directory(Node):
    """A folder of the site.

    Attributes:
        pages: Child pages keyed by name.
        dirs: Child directories keyed by name.
        static_files: Copy-only files keyed by source path.
        components: This directory's own component registry, if any.
        attached: Every live node whose parent is this directory, including
            pages duplicated from a child that are not stored in ``pages``.
    """

    def __init__(self, src: Src | None = None):
        self.attached: weakref.WeakSet[Node] = weakref.WeakSet()
        super().__init__(src or Src(path="/"))
        self.pages: dict[str, Page] = {}
        self.dirs: dict[str, Directory] = {}
        self.static_files: dict[str, StaticFile] = {}
        self.components: dict[str, Component] | None = None

    def create_directory(self, name: str) -> Directory:
        """Create a child directory and register it under ``name``.

        Args:
            name: Folder name.

        Returns:
            The new Directory.
        """
        child = Directory(Src(path=join_path(self.src.path, name), slug=name))
        child.parent = self
        self.dirs[name] = child
        return child

    def get_directory(self, name: str) -> Directory | None:
        return self.dirs.get(name)

    def unset_directory(self, name: str) -> None:
        """Remove a child directory and its whole subtree."""
        removed = self.dirs.pop(name, None)
        if removed is not None:
            removed.parent = None

    def set_page(self, name: str, page: Page) -> None:
        """Store a page under ``name``, reparenting it to this directory.

        When a page already stored under ``name`` has a Dest hash, it is
        carried onto the new page so change detection survives a rebuild that
        recreates Page objects.

        Args:
            name: Entry name (usually the source filename).
            page: Page to store.
        """
        previous = self.pages.get(name)
        page.parent = self
        self.pages[name] = page
        if previous is not None and previous is not page:
            if previous.dest.hash is not None:
                page.dest.hash = previous.dest.hash
            logger.debug("Replaced page %s in %s", name, self.src.path)

    def unset_page(self, name: str) -> Page | None:
        """Remove the page stored under ``name``.

        Returns:
            The removed page, or None if there was none.
        """
        return self.pages.pop(name, None)

    def set_static_file(self, file: StaticFile) -> None:
        self.static_files[file.src] = file

    def unset_static_file(self, src: str) -> StaticFile | None:
        return self.static_files.pop(src, None)

    def register_component(self, component: Component) -> None:
        """Add a component to this directory's registry."""
        if self.components is None:
            self.components = {}
        self.components[component.name] = component

    def get_components(self) -> dict[str, Component]:
        """Components visible from this directory.

        Ancestor registries are merged root-first, so a component registered
        closer to this directory wins on name collision. Not cached.
        """
        parent = self.parent
        resolved = parent.get_components() if parent is not None else {}
        if self.components:
            resolved.update(self.components)
        return resolved

    def get_pages(self) -> Iterator[Page]:
        """Yield every page in this subtree, depth first."""
        yield from self.pages.values()
        for child in self.dirs.values():
            yield from child.get_pages()

    def get_static_files(self) -> Iterator[StaticFile]:
        """Yield every static file in this subtree, depth first."""
        yield from self.static_files.values()
        for child in self.dirs.values():
            yield from child.get_static_files()

    def get_directories(self) -> Iterator[Directory]:
        """Yield this directory and every descendant directory, depth first."""
        yield self
        for child in self.dirs.values():
            yield from child.get_directories()

    def refresh_cache(self) -> bool:
        """Drop the memoised effective data of this subtree.

        Every attached node is visited (stored pages and directories as well
        as detached duplicates), but only when this directory's own cache
        was populated: a dirty directory never has clean descendants.

        Returns:
            True if this directory's cache was dropped.
        """
        changed = super().refresh_cache()
        if changed:
            for node in list(self.attached):
                node.refresh_cache()
        return changed
