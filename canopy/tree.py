"""Content-tree construction for Canopy.

The TreeBuilder turns walker entries into the Directory/Page tree: folders
become Directories, content files become Pages, directory data files become
directory own data, and everything else becomes a StaticFile.

``update()`` applies a set of changed paths to an existing tree, touching
only the affected nodes so unchanged subtrees keep their objects and their
cached effective data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from .components import COMPONENTS_DIR, Component
from .descriptors import Src, StaticFile
from .directory import Directory
from .loaders import FrontMatterLoader
from .page import Page, PrettyUrls
from .protocols import Loader, Walker
from .utils import is_internal_name, join_path
from .walker import DATA_FILES, Entry, FileWalker

logger = logging.getLogger(__name__)

# Longest suffix first so "x.html.jinja" is not taken for a ".jinja" page
PAGE_EXTENSIONS = (".html.jinja", ".jinja", ".md", ".html", ".htm")
PAGE_DEST_EXT = ".html"

ComponentLoader = Callable[[Path], dict[str, Component]]


def page_extension(name: str) -> str | None:
    """Return the page extension of a filename, or None for static files.

    Examples:
        >>> page_extension("about.html.jinja")
        '.html.jinja'

        >>> page_extension("logo.png")
        None
    """
    lowered = name.lower()
    for ext in PAGE_EXTENSIONS:
        if lowered.endswith(ext) and len(name) > len(ext):
            return name[-len(ext) :]
    return None


class TreeBuilder:
    """Builds and incrementally updates the content tree.

    Attributes:
        site_dir: Directory containing site content.
        walker: Source discovery implementation.
        loader: Own-data loader implementation.
        pretty_urls: URL mode passed to ``Page.update_dest``.
        root_data: Data assigned to the root directory before its own data files.
        component_loader: Callable loading a ``_components`` folder, if any.
    """

    def __init__(
        self,
        site_dir: Path,
        walker: Walker | None = None,
        loader: Loader | None = None,
        pretty_urls: PrettyUrls = "none",
        root_data: Mapping[str, Any] | None = None,
        component_loader: ComponentLoader | None = None,
    ):
        self.site_dir = site_dir
        self.walker = walker or FileWalker(site_dir)
        self.loader = loader or FrontMatterLoader()
        self.pretty_urls = pretty_urls
        self.root_data = dict(root_data or {})
        self.component_loader = component_loader

    def build(self) -> Directory:
        """Build a fresh tree from a full walk.

        Returns:
            The root Directory.

        Raises:
            LoaderError: If a source carries malformed data.
        """
        root = Directory(Src(path="/"))
        self._prepare_directory(root)
        for entry in self.walker.walk():
            parent = self._directory_for(root, entry.rel.strip("/").split("/")[:-1], create=True)
            if parent is not None:
                self._apply(parent, entry)
        logger.debug("Built content tree from %s", self.site_dir)
        return root

    def update(self, root: Directory, paths: Iterable[Path]) -> None:
        """Apply changed or deleted paths to an existing tree.

        Args:
            root: Tree returned by ``build()``.
            paths: Absolute paths reported as created, modified or deleted.

        Raises:
            LoaderError: If a changed source carries malformed data.
        """
        for path in sorted(set(paths)):
            self._update_path(root, path)

    def folder_of(self, directory: Directory) -> Path:
        return self.site_dir / directory.src.path.lstrip("/")

    def _update_path(self, root: Directory, path: Path) -> None:
        try:
            parts = path.relative_to(self.site_dir).parts
        except ValueError:
            return
        if not parts:
            return
        if COMPONENTS_DIR in parts:
            owner = self._directory_for(root, parts[: parts.index(COMPONENTS_DIR)], create=False)
            if owner is not None:
                self._load_components(owner)
            return
        if any(is_internal_name(part) for part in parts[:-1]):
            return

        entry = self.walker.entry(path)
        parent = self._directory_for(root, parts[:-1], create=entry is not None)
        if parent is None:
            return
        name = parts[-1]
        if name in DATA_FILES:
            self._load_directory_data(parent)
            return
        if entry is None:
            logger.debug("Removing %s", path)
            parent.unset_page(name)
            parent.unset_directory(name)
            parent.unset_static_file(join_path(parent.src.path, name))
            return
        if entry.kind == "directory":
            # Existing folders only report metadata changes; their files arrive as own events
            if parent.get_directory(name) is None:
                self._apply(parent, entry)
                for child in sorted(path.iterdir()):
                    self._update_path(root, child)
            return
        self._apply(parent, entry)

    def _directory_for(
        self, root: Directory, names: Iterable[str], create: bool
    ) -> Directory | None:
        directory = root
        for name in names:
            child = directory.get_directory(name)
            if child is None:
                if not create:
                    return None
                child = directory.create_directory(name)
                self._prepare_directory(child)
            directory = child
        return directory

    def _apply(self, parent: Directory, entry: Entry) -> None:
        if entry.kind == "directory":
            if parent.get_directory(entry.name) is None:
                child = parent.create_directory(entry.name)
                self._prepare_directory(child)
        elif entry.kind == "data":
            self._load_directory_data(parent)
        else:
            ext = page_extension(entry.name)
            if ext:
                self._load_page(parent, entry, ext)
            else:
                parent.set_static_file(
                    StaticFile(src=entry.rel, dest=join_path(parent.dest.path, entry.name))
                )

    def _prepare_directory(self, directory: Directory) -> None:
        self._load_directory_data(directory)
        self._load_components(directory)

    def _load_directory_data(self, directory: Directory) -> None:
        folder = self.folder_of(directory)
        data: dict[str, Any] = dict(self.root_data) if directory.parent is None else {}
        for name in DATA_FILES:
            path = folder / name
            if path.is_file():
                data.update(self.loader.load_data(path))
        directory.own_data = data

    def _load_components(self, directory: Directory) -> None:
        if self.component_loader is None:
            return
        components = self.component_loader(self.folder_of(directory) / COMPONENTS_DIR)
        directory.components = components or None

    def _load_page(self, parent: Directory, entry: Entry, ext: str) -> Page:
        stem = entry.name[: -len(ext)]
        page = Page(
            Src(
                path=join_path(parent.src.path, stem),
                ext=ext,
                last_modified=entry.last_modified,
                created=entry.created,
            )
        )
        data, body = self.loader.load(entry.path)
        data.setdefault("date", page.filename_date or entry.last_modified)
        page.own_data = data
        page.content = body
        page.plugin_data["source"] = body
        parent.set_page(entry.name, page)
        page.update_dest({"ext": PAGE_DEST_EXT}, self.pretty_urls)
        logger.debug("Loaded page %s -> %s", entry.rel, page.own_data.get("url"))
        return page
