"""Site building functionality for Canopy.

This module wires the collaborators around the content tree: it loads the
configuration, builds (or incrementally updates) the tree, renders every
page on a thread pool and writes the output.

Key classes and functions:
- SiteBuilder: Full builds and incremental rebuilds of one project.
- build_site: One-shot full build.
- load_config: Loads site configuration from canopy.yaml.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateSyntaxError

from .components import collect_component_assets
from .directory import Directory
from .loaders import LoaderError
from .page import PRETTY_URL_MODES, Page
from .templates import TemplateEngine
from .tree import TreeBuilder
from .utils import ensure_clean_dir
from .writer import SiteWriter

logger = logging.getLogger(__name__)

CONFIG_FILE = "canopy.yaml"


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


DEFAULT_CONFIG: dict[str, Any] = {
    "src": "site",
    "dest": "output",
    "pretty_urls": "none",
    "workers": 8,
    "components_css": "/components.css",
    "components_js": "/components.js",
    # Own data of the root directory, cascaded into every node
    "data": {"mergedKeys": {"tags": "stringArray"}},
    # Global template values, exposed as `site`
    "site": {},
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        root: Root directory of the content tree.
        pages: Pages rendered in this build (drafts excluded unless requested).
        written: Pages whose output actually changed on disk.
        output_dir: Directory where the site was built.
    """

    root: Directory
    pages: list[Page]
    written: list[Page]
    output_dir: Path
    static_files: int = 0
    removed: list[str] = field(default_factory=list)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from canopy.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        BuildError: If ``pretty_urls`` names an unknown mode.
    """
    config_path = project_root / CONFIG_FILE
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    if config["pretty_urls"] not in PRETTY_URL_MODES:
        raise BuildError(
            config_path,
            f"Invalid pretty_urls mode {config['pretty_urls']!r} "
            f"(expected one of {', '.join(PRETTY_URL_MODES)})",
        )
    return config


class SiteBuilder:
    """Builds one project, keeping the content tree between builds.

    ``build()`` and ``rebuild()`` hold an internal lock, so a rebuild never
    mutates the tree while a previous render phase is still reading it.

    Attributes:
        project_root: Root directory of the project.
        config: Effective configuration.
        include_drafts: Whether pages with ``draft: true`` are built.
        site_dir: Directory containing site content.
        output_dir: Directory receiving the built site.
        root: Content tree of the last build, or None before the first one.
    """

    def __init__(
        self,
        project_root: Path,
        config: dict[str, Any] | None = None,
        include_drafts: bool = False,
    ):
        self.project_root = project_root
        self.config = config or load_config(project_root)
        self.include_drafts = include_drafts
        self.site_dir = project_root / self.config["src"]
        self.output_dir = project_root / self.config["dest"]
        self.engine = TemplateEngine(self.site_dir, self.config.get("site") or {})
        self.tree = TreeBuilder(
            self.site_dir,
            pretty_urls=self.config["pretty_urls"],
            root_data=self.config.get("data") or {},
            component_loader=self.engine.load_components,
        )
        self.writer = SiteWriter(self.site_dir, self.output_dir)
        self.root: Directory | None = None
        self._outputs: set[str] = set()
        self._lock = threading.Lock()

    def build(self) -> BuildResult:
        """Build the whole site from scratch into a clean output directory.

        Raises:
            FileNotFoundError: If the site directory is missing.
            BuildError: If a source cannot be loaded or rendered.
        """
        if not self.site_dir.exists():
            raise FileNotFoundError(f"Expected site directory at {self.site_dir}")
        with self._lock:
            ensure_clean_dir(self.output_dir)
            self._outputs = set()
            try:
                self.root = self.tree.build()
            except LoaderError as exc:
                raise BuildError(exc.source_path, exc.message, exc) from exc
            return self._render_and_write(self.root)

    def rebuild(self, paths: Iterable[Path]) -> BuildResult:
        """Apply changed paths to the existing tree and rebuild.

        Unchanged pages keep their Dest hash and are not rewritten.

        Args:
            paths: Absolute paths reported as created, modified or deleted.
        """
        if self.root is None:
            return self.build()
        with self._lock:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            try:
                self.tree.update(self.root, paths)
            except LoaderError as exc:
                raise BuildError(exc.source_path, exc.message, exc) from exc
            return self._render_and_write(self.root)

    def _render_and_write(self, root: Directory) -> BuildResult:
        pages = [
            page
            for page in root.get_pages()
            if self.include_drafts or not page.data.get("draft")
        ]
        self._render(pages)
        written = self.writer.write_pages(pages)
        static_files = list(root.get_static_files())
        copied = self.writer.copy_static_files(static_files)

        outputs = {page.output_path for page in pages}
        outputs.update(file.output_path for file in static_files)
        outputs.update(self._write_component_assets(root))
        removed = sorted(self._outputs - outputs)
        self.writer.remove_outputs(removed)
        self._outputs = outputs

        logger.info(
            "Built %d pages (%d written, %d static files copied) into %s",
            len(pages),
            len(written),
            copied,
            self.output_dir,
        )
        return BuildResult(
            root=root,
            pages=pages,
            written=written,
            output_dir=self.output_dir,
            static_files=copied,
            removed=removed,
        )

    def _render(self, pages: list[Page]) -> None:
        failures: list[tuple[Page, Exception]] = []
        workers = max(1, int(self.config.get("workers") or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.engine.render_page, page): page for page in pages}
            for future in as_completed(futures):
                exc = future.exception()
                if exc is not None:
                    failures.append((futures[future], exc))
        if failures:
            page, exc = failures[0]
            if isinstance(exc, TemplateSyntaxError):
                message = f"Template syntax error on line {exc.lineno}: {exc.message}"
            else:
                message = _format_error_message(exc)
            raise BuildError(self._source_path(page), message, exc) from exc

    def _write_component_assets(self, root: Directory) -> list[str]:
        css, js = collect_component_assets(root.get_directories())
        outputs: list[str] = []
        for bundle, key in ((css, "components_css"), (js, "components_js")):
            target = self.config.get(key)
            if bundle and target:
                self.writer.write_text_file(target, bundle + "\n")
                outputs.append(target.lstrip("/"))
        return outputs

    def _source_path(self, page: Page) -> Path:
        if page.src.is_virtual:
            return Path(page.output_path)
        return self.site_dir / page.src_key.lstrip("/")


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"


def build_site(project_root: Path, include_drafts: bool = False) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include pages marked ``draft: true``.

    Returns:
        BuildResult containing the tree, rendered pages and output directory.
    """
    return SiteBuilder(project_root, include_drafts=include_drafts).build()
