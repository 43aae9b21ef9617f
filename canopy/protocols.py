"""Protocol definitions for Canopy.

The content tree does not depend on how files are discovered, parsed,
rendered or written. These protocols describe the collaborators that
populate and consume it, so alternative implementations (or test doubles)
can be plugged into the TreeBuilder and SiteBuilder.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .descriptors import StaticFile
    from .page import Page
    from .walker import Entry


@runtime_checkable
class Walker(Protocol):
    """Discovers source entries under the site folder."""

    @abstractmethod
    def walk(self) -> Iterable[Entry]:
        """Yield entries, each directory before its contents.

        Returns:
            Iterable of Entry objects.
        """
        ...

    @abstractmethod
    def entry(self, path: Path) -> Entry | None:
        """Describe a single path (used by incremental updates).

        Args:
            path: Absolute filesystem path inside the site folder.

        Returns:
            Entry for the path, or None if it is missing or ignored.
        """
        ...


@runtime_checkable
class Loader(Protocol):
    """Supplies a node's own data from a source file."""

    @abstractmethod
    def load(self, path: Path) -> tuple[dict[str, Any], str]:
        """Load a page source.

        Args:
            path: Path to the source file.

        Returns:
            Tuple of (own data, body content).

        Raises:
            LoaderError: If the data is malformed.
        """
        ...

    @abstractmethod
    def load_data(self, path: Path) -> dict[str, Any]:
        """Load a directory data file (``_data.yml`` and friends).

        Raises:
            LoaderError: If the data is malformed.
        """
        ...


@runtime_checkable
class PageRenderer(Protocol):
    """Rewrites a page's content from its effective data and content."""

    @abstractmethod
    def can_render(self, page: Page) -> bool:
        """Check if this renderer handles the page."""
        ...

    @abstractmethod
    def render(self, page: Page, context: dict[str, Any]) -> None:
        """Render the page in place through ``page.content``.

        Args:
            page: Page to render.
            context: Extra template variables.
        """
        ...


@runtime_checkable
class Writer(Protocol):
    """Materializes the finished tree on disk."""

    @abstractmethod
    def write_pages(self, pages: Iterable[Page]) -> list[Page]:
        """Write pages whose content changed.

        Returns:
            The pages actually written.
        """
        ...

    @abstractmethod
    def copy_static_files(self, files: Iterable[StaticFile]) -> int:
        """Copy static files.

        Returns:
            Number of files copied.
        """
        ...
