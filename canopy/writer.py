"""Output writer for Canopy.

The SiteWriter materializes the finished tree. Each page's content hash is
compared with ``page.dest.hash`` (carried across rebuilds by
``Directory.set_page``) so unchanged pages are not rewritten.

Key classes:
- SiteWriter: Implementation of the Writer protocol for a local folder.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from .descriptors import StaticFile
from .page import Page
from .utils import content_hash

logger = logging.getLogger(__name__)


class SiteWriter:
    """Writes pages and copies static files into the output directory.

    Attributes:
        site_dir: Directory containing site content (static file sources).
        output_dir: Directory receiving the built site.
    """

    def __init__(self, site_dir: Path, output_dir: Path):
        self.site_dir = site_dir
        self.output_dir = output_dir

    def target(self, relative: str) -> Path:
        return self.output_dir / relative.lstrip("/")

    def write_pages(self, pages: Iterable[Page]) -> list[Page]:
        """Write every page whose content changed since the last write.

        Args:
            pages: Rendered pages.

        Returns:
            The pages actually written.
        """
        written: list[Page] = []
        for page in pages:
            content = page.content
            if content is None:
                continue
            digest = content_hash(content)
            target = self.target(page.output_path)
            if digest == page.dest.hash and target.exists():
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
            page.dest.hash = digest
            written.append(page)
        logger.debug("Wrote %d pages", len(written))
        return written

    def copy_static_files(self, files: Iterable[StaticFile]) -> int:
        """Copy static files whose source is newer than the output.

        Args:
            files: Static file descriptors.

        Returns:
            Number of files copied.
        """
        copied = 0
        for file in files:
            source = self.site_dir / file.src.lstrip("/")
            target = self.target(file.output_path)
            if target.exists() and target.stat().st_mtime >= source.stat().st_mtime:
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            copied += 1
        return copied

    def write_text_file(self, relative: str, text: str) -> Path:
        """Write a generated text file (e.g. the component CSS bundle)."""
        target = self.target(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return target

    def remove_outputs(self, relatives: Iterable[str]) -> int:
        """Delete outputs that no longer have a source.

        Args:
            relatives: Output paths relative to the output directory.

        Returns:
            Number of files removed.
        """
        removed = 0
        for relative in relatives:
            target = self.target(relative)
            if target.is_file():
                target.unlink()
                removed += 1
        return removed
