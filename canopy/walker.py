"""Source discovery for Canopy.

Key classes:
- Entry: A file or folder found under the site folder.
- FileWalker: Walks the site folder on disk.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from .utils import is_internal_name

DATA_FILES = ("_data.yml", "_data.yaml", "_data.json")

EntryKind = Literal["file", "directory", "data"]


@dataclass(frozen=True)
class Entry:
    """A source entry.

    Attributes:
        path: Absolute filesystem path.
        rel: POSIX path relative to the site folder, rooted at ``/``.
        kind: ``"file"``, ``"directory"`` or ``"data"`` (a directory data file).
        last_modified: Modification time.
        created: Creation time (inode change time where birth time is unknown).
    """

    path: Path
    rel: str
    kind: EntryKind
    last_modified: datetime | None = None
    created: datetime | None = None

    @property
    def name(self) -> str:
        return self.path.name


class FileWalker:
    """Walks a site folder, skipping hidden and ``_``-prefixed entries.

    Directory data files (``_data.yml``, ``_data.yaml``, ``_data.json``) are
    the exception: they are reported with kind ``"data"``.

    Attributes:
        site_dir: Directory containing site content.
    """

    def __init__(self, site_dir: Path):
        self.site_dir = site_dir

    def walk(self) -> Iterator[Entry]:
        """Yield every entry below the site folder, sorted by name.

        Each directory is yielded before its contents.
        """
        yield from self._walk(self.site_dir)

    def _walk(self, folder: Path) -> Iterator[Entry]:
        for path in sorted(folder.iterdir(), key=lambda p: p.name):
            entry = self.entry(path)
            if entry is None:
                continue
            yield entry
            if entry.kind == "directory":
                yield from self._walk(path)

    def entry(self, path: Path) -> Entry | None:
        """Describe a single path.

        Args:
            path: Absolute path inside the site folder.

        Returns:
            Entry, or None if the path is missing, outside the site folder or ignored.
        """
        try:
            rel = path.relative_to(self.site_dir)
        except ValueError:
            return None
        if any(is_internal_name(part) for part in rel.parts[:-1]):
            return None
        if not path.exists():
            return None
        if path.name in DATA_FILES and path.is_file():
            kind: EntryKind = "data"
        elif is_internal_name(path.name):
            return None
        else:
            kind = "directory" if path.is_dir() else "file"
        stat = path.stat()
        return Entry(
            path=path,
            rel="/" + rel.as_posix(),
            kind=kind,
            last_modified=datetime.fromtimestamp(stat.st_mtime),
            created=datetime.fromtimestamp(stat.st_ctime),
        )
