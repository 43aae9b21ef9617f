"""Source and destination descriptors for content-tree nodes.

Key classes:
- Src: Where a node comes from (path without extension, extension, timestamps).
- Dest: Where a node goes (path, extension, content hash).
- StaticFile: A copy-only asset that never enters the data cascade.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Src:
    """Source location of a Page or Directory.

    Attributes:
        path: POSIX path rooted at ``/``, without extension. Empty for pages
            created dynamically (no backing file).
        ext: File extension including the dot, empty for directories.
        slug: Basename of ``path``.
        last_modified: Modification time of the backing file.
        created: Creation time of the backing file.
        remote: Remote origin URL, when the file was fetched.
    """

    path: str = ""
    ext: str = ""
    slug: str = ""
    last_modified: datetime | None = None
    created: datetime | None = None
    remote: str | None = None

    def __post_init__(self) -> None:
        if not self.slug and self.path:
            self.slug = posixpath.basename(self.path)

    @property
    def is_virtual(self) -> bool:
        """Whether this Src has no backing file."""
        return not self.path


@dataclass
class Dest:
    """Computed destination of a node.

    Attributes:
        path: POSIX output path rooted at ``/``, without extension.
        ext: Output extension including the dot.
        hash: Content hash of the last written output, if any.
    """

    path: str = ""
    ext: str = ""
    hash: str | None = None


@dataclass(frozen=True)
class StaticFile:
    """Passthrough asset copied unchanged to the output.

    Attributes:
        src: Source path rooted at ``/`` (with extension).
        dest: Destination path rooted at ``/`` (with extension).
    """

    src: str
    dest: str = field(default="")

    def __post_init__(self) -> None:
        if not self.dest:
            object.__setattr__(self, "dest", self.src)

    @property
    def output_path(self) -> str:
        """Relative output path of the copied file."""
        return self.dest.lstrip("/")
