"""Base node shared by Page and Directory.

Every node in the content tree owns a Src, a Dest and its own (unmerged)
data. Its effective data is the cascade of the parent's effective data with
its own, computed lazily and memoised until the own data is replaced or
``refresh_cache()`` is called.

The parent link is a weak back-reference: a Directory owns its children
through its name-keyed mappings, never the other way round.
"""

from __future__ import annotations

import posixpath
import weakref
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .data import Data, merge_data
from .descriptors import Dest, Src
from .utils import join_path, split_date_prefix

if TYPE_CHECKING:
    from .directory import Directory


@dataclass
class _CacheSlot:
    """Memoised effective data plus its dirty flag."""

    value: Data | None = None
    dirty: bool = True

    def store(self, value: Data) -> Data:
        self.value = value
        self.dirty = False
        return value

    def clear(self) -> bool:
        if self.dirty:
            return False
        self.value = None
        self.dirty = True
        return True


class Node:
    """Behaviour common to every content-tree node.

    Attributes:
        src: Source descriptor.
        dest: Destination descriptor.
        filename_date: Date parsed from a ``<date>_name`` basename, if any.
    """

    def __init__(self, src: Src | None = None):
        self.src = src or Src()
        self.filename_date: datetime | None = None
        self.dest = Dest(path=self._initial_dest_path(), ext=self.src.ext)
        self._own_data: Data = {}
        self._cache = _CacheSlot()
        self._parent_ref: weakref.ReferenceType[Directory] | None = None

    def _initial_dest_path(self) -> str:
        if not self.src.path:
            return ""
        folder, name = posixpath.split(self.src.path)
        date, name = split_date_prefix(name)
        self.filename_date = date
        return join_path(folder, name)

    @property
    def own_data(self) -> Data:
        """The node's own data, before the cascade."""
        return self._own_data

    @own_data.setter
    def own_data(self, data: dict[str, Any]) -> None:
        data = dict(data)
        if self.filename_date is not None:
            data.setdefault("date", self.filename_date)
        self.refresh_cache()
        self._own_data = data

    @property
    def data(self) -> Data:
        """Effective data: the parent's effective data cascaded with own data."""
        if not self._cache.dirty:
            return self._cache.value  # type: ignore[return-value]
        parent = self.parent
        inherited = parent.data if parent is not None else {}
        return self._cache.store(merge_data(inherited, self._own_data))

    def set_own_value(self, key: str, value: Any) -> None:
        """Set a single key of the own data, invalidating the cache."""
        self.refresh_cache()
        self._own_data[key] = value

    @property
    def parent(self) -> Directory | None:
        """The parent Directory, or None for a root or detached node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, parent: Directory | None) -> None:
        self.refresh_cache()
        previous = self.parent
        if previous is not None:
            previous.attached.discard(self)
        if parent is None:
            self._parent_ref = None
            return
        self._parent_ref = weakref.ref(parent)
        parent.attached.add(self)
        self.dest.path = join_path(
            parent.dest.path, posixpath.basename(self.dest.path)
        )

    def refresh_cache(self) -> bool:
        """Drop the memoised effective data.

        Returns:
            True if a cached value was dropped, False if it was already dirty.
        """
        return self._cache.clear()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.src.path or self.dest.path!r})"
