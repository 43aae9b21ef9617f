"""Data bags and the cascade merge engine.

A node's effective data is computed by merging its parent's effective data
with the node's own data. Scalar keys override. Keys declared in
``mergedKeys`` combine across levels instead, using one of the strategies
listed in ``MERGE_STRATEGIES``:

- ``array``: concatenate parent-then-own values and drop duplicates.
- ``stringArray``: same as ``array`` with every item coerced to ``str``.
- ``object``: shallow merge, the node's own keys win.

Strategy names are validated where data enters the tree (see
``canopy.loaders.validate_data``); ``merge_data`` ignores names it does not
know and falls back to plain override for those keys.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, Union

MERGED_KEYS = "mergedKeys"

ARRAY = "array"
STRING_ARRAY = "stringArray"
OBJECT = "object"

MERGE_STRATEGIES = frozenset({ARRAY, STRING_ARRAY, OBJECT})

RESERVED_KEYS = frozenset(
    {"url", "tags", "date", "draft", "layout", "content", "page", MERGED_KEYS}
)

# Values loaders produce; plugins may also store opaque objects (hence Any in Data)
DataValue = Union[str, int, float, bool, date, datetime, Sequence[Any], Mapping[str, Any], None]
Data = dict[str, Any]


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _unique(items: list[Any]) -> list[Any]:
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def merge_arrays(parent: Any, own: Any, as_strings: bool = False) -> list[Any]:
    """Concatenate two array-ish values and deduplicate, preserving order.

    Args:
        parent: Parent value (list, scalar or None).
        own: Own value (list, scalar or None).
        as_strings: Coerce every item to ``str`` before deduplicating.

    Returns:
        New list with parent items first.

    Examples:
        >>> merge_arrays(["a"], ["a", "b"], as_strings=True)
        ['a', 'b']
    """
    merged = _as_list(parent) + _as_list(own)
    if as_strings:
        merged = [str(item) for item in merged]
    return _unique(merged)


def merge_objects(parent: Any, own: Any) -> dict[str, Any]:
    """Shallow-merge two mappings; keys from ``own`` win.

    Non-mapping values are treated as empty.
    """
    result: dict[str, Any] = {}
    if isinstance(parent, Mapping):
        result.update(parent)
    if isinstance(own, Mapping):
        result.update(own)
    return result


def merged_keys_of(data: Mapping[str, Any]) -> dict[str, str]:
    """Return the ``mergedKeys`` declarations of a data bag (empty if none)."""
    declared = data.get(MERGED_KEYS)
    if isinstance(declared, Mapping):
        return dict(declared)
    return {}


def merge_data(parent: Mapping[str, Any], own: Mapping[str, Any]) -> Data:
    """Compute effective data from a parent's effective data and own data.

    Args:
        parent: Effective data of the parent node (empty for a root).
        own: The node's own, unmerged data.

    Returns:
        A new dictionary. Neither input is modified.
    """
    data: Data = {**parent, **own}
    merged_keys = {**merged_keys_of(parent), **merged_keys_of(own)}
    if not merged_keys:
        return data

    data[MERGED_KEYS] = merged_keys
    for key, strategy in merged_keys.items():
        if key not in parent and key not in own:
            continue
        if strategy in (ARRAY, STRING_ARRAY):
            data[key] = merge_arrays(
                parent.get(key), own.get(key), as_strings=strategy == STRING_ARRAY
            )
        elif strategy == OBJECT:
            data[key] = merge_objects(parent.get(key), own.get(key))
    return data
