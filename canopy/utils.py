"""Utility functions for Canopy.

This module contains small helpers shared by the content tree and the build
pipeline: filename date prefixes, POSIX path handling, hashing and output
directory housekeeping.

Key functions:
    extract_date_from_name: Parse a date token from a filename prefix.
    split_date_prefix: Split a basename into (date, remaining name).
    join_path: Join URL-style POSIX paths.
    is_internal_name: Check if a walker entry should be skipped.
    content_hash: Hash page content for change detection.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import hashlib
import posixpath
import shutil
from datetime import datetime
from pathlib import Path

DATE_SEPARATOR = "_"

# Accepted shapes of the date token, in order of precedence
_DATE_FORMATS = (
    "%Y-%m-%d-%H-%M-%S",
    "%Y-%m-%d-%H-%M",
    "%Y-%m-%d",
)


def extract_date_from_name(token: str) -> datetime | None:
    """Parse a date token such as ``2024-01-15`` or ``2024-01-15-10-30``.

    Args:
        token: Candidate date token (the part before the first ``_``).

    Returns:
        datetime object if the token is a valid date, None otherwise.

    Examples:
        >>> extract_date_from_name("2024-01-15")
        datetime(2024, 1, 15, 0, 0)

        >>> extract_date_from_name("hello")
        None
    """
    if not token or not token[0].isdigit():
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(token, fmt)
        except ValueError:
            continue
    return None


def split_date_prefix(name: str) -> tuple[datetime | None, str]:
    """Split a ``<date>_<rest>`` basename into its date and remaining name.

    Args:
        name: Basename, with or without extension.

    Returns:
        Tuple of (date or None, name without the date prefix). The name is
        returned unchanged when no valid date prefix is present.

    Examples:
        >>> split_date_prefix("2024-01-15_hello-world")
        (datetime(2024, 1, 15, 0, 0), 'hello-world')

        >>> split_date_prefix("hello_world")
        (None, 'hello_world')
    """
    token, sep, rest = name.partition(DATE_SEPARATOR)
    if not sep or not rest:
        return None, name
    date = extract_date_from_name(token)
    if date is None:
        return None, name
    return date, rest


def join_path(*parts: str) -> str:
    """Join POSIX path segments, always returning a path rooted at ``/``.

    Args:
        *parts: Path segments.

    Returns:
        Normalized, rooted POSIX path.

    Examples:
        >>> join_path("/", "posts", "hello")
        '/posts/hello'
    """
    joined = posixpath.join("/", *[p for p in parts if p])
    normalized = posixpath.normpath(joined)
    # normpath keeps a leading "//" as-is
    return "/" + normalized.lstrip("/")


def is_internal_name(name: str) -> bool:
    """Check if a file or folder name is internal (hidden or ``_`` prefixed).

    Args:
        name: Basename to check.

    Returns:
        True if the name starts with ``.`` or ``_``.
    """
    return name.startswith((".", "_"))


def content_hash(content: str | bytes) -> str:
    """Return the SHA-1 hex digest of page content.

    Args:
        content: Text or bytes content. Text is encoded as UTF-8.

    Returns:
        Hex digest string.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha1(content).hexdigest()


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path), ignore_errors=True)
        if path.exists():
            # Fallback for stubborn directories
            for item in path.rglob("*"):
                if item.is_file():
                    item.unlink()
            for item in sorted(
                [p for p in path.rglob("*") if p.is_dir()], reverse=True
            ):
                item.rmdir()
            path.rmdir()
    path.mkdir(parents=True, exist_ok=True)
