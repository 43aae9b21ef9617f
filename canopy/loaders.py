"""Data loaders for Canopy.

This module reads the own data of pages (YAML front matter) and directories
(``_data.yml`` / ``_data.yaml`` / ``_data.json`` files), and validates the
reserved keys the cascade relies on before data enters the tree.

Key classes:
- FrontMatterLoader: Implementation of the Loader protocol for files on disk.
- LoaderError: Raised when a source carries malformed data.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .data import MERGE_STRATEGIES, MERGED_KEYS

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


class LoaderError(Exception):
    """Malformed data in a source file.

    Attributes:
        source_path: Path to the offending file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
        if not isinstance(data, dict):
            return {}, text
        return data, text[match.end() :]
    except yaml.YAMLError:
        return {}, text


def validate_data(data: Mapping[str, Any], source: Path) -> dict[str, Any]:
    """Validate reserved keys of a data bag.

    Args:
        data: Loaded data.
        source: File the data came from (for error messages).

    Returns:
        The data as a plain dict.

    Raises:
        LoaderError: If ``mergedKeys`` is not a mapping of known strategies.
    """
    declared = data.get(MERGED_KEYS)
    if declared is not None:
        if not isinstance(declared, Mapping):
            raise LoaderError(source, f"'{MERGED_KEYS}' must be a mapping")
        for key, strategy in declared.items():
            if not isinstance(strategy, str) or strategy not in MERGE_STRATEGIES:
                allowed = ", ".join(sorted(MERGE_STRATEGIES))
                raise LoaderError(
                    source,
                    f"Unknown merge strategy '{strategy}' for key '{key}' (expected one of {allowed})",
                )
    return dict(data)


def load_data_file(path: Path) -> dict[str, Any]:
    """Load a YAML or JSON data file.

    Args:
        path: Path to the data file.

    Returns:
        Loaded mapping (empty for an empty file).

    Raises:
        LoaderError: If the file cannot be parsed or is not a mapping.
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(text) if text.strip() else {}
        else:
            payload = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise LoaderError(path, f"Invalid data file: {exc}") from exc
    if not isinstance(payload, dict):
        raise LoaderError(path, "Data file must contain a mapping")
    return payload


class FrontMatterLoader:
    """Loads own data from front matter and data files."""

    def load(self, path: Path) -> tuple[dict[str, Any], str]:
        """Load a page source.

        Args:
            path: Path to the source file.

        Returns:
            Tuple of (validated front matter, body).
        """
        raw = path.read_text(encoding="utf-8")
        data, body = extract_frontmatter(raw)
        return validate_data(data, path), body

    def load_data(self, path: Path) -> dict[str, Any]:
        """Load and validate a directory data file."""
        return validate_data(load_data_file(path), path)
