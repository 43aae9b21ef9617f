"""HTML utility functions for Canopy.

This module converts page content between its raw string form and a parsed
document (a BeautifulSoup tree).

Functions:
    is_html_ext: Check if a destination extension denotes an HTML document.
    string_to_document: Parse an HTML string or bytes into a document.
    document_to_string: Serialize a document back to an HTML string.
"""

from __future__ import annotations

from bs4 import BeautifulSoup

HTML_EXTENSIONS = (".html", ".htm")

Document = BeautifulSoup


def is_html_ext(ext: str) -> bool:
    """Check if an extension denotes an HTML document.

    Args:
        ext: Extension including the dot.

    Returns:
        True for ``.html`` and ``.htm`` (case-insensitive).
    """
    return ext.lower() in HTML_EXTENSIONS


def string_to_document(content: str | bytes) -> Document:
    """Parse HTML content into a document.

    Args:
        content: HTML source. Bytes are decoded as UTF-8.

    Returns:
        Parsed BeautifulSoup document.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return BeautifulSoup(content, "html.parser")


def document_to_string(document: Document) -> str:
    """Serialize a parsed document back to HTML.

    Args:
        document: BeautifulSoup document.

    Returns:
        HTML string.
    """
    return str(document)
