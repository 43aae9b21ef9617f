"""Canopy static site generator.

Canopy turns a folder of content files into a built site. Sources become a
tree of Directories and Pages; each node's effective data cascades from its
ancestors (with ``mergedKeys`` declaring keys that combine instead of
override) before renderers and the writer consume it.

The main entry point is the CLI module, which provides commands for
building a site once or rebuilding it incrementally while watching.
"""

from .descriptors import Dest, Src, StaticFile
from .directory import Directory
from .page import Page

__all__ = ["Dest", "Directory", "Page", "Src", "StaticFile", "__version__"]
__version__ = "0.1.0"
