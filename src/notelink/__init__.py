"""notelink: keep note-link titles in sync across a note collection."""

from .backlinks import BacklinkIndex, find_backlinks
from .models import (
    Backlink,
    Document,
    ElementNode,
    LinkNode,
    Match,
    PatchedDocument,
    TextNode,
)
from .rewriter import rewrite_backlinks

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Backlink",
    "BacklinkIndex",
    "Document",
    "ElementNode",
    "LinkNode",
    "Match",
    "PatchedDocument",
    "TextNode",
    "find_backlinks",
    "rewrite_backlinks",
]
