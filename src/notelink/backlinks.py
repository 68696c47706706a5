"""Backlink search: find the notes whose content links to a given note."""

from __future__ import annotations

from collections.abc import Sequence

from .models import Backlink, Document, ElementNode, LinkNode, Match, Node, Path, TextNode
from .tree import node_string


def is_link_to(node: Node, note_id: str) -> bool:
    """True if node is a note link whose target is note_id."""
    return isinstance(node, LinkNode) and node.note_id == note_id


def find_backlinks(documents: Sequence[Document], note_id: str) -> list[Backlink]:
    """Search the documents for note links to note_id.

    Args:
        documents: The note collection, in the order results should follow.
        note_id: Id of the linked-to note.

    Returns:
        One Backlink per document with at least one match, in input order.
        Documents without matches are omitted.
    """
    result: list[Backlink] = []
    for document in documents:
        matches = find_matches(document.content, note_id)
        if matches:
            result.append(
                Backlink(id=document.id, title=document.title, matches=tuple(matches))
            )
    return result


def find_matches(content: Sequence[Node], note_id: str) -> list[Match]:
    """Return every match for note_id in content, depth-first, left to right."""
    result: list[Match] = []
    for index, node in enumerate(content):
        result.extend(_find_matches_in(node, note_id, (index,)))
    return result


def _find_matches_in(node: Node, note_id: str, path: Path) -> list[Match]:
    if isinstance(node, TextNode):
        return []

    result: list[Match] = []
    context: str | None = None
    for index, child in enumerate(node.children):
        if not isinstance(child, ElementNode):
            continue

        child_path = path + (index,)
        if is_link_to(child, note_id) and node_string(child):
            if context is None:
                context = node_string(node)
            result.append(Match(context=context, path=child_path))

        # Links may themselves hold elements; recurse into every element.
        result.extend(_find_matches_in(child, note_id, child_path))

    return result


class BacklinkIndex:
    """Memoized find_backlinks for one (documents, note_id) input at a time.

    get() recomputes only when the documents or the note id differ from the
    previous call, so callers can ask for backlinks on every change without
    rescanning an unchanged collection.
    """

    def __init__(self) -> None:
        self._documents: tuple[Document, ...] | None = None
        self._note_id: str | None = None
        self._backlinks: list[Backlink] = []

    def get(self, documents: Sequence[Document], note_id: str) -> list[Backlink]:
        snapshot = tuple(documents)
        if self._documents is None or note_id != self._note_id or snapshot != self._documents:
            self._backlinks = find_backlinks(snapshot, note_id)
            self._documents = snapshot
            self._note_id = note_id
        return list(self._backlinks)

    def invalidate(self) -> None:
        """Drop the cached result so the next get() rescans."""
        self._documents = None
        self._note_id = None
        self._backlinks = []
