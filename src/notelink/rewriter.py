"""Backlink rewriting: patch the link nodes that point at a renamed note.

The rewriter is pure. It returns PatchedDocument records and leaves
persisting them to the store.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .models import Backlink, Document, LinkNode, Match, Node, PatchedDocument, TextNode
from .tree import replace_at_path, resolve_path

log = logging.getLogger(__name__)


def patch_link_node(node: LinkNode, new_title: str) -> LinkNode:
    """Return a copy of node pointing at new_title.

    When the link mirrors its target's title, every text child gets the new
    title as its text. Other children are kept as they are.
    """
    update: dict[str, object] = {"note_title": new_title}
    if node.is_text_title:
        update["children"] = tuple(
            child.model_copy(update={"text": new_title}) if isinstance(child, TextNode) else child
            for child in node.children
        )
    return node.model_copy(update=update)


def apply_match(content: Sequence[Node], match: Match, new_title: str) -> tuple[Node, ...]:
    """Patch the link node at match.path, or return content unchanged.

    A path that is empty or does not lead to a link node is a no-op.
    """
    node = resolve_path(content, match.path)
    if not isinstance(node, LinkNode):
        log.debug("Skipping backlink path %s: no link node there", list(match.path))
        return tuple(content)
    return replace_at_path(content, match.path, patch_link_node(node, new_title))


def rewrite_backlinks(
    backlinks: Sequence[Backlink],
    documents: Sequence[Document],
    new_title: str,
    *,
    owner_id: str | None = None,
) -> list[PatchedDocument]:
    """Rewrite every matched link node to carry new_title.

    Args:
        backlinks: Result of find_backlinks for the renamed note.
        documents: Current note collection; content is looked up here by id.
        new_title: The renamed note's new title.
        owner_id: Owner stamped on the output records. Defaults to each
            document's stored owner.

    Returns:
        One PatchedDocument per backlink whose document was found, keeping
        that document's own title. Backlinks with no document are skipped.
    """
    by_id: dict[str, Document] = {}
    for document in documents:
        by_id.setdefault(document.id, document)

    result: list[PatchedDocument] = []
    for backlink in backlinks:
        document = by_id.get(backlink.id)
        if document is None:
            log.warning("No backlink content found for note %s", backlink.id)
            continue

        content: tuple[Node, ...] = tuple(document.content)
        for match in backlink.matches:
            content = apply_match(content, match, new_title)

        result.append(
            PatchedDocument(
                id=document.id,
                title=document.title,
                owner_id=owner_id if owner_id is not None else document.owner_id,
                content=content,
            )
        )

    return result
