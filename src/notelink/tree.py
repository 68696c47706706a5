"""Path utilities over note content trees.

Content is an ordered sequence of top-level nodes. A path is a tuple of
child indices: path[0] selects a top-level node, each following index
selects a child of the previous node.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from .models import ElementNode, Node, Path, TextNode


def node_string(node: Node) -> str:
    """Return the flattened text of a node (all descendant text, in order)."""
    if isinstance(node, TextNode):
        return node.text
    return "".join(node_string(child) for child in node.children)


def iter_nodes(content: Sequence[Node]) -> Iterator[tuple[Path, Node]]:
    """Yield (path, node) for every node in content, pre-order."""
    stack: list[tuple[Path, Node]] = [((i,), node) for i, node in enumerate(content)]
    stack.reverse()
    while stack:
        path, node = stack.pop()
        yield path, node
        if isinstance(node, ElementNode):
            children = [(path + (i,), child) for i, child in enumerate(node.children)]
            stack.extend(reversed(children))


def resolve_path(content: Sequence[Node], path: Path) -> Node | None:
    """Return the node at path, or None if the path does not resolve.

    An empty path, a negative or out-of-range index, or an index applied
    to a text node all count as failure.
    """
    if not path:
        return None

    siblings: Sequence[Node] = content
    node: Node | None = None
    for index in path:
        if index < 0 or index >= len(siblings):
            return None
        node = siblings[index]
        siblings = node.children if isinstance(node, ElementNode) else ()
    return node


def replace_at_path(content: Sequence[Node], path: Path, new_node: Node) -> tuple[Node, ...]:
    """Return new content with the node at path replaced by new_node.

    Only the ancestors on the path are rebuilt; every other subtree is
    shared with the input. The input is not modified.

    Raises:
        ValueError: If the path is empty or descends through a text node.
        IndexError: If an index is out of range.
    """
    if not path:
        raise ValueError("Cannot replace at an empty path")

    top = tuple(content)

    # Collect the ancestors along the path, top-down.
    ancestors: list[ElementNode] = []
    siblings: Sequence[Node] = top
    for index in path[:-1]:
        if not 0 <= index < len(siblings):
            raise IndexError(f"Path {list(path)} is out of range")
        parent = siblings[index]
        if not isinstance(parent, ElementNode):
            raise ValueError(f"Path {list(path)} descends through a text node")
        ancestors.append(parent)
        siblings = parent.children
    if not 0 <= path[-1] < len(siblings):
        raise IndexError(f"Path {list(path)} is out of range")

    # Rebuild bottom-up, splicing each new child into a copy of its parent.
    replacement: Node = new_node
    for parent, index in zip(reversed(ancestors), reversed(path[1:])):
        children = parent.children
        replacement = parent.model_copy(
            update={"children": children[:index] + (replacement,) + children[index + 1:]}
        )

    return top[: path[0]] + (replacement,) + top[path[0] + 1:]
