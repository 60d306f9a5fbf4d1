"""Tree query helpers over parsed catalog nodes."""

from typing import Callable, Iterator, Optional

from .parser import Node


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield ``root`` and all descendants depth-first, in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_all(root: Node, predicate: Callable[[Node], bool]) -> list[Node]:
    """All nodes under (and including) ``root`` matching ``predicate``."""
    return [n for n in iter_nodes(root) if predicate(n)]


def find_named(root: Node, name: str) -> list[Node]:
    """Shorthand for ``find_all`` on tag name."""
    return find_all(root, lambda n: n.name == name)


def first_child(node: Node, name: str) -> Optional[Node]:
    for child in node.children:
        if child.name == name:
            return child
    return None


def child_text(node: Node, name: str) -> Optional[str]:
    """Stripped text of the first child called ``name``, or None if blank."""
    child = first_child(node, name)
    if child is None:
        return None
    text = child.text.strip()
    return text or None


def children_in(node: Node, container: str, name: str) -> list[Node]:
    """Children called ``name`` inside every direct ``container`` child.

    Catalog documents wrap repeated elements in a plural container, e.g.
    ``<entryLinks><entryLink/>...</entryLinks>``.
    """
    out = []
    for wrapper in node.children:
        if wrapper.name == container:
            out.extend(c for c in wrapper.children if c.name == name)
    return out
