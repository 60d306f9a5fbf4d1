"""Cross-reference resolution between catalog documents.

Entry links name a ``targetId`` defined elsewhere, possibly in another
file of the same catalog set. :class:`CatalogIndex` maps raw ids to their
defining nodes; :func:`collect_weapon_links` walks a chassis entry and
returns every weapon it can reach.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..markup import Node, children_in, find_named, iter_nodes
from .classify import is_weapon_context, mount_type_for_context
from .models import MountType
from .profiles import constraints, rule_description
from .utils import format_rule

logger = logging.getLogger(__name__)

# Elements that define something a link can point at
DEFINITION_NODES = {
    "selectionEntry",
    "selectionEntryGroup",
    "rule",
    "profile",
    "categoryEntry",
}

CONTEXT_NODES = {"selectionEntry", "selectionEntryGroup"}


def build_id_index(document: Node) -> dict[str, Node]:
    """Raw id -> defining node for one document; first definition wins."""
    index: dict[str, Node] = {}
    for node in iter_nodes(document):
        if node.name not in DEFINITION_NODES:
            continue
        raw_id = node.attr("id")
        if raw_id and raw_id not in index:
            index[raw_id] = node
    return index


class CatalogIndex:
    """Id lookup across an ordered set of parsed documents.

    A lookup made on behalf of a document checks that document first,
    then the others in file order.
    """

    def __init__(self, documents: list[Node]):
        self.documents = list(documents)
        self._indexes = [build_id_index(doc) for doc in self.documents]

    def resolve(self, target_id: str, document: Optional[Node] = None) -> Optional[Node]:
        if not target_id:
            return None
        order = list(range(len(self.documents)))
        for i, doc in enumerate(self.documents):
            if doc is document:
                order.remove(i)
                order.insert(0, i)
                break
        for i in order:
            node = self._indexes[i].get(target_id)
            if node is not None:
                return node
        return None

    def for_document(self, document: Node) -> "DocumentView":
        return DocumentView(self, document)


@dataclass
class DocumentView:
    """A :class:`CatalogIndex` bound to the document being scanned."""
    index: CatalogIndex
    document: Node

    def resolve(self, target_id: str) -> Optional[Node]:
        return self.index.resolve(target_id, self.document)


@dataclass
class WeaponLink:
    """A link from a chassis to a weapon entry, with its inferred mount."""
    target: Node
    mount_type: MountType


def _has_profile(node: Node) -> bool:
    return bool(find_named(node, "profile"))


def _should_follow(target: Node) -> bool:
    """Groups, and profile-less entries that only hold further links."""
    if target.name == "selectionEntryGroup":
        return True
    if target.name != "selectionEntry" or _has_profile(target):
        return False
    return any(n.name == "entryLink" for n in iter_nodes(target))


def collect_weapon_links(entry: Node, view: DocumentView) -> list[WeaponLink]:
    """Every weapon entry reachable from ``entry`` through weapon-ish slots.

    Walks depth-first in document order carrying the names of enclosing
    groups/entries as context. Links into shared groups are followed; an
    id already on the current path is never re-entered. Dangling targets
    are skipped.
    """
    out: list[WeaponLink] = []
    path: set[str] = set()

    def walk(node: Node, context: list[str]) -> None:
        if node.name in CONTEXT_NODES and node is not entry:
            context = context + [node.attr("name")]
        if node.name == "entryLink":
            _visit_link(node, context)
        for child in node.children:
            walk(child, context)

    def _visit_link(link: Node, context: list[str]) -> None:
        target_id = link.attr("targetId")
        if not target_id or not is_weapon_context(context):
            return
        if target_id in path:
            logger.debug("Skipping cyclic link to %s", target_id)
            return
        target = view.resolve(target_id)
        if target is None:
            logger.debug("Dangling link to %s", target_id)
            return
        if _should_follow(target):
            path.add(target_id)
            for child in target.children:
                walk(child, context + [target.attr("name")])
            path.discard(target_id)
            return
        out.append(WeaponLink(target=target, mount_type=mount_type_for_context(context)))

    walk(entry, [entry.attr("name")])
    return out


def _side_groups(entry: Node, side: str) -> list[Node]:
    return [
        g for g in find_named(entry, "selectionEntryGroup")
        if side in g.attr("name").lower()
    ]


def default_weapon_link(entry: Node, side: str) -> Optional[Node]:
    """The entry link pre-selected in the chassis's ``side`` arm slot.

    A slot group whose name mentions ``side`` ("left"/"right") and holds
    exactly one direct entry link with a minimum of at least one, taken
    from the link's own constraint or else the group's.
    """
    for group in _side_groups(entry, side):
        links = children_in(group, "entryLinks", "entryLink")
        if len(links) != 1:
            continue
        link = links[0]
        low, _ = constraints(link)
        if low is None:
            low, _ = constraints(group)
        if low is not None and low >= 1:
            return link
    return None


def _linked_targets(node: Node, view: DocumentView, path: frozenset) -> list[Node]:
    found = []
    for child in node.children:
        if child.name != "entryLink":
            found.extend(_linked_targets(child, view, path))
            continue
        target_id = child.attr("targetId")
        if not target_id or target_id in path:
            continue
        target = view.resolve(target_id)
        if target is None:
            continue
        if _should_follow(target):
            found.extend(_linked_targets(target, view, path | {target_id}))
        else:
            found.append(target)
    return found


def default_weapon_target(link: Node, view: DocumentView) -> Optional[Node]:
    """The weapon entry a default slot link lands on.

    A link into a shared group (or a link-only entry) is descended the
    same way :func:`collect_weapon_links` follows it; the default exists
    only when exactly one weapon entry is reachable. Returns the link
    itself when its target is dangling.
    """
    target_id = link.attr("targetId")
    target = view.resolve(target_id)
    if target is None:
        return link
    if not _should_follow(target):
        return target
    weapons = []
    for node in _linked_targets(target, view, frozenset({target_id})):
        if not any(node is seen for seen in weapons):
            weapons.append(node)
    if len(weapons) != 1:
        logger.debug("Default slot %s reaches %d weapons", target_id, len(weapons))
        return None
    return weapons[0]


def linked_rule_lines(entry: Node, view: DocumentView) -> list[str]:
    """Rule text pulled in through ``<infoLink type="rule">`` references."""
    lines = []
    for link in find_named(entry, "infoLink"):
        if link.attr("type").lower() != "rule":
            continue
        target = view.resolve(link.attr("targetId"))
        if target is None or target.name != "rule":
            continue
        desc = rule_description(target)
        if desc:
            lines.append(format_rule(target.attr("name") or link.attr("name"), desc))
    return lines
