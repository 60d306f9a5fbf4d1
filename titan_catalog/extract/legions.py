"""Legion (Legio) extraction."""

from typing import Optional

from ..markup import Node, find_named
from .classify import LEGION_ENTRY_TYPES, has_acceptable_type, is_legion_category, is_legion_name
from .identifiers import LEGION_PREFIX, fallback_id
from .links import CatalogIndex
from .models import Allegiance, LegionTemplate
from .profiles import rule_lines
from .utils import sanitize_name, sort_by_name

# Publication id -> allegiance of the legions it lists
PUBLICATION_ALLEGIANCE = {
    "3401-191e-1333-8a1d": Allegiance.LOYALIST,
    "bf8b-27d7-039e-5df9": Allegiance.TRAITOR,
}


def allegiance_for_publication(publication_id: str) -> Allegiance:
    return PUBLICATION_ALLEGIANCE.get(publication_id.strip(), Allegiance.UNKNOWN)


def legion_category(entry: Node) -> tuple[Optional[str], Optional[str]]:
    """(category name, category target id) of the first legion category link."""
    for link in find_named(entry, "categoryLink"):
        name = link.attr("name")
        target_id = link.attr("targetId")
        if name and target_id and is_legion_category(name):
            return name, target_id
    return None, None


def legion_from_entry(entry: Node) -> Optional[LegionTemplate]:
    raw_name = entry.attr("name")
    if not raw_name:
        return None
    if not has_acceptable_type(entry, LEGION_ENTRY_TYPES):
        return None
    name = sanitize_name(raw_name)
    if not is_legion_name(name):
        return None
    category_key, category_id = legion_category(entry)
    return LegionTemplate(
        id=fallback_id(entry, LEGION_PREFIX),
        name=name,
        rules=tuple(rule_lines(entry)),
        category_key=category_key,
        category_id=category_id,
        allegiance=allegiance_for_publication(entry.attr("publicationId")),
    )


def scan_legions(index: CatalogIndex) -> list[LegionTemplate]:
    """Legions across all documents; the first entry per id wins."""
    found: dict[str, LegionTemplate] = {}
    for document in index.documents:
        for entry in find_named(document, "selectionEntry"):
            legion = legion_from_entry(entry)
            if legion is not None and legion.id not in found:
                found[legion.id] = legion
    return sort_by_name(found.values())
