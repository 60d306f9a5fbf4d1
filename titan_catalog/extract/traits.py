"""Princeps trait extraction.

Traits live under a single root group whose children are one group per
trait table ("Standard", "Corrupted Titan", "Legio ...").
"""

import re
from typing import Optional

from ..markup import Node, children_in, find_named
from .identifiers import TRAIT_PREFIX
from .legions import allegiance_for_publication
from .links import CatalogIndex
from .models import PrincepsTraitTemplate, TraitGroup
from .profiles import rule_lines
from .utils import sanitize_name, sort_by_name

TRAITS_ROOT_GROUP_ID = "aa6b-a665-b907-234e"
TRAITS_ROOT_NAME_TOKEN = "princeps trait"

# Exact group names; anything starting with "legio " is a legion table
TRAIT_GROUP_NAMES = {
    "Standard": TraitGroup.STANDARD,
    "Corrupted Titan": TraitGroup.CORRUPTED,
}

LEGION_CONDITION_SCOPE = "primary-category"
LEGION_CONDITION_TYPES = {"atleast", "equalto"}

_ORDER_PREFIX_RE = re.compile(r"^\d+\s+")


def find_traits_root(document: Node) -> Optional[Node]:
    groups = find_named(document, "selectionEntryGroup")
    for group in groups:
        if group.attr("id") == TRAITS_ROOT_GROUP_ID:
            return group
    for group in groups:
        if TRAITS_ROOT_NAME_TOKEN in group.attr("name").lower():
            return group
    return None


def trait_group_kind(name: str) -> TraitGroup:
    if name in TRAIT_GROUP_NAMES:
        return TRAIT_GROUP_NAMES[name]
    if name.lower().startswith("legio "):
        return TraitGroup.LEGIO
    return TraitGroup.UNKNOWN


def legion_category_id(group: Node) -> Optional[str]:
    """Category id from the first primary-category condition in ``group``."""
    for condition in find_named(group, "condition"):
        child_id = condition.attr("childId")
        if not child_id:
            continue
        if (
            condition.attr("scope").lower() == LEGION_CONDITION_SCOPE
            and condition.attr("type").lower() in LEGION_CONDITION_TYPES
        ):
            return child_id
    return None


def trait_name(raw_name: str) -> str:
    """Display name with the catalog's "01 " ordering prefix removed."""
    return _ORDER_PREFIX_RE.sub("", sanitize_name(raw_name)).strip()


def traits_in_group(group: Node) -> list[PrincepsTraitTemplate]:
    kind = trait_group_kind(group.attr("name"))
    category_id = legion_category_id(group) if kind == TraitGroup.LEGIO else None
    allegiance = allegiance_for_publication(group.attr("publicationId"))
    out = []
    for entry in children_in(group, "selectionEntries", "selectionEntry"):
        raw_name = entry.attr("name")
        raw_id = entry.attr("id")
        if not raw_name or not raw_id:
            continue
        name = trait_name(raw_name)
        out.append(PrincepsTraitTemplate(
            id=f"{TRAIT_PREFIX}:{raw_id}",
            name=name,
            rules=tuple(rule_lines(entry) or [name]),
            legio_category_id=category_id,
            allegiance=allegiance,
            trait_group=kind,
        ))
    return out


def scan_traits(index: CatalogIndex) -> list[PrincepsTraitTemplate]:
    """Traits across all documents; the first trait per id wins."""
    found: dict[str, PrincepsTraitTemplate] = {}
    for document in index.documents:
        root = find_traits_root(document)
        if root is None:
            continue
        for group in children_in(root, "selectionEntryGroups", "selectionEntryGroup"):
            for trait in traits_in_group(group):
                found.setdefault(trait.id, trait)
    return sort_by_name(found.values())
