"""Titan wargear (upgrade) extraction.

Upgrades are read from the curated wargear groups of the game system
file. Groups are located by their known id, or by name when a catalog
revision has re-issued the id.
"""

import logging
from typing import Optional

from ..markup import Node, find_all, find_named
from .classify import is_legion_category, is_likely_chassis, is_upgrade_name
from .identifiers import UPGRADE_PREFIX, chassis_id, fallback_id
from .links import CatalogIndex, DocumentView
from .models import UpgradeGroup, UpgradeTemplate
from .profiles import characteristic_map, points_cost, rule_lines
from .utils import dedupe, sanitize_name, sort_by_name

logger = logging.getLogger(__name__)

# (group id, group name, source group) in listing order
UPGRADE_GROUPS: list[tuple[str, str, UpgradeGroup]] = [
    ("f360-b4bd-e6cd-d077", "universal wargear", UpgradeGroup.UNIVERSAL),
    ("c354-c2bb-8d84-0770", "loyalist wargear", UpgradeGroup.LOYALIST),
    ("3bce-46aa-99ca-8f60", "traitor wargear", UpgradeGroup.TRAITOR),
]

# Entries listed as universal upgrades even though they sit outside the groups
ALWAYS_INCLUDED_UPGRADES = {
    "2dc5-e9bf-6f6e-39a5": UpgradeGroup.UNIVERSAL,  # Princeps Seniores
}


def find_upgrade_group(document: Node, group_id: str, group_name: str) -> Optional[Node]:
    groups = find_named(document, "selectionEntryGroup")
    for group in groups:
        if group.attr("id") == group_id:
            return group
    for group in groups:
        if group.attr("name").lower() == group_name:
            return group
    return None


def excluded_chassis(entry: Node, view: DocumentView) -> list[str]:
    """Chassis for which the entry is hidden.

    Read from ``instanceOf`` conditions on ancestor selections whose
    child id points at a chassis entry.
    """
    out = []
    for condition in find_named(entry, "condition"):
        child_id = condition.attr("childId")
        if not child_id:
            continue
        if condition.attr("type").lower() != "instanceof":
            continue
        if condition.attr("scope").lower() != "ancestor":
            continue
        if condition.attr("field").lower() != "selections":
            continue
        target = view.resolve(child_id)
        if target is None or target.name != "selectionEntry":
            continue
        if is_likely_chassis(target, characteristic_map(target)):
            out.append(chassis_id(target))
    return dedupe(out)


def legion_keys(entry: Node) -> list[str]:
    return dedupe(
        link.attr("name")
        for link in find_named(entry, "categoryLink")
        if is_legion_category(link.attr("name"))
    )


def upgrade_from_entry(
    entry: Node, source_group: UpgradeGroup, view: DocumentView
) -> Optional[UpgradeTemplate]:
    raw_name = entry.attr("name")
    if not raw_name:
        return None
    name = sanitize_name(raw_name)
    if not is_upgrade_name(name):
        return None
    return UpgradeTemplate(
        id=fallback_id(entry, UPGRADE_PREFIX),
        name=name,
        points=points_cost(entry) or 0,
        rules=tuple(rule_lines(entry) or [name]),
        source_group=source_group,
        legio_keys=tuple(legion_keys(entry)),
        excluded_titan_template_ids=tuple(excluded_chassis(entry, view)),
    )


def _candidates(document: Node, view: DocumentView):
    """(entry, source group) pairs for one document, in listing order."""
    for entry in find_all(
        document,
        lambda n: n.name == "selectionEntry" and n.attr("id") in ALWAYS_INCLUDED_UPGRADES,
    ):
        yield entry, ALWAYS_INCLUDED_UPGRADES[entry.attr("id")]
    for group_id, group_name, source_group in UPGRADE_GROUPS:
        group = find_upgrade_group(document, group_id, group_name)
        if group is None:
            continue
        for link in find_named(group, "entryLink"):
            target = view.resolve(link.attr("targetId"))
            if target is None or target.name != "selectionEntry":
                logger.debug("Skipping unresolved wargear link %s", link.attr("targetId"))
                continue
            yield target, source_group


def scan_upgrades(index: CatalogIndex) -> list[UpgradeTemplate]:
    """Upgrades across all documents; the first listing of an id wins."""
    found: dict[str, UpgradeTemplate] = {}
    for document in index.documents:
        view = index.for_document(document)
        for entry, source_group in _candidates(document, view):
            upgrade = upgrade_from_entry(entry, source_group, view)
            if upgrade is not None and upgrade.id not in found:
                found[upgrade.id] = upgrade
    return sort_by_name(found.values())
