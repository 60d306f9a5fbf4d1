"""Chassis discovery across an ordered set of catalog documents."""

import logging
from typing import Optional

from ..markup import Node, find_named
from .classify import is_legend, is_likely_chassis
from .identifiers import chassis_id, weapon_id
from .links import (
    CatalogIndex,
    DocumentView,
    collect_weapon_links,
    default_weapon_link,
    default_weapon_target,
    linked_rule_lines,
)
from .models import ChassisSkeleton, LegendTitan
from .profiles import characteristic_map, chassis_maxima, points_cost, rule_lines
from .utils import dedupe, sanitize_name
from .weapons import weapons_from_links

logger = logging.getLogger(__name__)


def _default_weapon_id(entry: Node, side: str, view: DocumentView) -> Optional[str]:
    link = default_weapon_link(entry, side)
    if link is None:
        return None
    target = default_weapon_target(link, view)
    return weapon_id(target) if target is not None else None


def chassis_from_entry(entry: Node, view: DocumentView) -> Optional[ChassisSkeleton]:
    """Skeleton for one selection entry, or None if it is not a chassis."""
    raw_name = entry.attr("name")
    if not raw_name:
        return None
    chars = characteristic_map(entry)
    if not is_likely_chassis(entry, chars):
        return None
    return ChassisSkeleton(
        id=chassis_id(entry),
        name=sanitize_name(raw_name),
        points=points_cost(entry),
        characteristics=chars,
        maxima=chassis_maxima(chars),
        weapons=weapons_from_links(collect_weapon_links(entry, view)),
        default_left_weapon_id=_default_weapon_id(entry, "left", view),
        default_right_weapon_id=_default_weapon_id(entry, "right", view),
        rules=dedupe(rule_lines(entry) + linked_rule_lines(entry, view)),
        is_legend=is_legend(entry),
    )


def scan_chassis(index: CatalogIndex) -> dict[str, ChassisSkeleton]:
    """All chassis keyed by stable id.

    Documents are visited in file order and entries in document order;
    later sightings of an id are merged into the first.
    """
    found: dict[str, ChassisSkeleton] = {}
    for document in index.documents:
        view = index.for_document(document)
        for entry in find_named(document, "selectionEntry"):
            skeleton = chassis_from_entry(entry, view)
            if skeleton is None:
                continue
            existing = found.get(skeleton.id)
            if existing is None:
                found[skeleton.id] = skeleton
            else:
                logger.debug("Merging duplicate chassis %s (%s)", skeleton.id, skeleton.name)
                existing.merge(skeleton)
    return found


def legend_titans(chassis: dict[str, ChassisSkeleton]) -> list[LegendTitan]:
    """Narrative-only chassis, in discovery order."""
    return [LegendTitan(id=c.id, name=c.name or c.id) for c in chassis.values() if c.is_legend]
