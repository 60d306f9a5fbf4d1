"""Maniple (formation) extraction."""

import logging
import math
from typing import Optional

from ..markup import Node, children_in, find_named
from .classify import is_likely_chassis, is_likely_formation
from .identifiers import FORMATION_PREFIX, chassis_id, fallback_id
from .links import CatalogIndex, DocumentView
from .models import FormationTemplate
from .profiles import characteristic_map, constraints, first_rule_text
from .utils import dedupe, sanitize_name, sort_by_name

logger = logging.getLogger(__name__)

FALLBACK_RULE_SUFFIX = "(BattleScribe)"


def _count(value) -> int:
    return max(0, math.floor(value))


def _chassis_target(node: Optional[Node]) -> Optional[str]:
    if node is None or node.name != "selectionEntry":
        return None
    if not is_likely_chassis(node, characteristic_map(node)):
        return None
    return chassis_id(node)


def _direct_slots(entry: Node, view: DocumentView) -> tuple[list[str], int, int, int]:
    """Chassis slots declared as direct entry links on the formation.

    Returns (allowed ids, min total, max total, slots found).
    """
    allowed: list[str] = []
    low_total = high_total = found = 0
    for link in children_in(entry, "entryLinks", "entryLink"):
        target_id = link.attr("targetId")
        if not target_id:
            continue
        titan_id = _chassis_target(view.resolve(target_id))
        if titan_id is None:
            continue
        found += 1
        allowed.append(titan_id)
        low, high = constraints(link)
        if low is not None:
            low_total += _count(low)
        if high is not None:
            high_total += _count(high)
    return allowed, low_total, high_total, found


def collect_chassis_ids(node: Node, view: DocumentView, visited: set[str]) -> list[str]:
    """Chassis ids reachable from ``node`` via embedded entries or links.

    ``visited`` holds raw ids already expanded in this walk; each id is
    expanded at most once.
    """
    raw_id = node.attr("id")
    if raw_id:
        if raw_id in visited:
            return []
        visited.add(raw_id)

    own = _chassis_target(node)
    if own is not None:
        return [own]

    out = []
    for embedded in find_named(node, "selectionEntry"):
        titan_id = _chassis_target(embedded)
        if titan_id is not None:
            out.append(titan_id)
    for link in find_named(node, "entryLink"):
        target = view.resolve(link.attr("targetId"))
        if target is None:
            continue
        out.extend(collect_chassis_ids(target, view, visited))
    return out


def group_min_max(group: Node) -> tuple[int, int]:
    """Slot count for a titan group.

    The group's own constraints win; otherwise the first constraints
    found on its direct entry links. A missing maximum equals the
    minimum, and a zero maximum is raised to one.
    """
    low, high = constraints(group)
    if low is None and high is None:
        for link in children_in(group, "entryLinks", "entryLink"):
            link_low, link_high = constraints(link)
            if low is None:
                low = link_low
            if high is None:
                high = link_high
            if low is not None and high is not None:
                break
    low_count = _count(low) if low is not None else 0
    high_count = _count(high) if high is not None else low_count
    return low_count, high_count or 1


def formation_from_entry(entry: Node, view: DocumentView) -> Optional[FormationTemplate]:
    raw_name = entry.attr("name")
    if not raw_name:
        return None
    name = sanitize_name(raw_name)
    if not is_likely_formation(name):
        return None

    allowed, low_total, high_total, found = _direct_slots(entry, view)
    if not found:
        logger.debug("Formation %r has no direct chassis slots; scanning groups", name)
        for group in find_named(entry, "selectionEntryGroup"):
            titan_ids = collect_chassis_ids(group, view, set())
            if not titan_ids:
                continue
            allowed.extend(titan_ids)
            low, high = group_min_max(group)
            low_total += low
            high_total += high

    return FormationTemplate(
        id=fallback_id(entry, FORMATION_PREFIX),
        name=name,
        allowed_titan_template_ids=tuple(dedupe(allowed)),
        min_titans=low_total,
        max_titans=high_total,
        special_rule=first_rule_text(entry) or f"{name}: {FALLBACK_RULE_SUFFIX}",
    )


def merge_formations(first: FormationTemplate, other: FormationTemplate) -> FormationTemplate:
    """Union allowed chassis; keep the first non-zero limits and rule."""
    return FormationTemplate(
        id=first.id,
        name=first.name or other.name,
        allowed_titan_template_ids=tuple(
            dedupe(first.allowed_titan_template_ids + other.allowed_titan_template_ids)
        ),
        min_titans=first.min_titans or other.min_titans,
        max_titans=first.max_titans or other.max_titans,
        special_rule=first.special_rule or other.special_rule,
    )


def scan_formations(index: CatalogIndex) -> list[FormationTemplate]:
    """All formations, merged by id and sorted by name."""
    found: dict[str, FormationTemplate] = {}
    for document in index.documents:
        view = index.for_document(document)
        for entry in find_named(document, "selectionEntry"):
            formation = formation_from_entry(entry, view)
            if formation is None:
                continue
            existing = found.get(formation.id)
            found[formation.id] = formation if existing is None else merge_formations(existing, formation)
    return sort_by_name(found.values())
