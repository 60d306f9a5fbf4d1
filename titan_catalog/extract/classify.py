"""Heuristic classification of catalog entries.

The upstream catalog has no schema we can rely on: entry types are used
inconsistently and titans, banners, wargear and narrative entries share
the same element names. Each rule below is a small named predicate over a
node (and its characteristic map); the tables drive them, so upstream
revisions mostly need table edits.
"""

import logging

from ..markup import Node
from .models import MountType
from .profiles import category_names

logger = logging.getLogger(__name__)

# Entry ``type`` values a chassis may carry (absent type is also accepted)
CHASSIS_ENTRY_TYPES = {"unit", "model"}

# Names containing any of these are never chassis
CHASSIS_NAME_DENYLIST = [
    "knight",
    "banner",
    "stratagem",
    "upgrade",
    "wargear",
    "infantry",
    "portion",
    "titanic decapitation",
    "titan hunter",
    "titan guard",
]

# Names containing any of these are accepted without stat corroboration
CHASSIS_NAME_ALLOWLIST = ["titan", "warhound", "reaver", "warlord", "warmaster"]

# Stats only a combat unit carries
STRONG_STAT_KEYS = {
    "Command",
    "Ballistic Skill",
    "Weapon Skill",
    "Void Shields",
    "Plasma Reactor",
}

# Stats only a titan-class chassis carries
TITAN_MAX_KEYS = {
    "Void Shields",
    "Void Shield",
    "Void Shield Generators",
    "Plasma Reactor",
    "Reactor Track",
    "Reactor Pips",
    "Reactor Max",
}

LEGEND_MARKERS = ["titan of legend", "titans of legend"]

WEAPON_CONTEXT_TOKENS = ["weapon", "arm", "carapace", "left", "right"]
CARAPACE_TOKEN = "carapace"

FORMATION_TOKEN = "maniple"
FORMATION_NAME_DENYLIST = ["stratagem", "wargear"]

LEGION_NAME_PREFIX = "legio "
LEGION_CATEGORY_PREFIX = "legio"
LEGION_GENERIC_CATEGORIES = {"LegioSpecificWargear"}
LEGION_ENTRY_TYPES = {"upgrade"}

# Upgrade entries that are really something else
UPGRADE_NAME_PREFIX_DENYLIST = ["legio ", "house "]
UPGRADE_CHASSIS_TOKENS = ["warlord", "warhound", "reaver", "warmaster"]


def has_acceptable_type(entry: Node, accepted: set[str]) -> bool:
    kind = entry.attr("type").lower()
    return not kind or kind in accepted


def denied_name(name: str) -> bool:
    lowered = name.lower()
    return any(token in lowered for token in CHASSIS_NAME_DENYLIST)


def allowlisted_name(name: str) -> bool:
    lowered = name.lower()
    return any(token in lowered for token in CHASSIS_NAME_ALLOWLIST)


def has_strong_stats(chars: dict[str, str]) -> bool:
    return any(key in chars for key in STRONG_STAT_KEYS)


def has_titan_maxima(chars: dict[str, str]) -> bool:
    return any(key in chars for key in TITAN_MAX_KEYS)


def is_likely_chassis(entry: Node, chars: dict[str, str]) -> bool:
    """Whether a selection entry describes a titan chassis.

    Allowlisted names pass on type and denylist alone; anything else must
    also show both a strong stat and a titan-class maximum.
    """
    if entry.name != "selectionEntry":
        return False
    name = entry.attr("name")
    if not has_acceptable_type(entry, CHASSIS_ENTRY_TYPES):
        return False
    if denied_name(name):
        return False
    if allowlisted_name(name):
        return True
    if has_strong_stats(chars) and has_titan_maxima(chars):
        return True
    logger.debug("Rejected chassis candidate %r: no corroborating stats", name)
    return False


def is_legend(entry: Node) -> bool:
    """Narrative-only "Titan of Legend" entries, by name or category."""
    labels = [entry.attr("name")] + category_names(entry)
    return any(marker in label.lower() for label in labels for marker in LEGEND_MARKERS)


def is_weapon_context(context: list[str]) -> bool:
    joined = " ".join(context).lower()
    return any(token in joined for token in WEAPON_CONTEXT_TOKENS)


def mount_type_for_context(context: list[str]) -> MountType:
    """Carapace if any ancestor group/entry name mentions it, else arm."""
    joined = " ".join(context).lower()
    return MountType.CARAPACE if CARAPACE_TOKEN in joined else MountType.ARM


def is_likely_formation(name: str) -> bool:
    lowered = name.lower()
    if FORMATION_TOKEN not in lowered:
        return False
    return not any(token in lowered for token in FORMATION_NAME_DENYLIST)


def is_legion_name(name: str) -> bool:
    return name.lower().startswith(LEGION_NAME_PREFIX)


def is_legion_category(name: str) -> bool:
    return (
        name.lower().startswith(LEGION_CATEGORY_PREFIX)
        and name not in LEGION_GENERIC_CATEGORIES
    )


def is_upgrade_name(name: str) -> bool:
    """Filter legions, houses, formations and chassis out of wargear lists."""
    lowered = name.lower()
    if any(lowered.startswith(p) for p in UPGRADE_NAME_PREFIX_DENYLIST):
        return False
    if FORMATION_TOKEN in lowered:
        return False
    if "titan" in lowered and any(t in lowered for t in UPGRADE_CHASSIS_TOKENS):
        return False
    return True
