"""Stable identifiers for extracted records.

Persisted user data refers to templates by these identifiers, so the
values in the tables below must never change. Entries not covered by a
table fall back to a prefixed raw catalog id, then a prefixed slug of the
sanitized name.
"""

from typing import Optional

from ..markup import Node
from .utils import sanitize_name, slugify

# Name substring -> chassis id. First match wins.
KNOWN_CHASSIS_IDS: list[tuple[str, str]] = [
    ("warhound", "warhound"),
    ("reaver", "reaver"),
    ("warlord", "warlord"),
    ("warmaster", "warmaster"),
    ("warbringer", "warbringer"),
    ("dire wolf", "dire-wolf"),
]

# All tokens must appear in the name. First match wins.
KNOWN_WEAPON_IDS: list[tuple[tuple[str, ...], str]] = [
    (("plasma blastgun",), "plasma-blastgun"),
    (("vulcan", "mega", "bolter"), "vulcan-mega-bolter"),
    (("turbo", "laser", "destructor"), "turbo-laser-destructor"),
    (("inferno",), "inferno-gun"),
]

CHASSIS_PREFIX = "bs"
CHASSIS_NAME_PREFIX = "bsname"
WEAPON_PREFIX = "bs"
FORMATION_PREFIX = "bsmaniple"
LEGION_PREFIX = "bslegio"
UPGRADE_PREFIX = "bsupg"
TRAIT_PREFIX = "bstrait"


def known_chassis_id(name: str) -> Optional[str]:
    lowered = name.lower()
    for token, chassis_id in KNOWN_CHASSIS_IDS:
        if token in lowered:
            return chassis_id
    return None


def known_weapon_id(name: str) -> Optional[str]:
    lowered = name.lower()
    for tokens, weapon_id in KNOWN_WEAPON_IDS:
        if all(t in lowered for t in tokens):
            return weapon_id
    return None


def fallback_id(node: Node, prefix: str, name_prefix: Optional[str] = None) -> str:
    """``prefix:<raw id>``, else ``name_prefix:<slug>``, else ``prefix:unknown``."""
    raw_id = node.attr("id")
    if raw_id:
        return f"{prefix}:{raw_id}"
    slug = slugify(sanitize_name(node.attr("name")))
    if slug:
        return f"{name_prefix or prefix}:{slug}"
    return f"{prefix}:unknown"


def chassis_id(entry: Node) -> str:
    return known_chassis_id(entry.attr("name")) or fallback_id(
        entry, CHASSIS_PREFIX, CHASSIS_NAME_PREFIX
    )


def weapon_id(entry: Node) -> str:
    return known_weapon_id(entry.attr("name")) or fallback_id(entry, WEAPON_PREFIX)
