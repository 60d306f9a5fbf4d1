"""Weapon entries -> :class:`WeaponSkeleton`."""

from typing import Optional

from ..markup import Node
from .identifiers import weapon_id
from .links import WeaponLink
from .models import NO_VALUE, MountType, WeaponSkeleton
from .profiles import points_cost, weapon_characteristics
from .utils import (
    lookup,
    normalize_accuracy,
    normalize_range_part,
    parse_plus_number,
    parse_short_long,
    sanitize_name,
    split_traits,
)

SHORT_RANGE_KEYS = ("Short Range", "Short range")
LONG_RANGE_KEYS = ("Long Range", "Long range")
COMBINED_RANGE_KEYS = ("Range", "Rng", "RNG", "Short/Long", "Short / Long")

ACCURACY_SHORT_KEYS = (
    "Acc (Short)",
    "Accuracy (Short)",
    "Short Accuracy",
    "Short Acc",
    "Acc Short",
    "ACC Short",
    "Acc",
)
ACCURACY_LONG_KEYS = (
    "Acc (Long)",
    "Accuracy (Long)",
    "Long Accuracy",
    "Long Acc",
    "Acc Long",
    "ACC Long",
    "Acc",
)

DICE_KEYS = ("Dice", "D", "Shots")
STRENGTH_KEYS = ("Strength", "Str", "S")
TRAIT_KEYS = ("Traits", "Trait", "Special Rules", "Special")


def _ranges(chars: dict[str, str]):
    short_text = lookup(chars, *SHORT_RANGE_KEYS)
    long_text = lookup(chars, *LONG_RANGE_KEYS)
    if short_text or long_text:
        return (
            normalize_range_part(short_text) if short_text else NO_VALUE,
            normalize_range_part(long_text) if long_text else NO_VALUE,
        )
    return parse_short_long(lookup(chars, *COMBINED_RANGE_KEYS))


def weapon_from_entry(entry: Node, mount_type: MountType) -> Optional[WeaponSkeleton]:
    """Build a weapon skeleton from a selection entry; None if it has no name."""
    raw_name = entry.attr("name")
    if not raw_name:
        return None
    chars = weapon_characteristics(entry)
    short_range, long_range = _ranges(chars)
    return WeaponSkeleton(
        id=weapon_id(entry),
        name=sanitize_name(raw_name),
        points=points_cost(entry) or 0,
        short_range=short_range,
        long_range=long_range,
        accuracy_short=normalize_accuracy(lookup(chars, *ACCURACY_SHORT_KEYS)),
        accuracy_long=normalize_accuracy(lookup(chars, *ACCURACY_LONG_KEYS)),
        dice=parse_plus_number(lookup(chars, *DICE_KEYS)) or 0,
        strength=parse_plus_number(lookup(chars, *STRENGTH_KEYS)) or 0,
        traits=split_traits(lookup(chars, *TRAIT_KEYS)),
        mount_type=mount_type,
    )


def weapons_from_links(links: list[WeaponLink]) -> list[WeaponSkeleton]:
    """Resolve links to weapons, one per id, in first-seen order.

    When the same id is reached more than once, the sighting with the
    higher information score replaces the earlier one in place.
    """
    by_id: dict[str, WeaponSkeleton] = {}
    for link in links:
        weapon = weapon_from_entry(link.target, link.mount_type)
        if weapon is None:
            continue
        existing = by_id.get(weapon.id)
        if existing is None or weapon.information_score() > existing.information_score():
            by_id[weapon.id] = weapon
    return list(by_id.values())
