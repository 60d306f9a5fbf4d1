"""Chassis skeletons + override tables -> final :class:`TitanTemplate` records.

Precedence for the three maxima is catalog value first, override value
second, placeholder last; a maximum that needed the placeholder is
reported as missing.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..overrides import OverrideBundle, weapon_metadata_key
from .models import (
    PLACEHOLDER_ROLL,
    ArmorRolls,
    ChassisSkeleton,
    CriticalEffect,
    DamageLocation,
    DamageTrack,
    MaxField,
    MissingMaxData,
    MountType,
    TitanStats,
    TitanTemplate,
    WeaponSkeleton,
    WeaponTemplate,
)
from .profiles import unit_stats
from .utils import dedupe, pick_first, sort_by_name

logger = logging.getLogger(__name__)

UNIT_TYPE = "titan"

# Legacy raw-id template ids -> canonical chassis key
TEMPLATE_ID_ALIASES = {
    "bs:3ad7-cd10-8d6e-8c2e": "warhound",
    "bs:9ff1-81bc-203d-620c": "reaver",
    "bs:dfeb-83af-7b26-622a": "warlord",
    "bs:76b8-ecdb-cbf6-0c45": "dire-wolf",
}

# Name substring -> chassis key, for variants sharing a base chassis
NAME_ALIASES = [
    ("iconoclast", "warmaster"),
]

# Chassis key -> (token, rule) pairs; the rule is added unless some rule
# already mentions the token.
ALWAYS_INCLUDED_RULES = {
    "warhound": [
        ("squadron", "SQUADRON: Warhound Titans can be formed into Squadrons of 2-3 Titans."),
    ],
}

PLACEHOLDER_VOID_SHIELDS = 0
PLACEHOLDER_REACTOR = 5
PLACEHOLDER_LOCATION_MAX = {"head": 5, "body": 6, "legs": 6}
LOCATIONS = ("head", "body", "legs")

# armorRolls field -> accepted keys, current spelling first
ARMOR_ROLL_KEYS = {
    "direct": ("direct", "directHit"),
    "devastating": ("devastating", "devastatingHit"),
    "critical": ("critical", "criticalHit"),
}


def chassis_key(skeleton: ChassisSkeleton, overrides: OverrideBundle) -> str:
    """Key used to look the chassis up in the override tables."""
    aliases = {**TEMPLATE_ID_ALIASES, **overrides.aliases}
    if skeleton.id in aliases:
        return aliases[skeleton.id]
    lowered = skeleton.name.lower()
    for token, key in NAME_ALIASES:
        if token in lowered:
            return key
    return skeleton.id


# ---------------------------------------------------------------------------
# Damage tracks
# ---------------------------------------------------------------------------

def align_modifiers(modifiers: list, pips: int) -> tuple:
    """Right-align modifiers for the last N pips onto a track of ``pips``.

    >>> align_modifiers([1, 2, 3], 5)
    (None, None, 1, 2, 3)
    """
    if pips <= 0:
        return ()
    tail = list(modifiers)[-pips:]
    return tuple([None] * (pips - len(tail)) + tail)


def armor_rolls(location: dict) -> ArmorRolls:
    values = {}
    for source_key in ("armorRolls", "hitTable"):
        table = location.get(source_key) or {}
        for field_name, keys in ARMOR_ROLL_KEYS.items():
            if field_name in values:
                continue
            for key in keys:
                if table.get(key):
                    values[field_name] = table[key]
                    break
    return ArmorRolls(**values)


def critical_effects(levels: list) -> tuple[CriticalEffect, ...]:
    return tuple(
        CriticalEffect(level=int(level["level"]), effects=tuple(level.get("effects", [])))
        for level in levels
    )


def placeholder_location(pips: int, defaults: list) -> DamageLocation:
    return DamageLocation(
        max=pips,
        armor_rolls=ArmorRolls(PLACEHOLDER_ROLL, PLACEHOLDER_ROLL, PLACEHOLDER_ROLL),
        modifiers=(None,) * pips,
        critical_effects=critical_effects(defaults),
    )


def damage_location(name: str, location: Optional[dict], overrides: OverrideBundle) -> DamageLocation:
    defaults = overrides.critical_effects.get(name, [])
    if not location:
        return placeholder_location(PLACEHOLDER_LOCATION_MAX[name], defaults)
    pips = int(location["max"])
    levels = location.get("criticalEffects")
    return DamageLocation(
        max=pips,
        armor_rolls=armor_rolls(location),
        modifiers=align_modifiers(location.get("modifiers") or [], pips),
        critical_effects=critical_effects(levels if levels is not None else defaults),
    )


def damage_track(key: str, overrides: OverrideBundle) -> DamageTrack:
    track = overrides.damage_tracks.get(key) or {}
    return DamageTrack(**{
        name: damage_location(name, track.get(name), overrides) for name in LOCATIONS
    })


# ---------------------------------------------------------------------------
# Weapons and rules
# ---------------------------------------------------------------------------

def weapon_template(weapon: WeaponSkeleton, overrides: OverrideBundle) -> WeaponTemplate:
    meta = overrides.weapon_metadata.get(
        weapon_metadata_key(weapon.name, weapon.mount_type.value), {}
    )
    return WeaponTemplate(
        id=weapon.id,
        name=weapon.name,
        points=weapon.points,
        short_range=weapon.short_range,
        long_range=weapon.long_range,
        accuracy_short=weapon.accuracy_short,
        accuracy_long=weapon.accuracy_long,
        dice=weapon.dice,
        strength=weapon.strength,
        traits=tuple(weapon.traits),
        special_rules=(),
        mount_type=weapon.mount_type,
        repair_roll=meta.get("repairRoll") or None,
        disabled_roll_lines=tuple(meta.get("disabledRollLines") or ()),
    )


def special_rules(key: str, skeleton: ChassisSkeleton, override: dict) -> tuple[str, ...]:
    rules = dedupe(skeleton.rules + list(override.get("specialRules") or []))
    for token, rule in ALWAYS_INCLUDED_RULES.get(key, []):
        if not any(token in r.lower() for r in rules):
            rules.append(rule)
    return tuple(rules)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

@dataclass
class ResolvedMaxima:
    void_shields: Optional[int]
    plasma_reactor: Optional[int]
    max_heat: Optional[int]
    missing: list[MaxField] = field(default_factory=list)


def resolve_maxima(skeleton: ChassisSkeleton, override: dict) -> ResolvedMaxima:
    """Catalog value first, then the override table.

    Heat falls back to the resolved reactor value, so it is only missing
    when the reactor is too.
    """
    void_shields = pick_first(skeleton.maxima.void_shields, override.get("voidShieldsMax"))
    reactor = pick_first(skeleton.maxima.plasma_reactor, override.get("plasmaReactorMax"))
    heat = pick_first(skeleton.maxima.max_heat, override.get("maxHeat"), reactor)
    missing = []
    if void_shields is None:
        missing.append(MaxField.VOID_SHIELDS)
    if reactor is None:
        missing.append(MaxField.PLASMA_REACTOR)
    if heat is None:
        missing.append(MaxField.MAX_HEAT)
    return ResolvedMaxima(void_shields, reactor, heat, missing)


def assemble_titan(skeleton: ChassisSkeleton, overrides: OverrideBundle) -> tuple[TitanTemplate, ResolvedMaxima]:
    key = chassis_key(skeleton, overrides)
    override = overrides.chassis.get(key) or {}
    maxima = resolve_maxima(skeleton, override)
    reactor = pick_first(maxima.plasma_reactor, PLACEHOLDER_REACTOR)
    weapons = tuple(weapon_template(w, overrides) for w in skeleton.weapons)

    stats = TitanStats(
        void_shields_max=pick_first(maxima.void_shields, PLACEHOLDER_VOID_SHIELDS),
        void_shield_saves=tuple(override.get("voidShieldSaves") or ()),
        plasma_reactor_max=reactor,
        max_heat=pick_first(maxima.max_heat, reactor),
        damage=damage_track(key, overrides),
        has_carapace_weapon=any(w.mount_type == MountType.CARAPACE for w in weapons),
        stats=unit_stats(skeleton.characteristics),
    )
    template = TitanTemplate(
        id=skeleton.id,
        name=skeleton.name,
        unit_type=UNIT_TYPE,
        base_points=skeleton.points,
        default_stats=stats,
        available_weapons=weapons,
        special_rules=special_rules(key, skeleton, override),
        default_left_weapon_id=skeleton.default_left_weapon_id,
        default_right_weapon_id=skeleton.default_right_weapon_id,
    )
    return template, maxima


def missing_maxima_warnings(entry: MissingMaxData) -> list[str]:
    """One warning per maximum still unresolved after the override merge."""
    return [f"Missing {field.value} for {entry.name} ({entry.id})" for field in entry.missing]


def assemble_titans(
    chassis: dict[str, ChassisSkeleton], overrides: OverrideBundle
) -> tuple[list[TitanTemplate], list[MissingMaxData], list[str]]:
    """Build templates sorted by name, with missing-maxima reports and warnings."""
    templates = []
    missing = []
    warnings = []
    for skeleton in sort_by_name(chassis.values()):
        template, maxima = assemble_titan(skeleton, overrides)
        templates.append(template)
        if maxima.missing:
            entry = MissingMaxData(id=skeleton.id, name=skeleton.name, missing=tuple(maxima.missing))
            missing.append(entry)
            for message in missing_maxima_warnings(entry):
                logger.warning(message)
                warnings.append(message)
    return templates, missing, warnings
