"""Readers for the attribute-bearing parts of a catalog entry.

Profiles/characteristics, costs, constraints and rule text. Key spellings
vary between catalog revisions, so every lookup accepts a list of known
variants.
"""

from typing import Optional, Union

from ..markup import Node, child_text, children_in, find_named
from .models import ChassisMaxima, UnitStats
from .utils import format_rule, lookup, parse_number, parse_number_loose, parse_plus_number, pick_first

POINTS_COST_NAMES = ("", "pts", "points")

VOID_SHIELD_KEYS = ("Void Shields", "Void Shield", "Shields", "VSG", "Void Shield Generators")
REACTOR_KEYS = ("Plasma Reactor", "Reactor", "Reactor Track", "Reactor Pips", "Reactor Max")
HEAT_KEYS = ("Max Heat", "Heat", "Reactor Heat")

COMMAND_KEYS = ("Command", "Cmd", "C")
BALLISTIC_SKILL_KEYS = ("Ballistic Skill", "BS")
WEAPON_SKILL_KEYS = ("Weapon Skill", "WS")
SPEED_KEYS = ("Speed", "Move", "Movement", "M")
MANOEUVRE_KEYS = ("Manoeuvre", "Manoeuver", "Manuever", "Manoeuvre/Turn", "Man")
SERVITOR_CLADE_KEYS = ("Servitor Clades", "Servitor Clade", "SC")


def _profile_characteristics(profile: Node, out: dict[str, str]) -> None:
    for characteristic in children_in(profile, "characteristics", "characteristic"):
        name = characteristic.attr("name")
        value = characteristic.text.strip()
        if name and value:
            out.setdefault(name, value)


def characteristic_map(entry: Node) -> dict[str, str]:
    """Flat name -> value map over every profile under ``entry``.

    Profiles are read in document order; the first value seen for a key
    is kept.
    """
    out: dict[str, str] = {}
    for profile in find_named(entry, "profile"):
        _profile_characteristics(profile, out)
    return out


def is_weapon_profile(profile: Node) -> bool:
    kind = profile.attr("typeName") or profile.attr("type")
    return "weapon" in kind.lower()


def weapon_characteristics(entry: Node) -> dict[str, str]:
    """Characteristics of the first weapon-typed profile under ``entry``.

    Falls back to all profiles when none is weapon-typed. Additional
    weapon-typed profiles (alternate fire modes) are ignored.
    """
    profiles = find_named(entry, "profile")
    weapon_profiles = [p for p in profiles if is_weapon_profile(p)]
    out: dict[str, str] = {}
    if weapon_profiles:
        _profile_characteristics(weapon_profiles[0], out)
        return out
    for profile in profiles:
        _profile_characteristics(profile, out)
    return out


def points_cost(entry: Node) -> Optional[Union[int, float]]:
    """Points value from ``<costs><cost name="pts" value=".."/></costs>``.

    Only plain points count; other cost types (e.g. stratagem points) are
    skipped.
    """
    for cost in children_in(entry, "costs", "cost"):
        if cost.attr("name").lower() not in POINTS_COST_NAMES:
            continue
        value = parse_number(cost.attributes.get("value"))
        if value is not None:
            return value
    return None


def constraints(node: Node) -> tuple[Optional[float], Optional[float]]:
    """(min, max) from the node's own ``<constraints>``; first of each wins."""
    low = high = None
    for constraint in children_in(node, "constraints", "constraint"):
        value = parse_number(constraint.attributes.get("value"))
        if value is None:
            continue
        kind = constraint.attr("type").lower()
        if kind == "min" and low is None:
            low = value
        elif kind == "max" and high is None:
            high = value
    return low, high


def rule_description(rule: Node) -> str:
    return (child_text(rule, "description") or rule.text.strip()).strip()


def rule_lines(entry: Node) -> list[str]:
    """Every rule under ``entry`` as "Name: description" lines."""
    lines = []
    for rule in find_named(entry, "rule"):
        desc = rule_description(rule)
        if desc:
            lines.append(format_rule(rule.attr("name"), desc))
    return lines


def first_rule_text(entry: Node) -> Optional[str]:
    for rule in find_named(entry, "rule"):
        desc = rule_description(rule)
        if desc:
            return desc
    return None


def category_names(entry: Node) -> list[str]:
    return [
        n.attr("name")
        for n in find_named(entry, "categoryLink") + find_named(entry, "category")
        if n.attr("name")
    ]


def chassis_maxima(chars: dict[str, str]) -> ChassisMaxima:
    """Void shield, reactor and heat maxima from a characteristic map.

    Heat defaults to the reactor value when no explicit heat is given.
    """
    void_shields = pick_first(*(parse_number_loose(chars.get(k)) for k in VOID_SHIELD_KEYS))
    reactor = pick_first(*(parse_number_loose(chars.get(k)) for k in REACTOR_KEYS))
    heat = pick_first(*(parse_number_loose(chars.get(k)) for k in HEAT_KEYS))
    if heat is None:
        heat = reactor
    return ChassisMaxima(void_shields=void_shields, plasma_reactor=reactor, max_heat=heat)


def unit_stats(chars: dict[str, str], base: Optional[UnitStats] = None) -> UnitStats:
    """Overlay whatever command/skill/movement values are present onto ``base``."""
    base = base or UnitStats()
    command = parse_plus_number(lookup(chars, *COMMAND_KEYS))
    ballistic = parse_plus_number(lookup(chars, *BALLISTIC_SKILL_KEYS))
    weapon_skill = parse_plus_number(lookup(chars, *WEAPON_SKILL_KEYS))
    speed = lookup(chars, *SPEED_KEYS)
    manoeuvre = lookup(chars, *MANOEUVRE_KEYS)
    clades = parse_plus_number(lookup(chars, *SERVITOR_CLADE_KEYS))
    return UnitStats(
        command=pick_first(command, base.command),
        ballistic_skill=pick_first(ballistic, base.ballistic_skill),
        speed=pick_first(speed, base.speed),
        weapon_skill=pick_first(weapon_skill, base.weapon_skill),
        manoeuvre=pick_first(manoeuvre, base.manoeuvre),
        servitor_clades=pick_first(clades, base.servitor_clades),
    )
