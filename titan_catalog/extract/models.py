"""Data models for the catalog extraction pipeline.

Two families live here:
  - skeletons: mutable working records built while scanning documents
  - templates: the assembled, read-only records handed to consumers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

# Range/accuracy values are numbers or one of the symbolic sentinels below.
StatValue = Union[int, str]

NO_VALUE = "-"
TEMPLATE_RANGE = "T"
PLACEHOLDER_ROLL = "—"


class MountType(Enum):
    """Weapon attachment point."""
    ARM = "arm"
    CARAPACE = "carapace"


class UpgradeGroup(Enum):
    """Wargear group an upgrade was listed under."""
    UNIVERSAL = "universal"
    LOYALIST = "loyalist"
    TRAITOR = "traitor"


class Allegiance(Enum):
    LOYALIST = "loyalist"
    TRAITOR = "traitor"
    UNKNOWN = "unknown"


class TraitGroup(Enum):
    STANDARD = "standard"      # Available to every legion
    LEGIO = "legio"            # Legion-specific traits
    CORRUPTED = "corrupted"    # Corrupted Titan table
    UNKNOWN = "unknown"


class MaxField(Enum):
    """Chassis maxima that must be resolved for a playable template."""
    VOID_SHIELDS = "voidShieldsMax"
    PLASMA_REACTOR = "plasmaReactorMax"
    MAX_HEAT = "maxHeat"


# ---------------------------------------------------------------------------
# Skeletons
# ---------------------------------------------------------------------------

@dataclass
class ChassisMaxima:
    """Numeric maxima read from the catalog (None when absent)."""
    void_shields: Optional[int] = None
    plasma_reactor: Optional[int] = None
    max_heat: Optional[int] = None


@dataclass
class WeaponSkeleton:
    """A weapon resolved through a chassis entry link."""
    id: str
    name: str
    points: Union[int, float] = 0
    short_range: StatValue = NO_VALUE
    long_range: StatValue = NO_VALUE
    accuracy_short: StatValue = NO_VALUE
    accuracy_long: StatValue = NO_VALUE
    dice: int = 0
    strength: int = 0
    traits: list[str] = field(default_factory=list)
    mount_type: MountType = MountType.ARM

    def information_score(self) -> int:
        """How many of the headline stats are populated."""
        return (
            int(bool(self.points))
            + int(self.dice != 0)
            + int(self.strength != 0)
            + int(bool(self.traits))
        )


@dataclass
class ChassisSkeleton:
    """A titan chassis as recovered from one or more catalog documents."""
    id: str
    name: str
    points: Optional[Union[int, float]] = None
    characteristics: dict[str, str] = field(default_factory=dict)
    maxima: ChassisMaxima = field(default_factory=ChassisMaxima)
    weapons: list[WeaponSkeleton] = field(default_factory=list)
    default_left_weapon_id: Optional[str] = None
    default_right_weapon_id: Optional[str] = None
    rules: list[str] = field(default_factory=list)
    is_legend: bool = False

    def merge(self, other: "ChassisSkeleton") -> None:
        """Fold a later sighting of the same chassis into this one.

        First-seen non-empty values win per field; rule and weapon lists
        are unioned in order.
        """
        self.name = self.name or other.name
        if self.points is None:
            self.points = other.points
        for key, value in other.characteristics.items():
            self.characteristics.setdefault(key, value)
        if self.maxima.void_shields is None:
            self.maxima.void_shields = other.maxima.void_shields
        if self.maxima.plasma_reactor is None:
            self.maxima.plasma_reactor = other.maxima.plasma_reactor
        if self.maxima.max_heat is None:
            self.maxima.max_heat = other.maxima.max_heat
        self.default_left_weapon_id = self.default_left_weapon_id or other.default_left_weapon_id
        self.default_right_weapon_id = self.default_right_weapon_id or other.default_right_weapon_id

        known = {w.id for w in self.weapons}
        for weapon in other.weapons:
            if weapon.id not in known:
                known.add(weapon.id)
                self.weapons.append(weapon)
        for rule in other.rules:
            if rule not in self.rules:
                self.rules.append(rule)
        self.is_legend = self.is_legend or other.is_legend


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeaponTemplate:
    id: str
    name: str
    points: Union[int, float]
    short_range: StatValue
    long_range: StatValue
    accuracy_short: StatValue
    accuracy_long: StatValue
    dice: int
    strength: int
    traits: tuple[str, ...]
    special_rules: tuple[str, ...]
    mount_type: MountType
    repair_roll: Optional[str] = None
    disabled_roll_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArmorRolls:
    """Roll ranges per hit type, e.g. "11-13", "14-15", "16+"."""
    direct: str = PLACEHOLDER_ROLL
    devastating: str = PLACEHOLDER_ROLL
    critical: str = PLACEHOLDER_ROLL


@dataclass(frozen=True)
class CriticalEffect:
    level: int
    effects: tuple[str, ...]


@dataclass(frozen=True)
class DamageLocation:
    max: int
    armor_rolls: ArmorRolls = field(default_factory=ArmorRolls)
    modifiers: tuple[Optional[int], ...] = ()
    critical_effects: tuple[CriticalEffect, ...] = ()


@dataclass(frozen=True)
class DamageTrack:
    head: DamageLocation
    body: DamageLocation
    legs: DamageLocation


@dataclass(frozen=True)
class UnitStats:
    command: int = 0
    ballistic_skill: int = 0
    speed: str = ""
    weapon_skill: int = 0
    manoeuvre: str = ""
    servitor_clades: int = 0


@dataclass(frozen=True)
class TitanStats:
    void_shields_max: int
    void_shield_saves: tuple[str, ...]
    plasma_reactor_max: int
    max_heat: int
    damage: DamageTrack
    has_carapace_weapon: bool
    stats: UnitStats


@dataclass(frozen=True)
class TitanTemplate:
    id: str
    name: str
    unit_type: str
    base_points: Optional[Union[int, float]]
    default_stats: TitanStats
    available_weapons: tuple[WeaponTemplate, ...]
    special_rules: tuple[str, ...] = ()
    default_left_weapon_id: Optional[str] = None
    default_right_weapon_id: Optional[str] = None


@dataclass(frozen=True)
class FormationTemplate:
    """A maniple: a group of titans with composition limits and a rule."""
    id: str
    name: str
    allowed_titan_template_ids: tuple[str, ...]
    min_titans: int
    max_titans: int
    special_rule: str


@dataclass(frozen=True)
class LegionTemplate:
    id: str
    name: str
    rules: tuple[str, ...]
    category_key: Optional[str] = None
    category_id: Optional[str] = None
    allegiance: Allegiance = Allegiance.UNKNOWN


@dataclass(frozen=True)
class UpgradeTemplate:
    id: str
    name: str
    points: Union[int, float]
    rules: tuple[str, ...]
    source_group: UpgradeGroup
    legio_keys: tuple[str, ...] = ()
    excluded_titan_template_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class PrincepsTraitTemplate:
    id: str
    name: str
    rules: tuple[str, ...]
    legio_category_id: Optional[str] = None
    allegiance: Allegiance = Allegiance.UNKNOWN
    trait_group: TraitGroup = TraitGroup.UNKNOWN


# ---------------------------------------------------------------------------
# Load results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MissingMaxData:
    """A chassis whose maxima could not be resolved from any source."""
    id: str
    name: str
    missing: tuple[MaxField, ...]


@dataclass(frozen=True)
class LegendTitan:
    id: str
    name: str


@dataclass(frozen=True)
class LoadResult:
    """Templates for one concept plus human-readable warnings."""
    templates: tuple = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class TitanLoadResult(LoadResult):
    missing_max_data: tuple[MissingMaxData, ...] = ()
    legend_titans: tuple[LegendTitan, ...] = ()
