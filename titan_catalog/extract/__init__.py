"""Catalog extraction: classification, skeletons, assembly and loaders."""

from .models import (
    Allegiance,
    FormationTemplate,
    LegendTitan,
    LegionTemplate,
    LoadResult,
    MaxField,
    MissingMaxData,
    MountType,
    PrincepsTraitTemplate,
    TitanLoadResult,
    TitanTemplate,
    TraitGroup,
    UpgradeGroup,
    UpgradeTemplate,
    WeaponTemplate,
)
from .pipeline import (
    load_formation_templates,
    load_legion_templates,
    load_titan_templates,
    load_trait_templates,
    load_upgrade_templates,
)

__all__ = [
    "Allegiance",
    "FormationTemplate",
    "LegendTitan",
    "LegionTemplate",
    "LoadResult",
    "MaxField",
    "MissingMaxData",
    "MountType",
    "PrincepsTraitTemplate",
    "TitanLoadResult",
    "TitanTemplate",
    "TraitGroup",
    "UpgradeGroup",
    "UpgradeTemplate",
    "WeaponTemplate",
    "load_formation_templates",
    "load_legion_templates",
    "load_titan_templates",
    "load_trait_templates",
    "load_upgrade_templates",
]
