"""Titan catalog extraction: catalog markup -> game-ready templates."""

from .cache import CacheStatus, CatalogCache, ResultCache, catalog_cache
from .config import CatalogConfig, load_config
from .extract import (
    load_formation_templates,
    load_legion_templates,
    load_titan_templates,
    load_trait_templates,
    load_upgrade_templates,
)
from .overrides import clear_override_cache, load_overrides

__all__ = [
    "CacheStatus",
    "CatalogCache",
    "ResultCache",
    "catalog_cache",
    "CatalogConfig",
    "load_config",
    "load_formation_templates",
    "load_legion_templates",
    "load_titan_templates",
    "load_trait_templates",
    "load_upgrade_templates",
    "clear_override_cache",
    "load_overrides",
]
