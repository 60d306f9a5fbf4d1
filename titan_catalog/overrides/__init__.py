"""Override data loading (chassis maxima, damage tracks, weapon metadata)."""

from .loader import (
    ENGINE_KILL_PATH,
    OverrideBundle,
    OverrideLoader,
    OverrideTable,
    clear_override_cache,
    default_loader,
    load_overrides,
    weapon_metadata_key,
)

__all__ = [
    "ENGINE_KILL_PATH",
    "OverrideBundle",
    "OverrideLoader",
    "OverrideTable",
    "clear_override_cache",
    "default_loader",
    "load_overrides",
    "weapon_metadata_key",
]
