"""
Configuration for catalog and override-data sources.

Library callers build a :class:`CatalogConfig` directly. The CLI layers
YAML files over the defaults:
  DEFAULTS -> ~/.config/titan-catalog/config.yaml -> --config file -> flags
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/BSData/adeptus-titanicus/master/"
DEFAULT_CATALOG_FILES = ["Battlegroup.cat", "Household.cat", "Adeptus Titanicus 2018.gst"]
DEFAULT_OVERRIDES_URL = "https://raw.githubusercontent.com/SCPublic/titan-data/master/"
DEFAULT_TIMEOUT = 30.0

DEFAULTS = {
    "catalog": {
        "base_url": DEFAULT_CATALOG_URL,
        "files": list(DEFAULT_CATALOG_FILES),
    },
    "overrides": {
        "base_url": DEFAULT_OVERRIDES_URL,
    },
    "http": {
        "timeout": DEFAULT_TIMEOUT,
    },
}


def with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


@dataclass
class CatalogConfig:
    """Where to fetch the catalog and override data from."""
    base_url: str = DEFAULT_CATALOG_URL
    files: list[str] = field(default_factory=lambda: list(DEFAULT_CATALOG_FILES))
    overrides_url: str = DEFAULT_OVERRIDES_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("catalog base_url must not be empty")
        if not self.overrides_url:
            raise ValueError("overrides base_url must not be empty")
        if isinstance(self.files, str):
            raise ValueError("catalog files must be a list of file names")
        self.base_url = with_trailing_slash(self.base_url)
        self.overrides_url = with_trailing_slash(self.overrides_url)
        self.files = list(self.files)
        self.timeout = float(self.timeout)

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogConfig":
        """Build from a (merged) configuration mapping; unknown keys are ignored."""
        merged = deep_merge(DEFAULTS, data)
        try:
            return cls(
                base_url=merged["catalog"]["base_url"],
                files=merged["catalog"]["files"],
                overrides_url=merged["overrides"]["base_url"],
                timeout=merged["http"]["timeout"],
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed configuration: {e}") from e


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override dict into base dict.

    - Dicts are merged recursively
    - Lists are replaced by override (file lists are ordered)
    - Scalars are replaced by override
    """
    result = base.copy()

    for key, value in override.items():
        base_val = result.get(key)
        if isinstance(base_val, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_val, value)
        else:
            result[key] = value

    return result


def load_yaml_file(path: Path) -> dict:
    """Load a YAML mapping, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def get_config_dir() -> Path:
    """Get the per-user configuration directory."""
    # Use XDG_CONFIG_HOME if set, otherwise ~/.config
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / "titan-catalog"


def get_config_path() -> Path:
    """Get the path to the per-user config file."""
    return get_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None, include_user: bool = True) -> CatalogConfig:
    """Load configuration with layering.

    Order: DEFAULTS -> per-user config (if ``include_user``) -> ``path``.
    """
    data: dict = {}
    if include_user:
        data = deep_merge(data, load_yaml_file(get_config_path()))
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ValueError(f"Config file not found: {path}")
        data = deep_merge(data, load_yaml_file(path))
    return CatalogConfig.from_dict(data)
