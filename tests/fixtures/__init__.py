"""Test fixtures for titan-catalog tests."""

from .catalog import catalogue, chassis_entry, entry, entry_link, group, groups, reaver_catalogue, weapon_entry
from .overrides import (
    CATALOG_URL,
    OVERRIDES_URL,
    catalog_routes,
    make_client,
    make_transport,
    override_routes,
)

__all__ = [
    "catalogue",
    "chassis_entry",
    "entry",
    "entry_link",
    "group",
    "groups",
    "reaver_catalogue",
    "weapon_entry",
    "CATALOG_URL",
    "OVERRIDES_URL",
    "catalog_routes",
    "make_client",
    "make_transport",
    "override_routes",
]
