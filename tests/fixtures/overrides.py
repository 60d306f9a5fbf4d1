"""
Factory functions for override tables and mocked HTTP.

Routes map full URLs to what the mock transport answers:
  - str: 200 with that text body
  - dict/list: 200 with that JSON body
  - int: that status with an empty body
  - Exception instance: raised from the transport
"""

import asyncio
import json
from typing import Optional
from urllib.parse import unquote

import httpx

CATALOG_URL = "https://catalog.test/data/"
OVERRIDES_URL = "https://overrides.test/"
ENGINE_KILL_URL = OVERRIDES_URL + "engine-kill/"


def make_chassis_overrides(**overrides) -> dict:
    data = {
        "reaver": {
            "plasmaReactorMax": 6,
            "voidShieldsMax": 4,
            "voidShieldSaves": ["3+", "4+", "4+", "X"],
            "specialRules": ["Reaver Protocols: The Reaver may re-roll one hit."],
        },
        "warhound": {"plasmaReactorMax": 5, "voidShieldsMax": 2},
        "warmaster": {"plasmaReactorMax": 8, "voidShieldsMax": 8},
    }
    data.update(overrides)
    return data


def make_damage_location(max: int, modifiers=None, **extra) -> dict:
    location = {
        "max": max,
        "armorRolls": {"direct": "11-13", "devastating": "14-15", "critical": "16+"},
    }
    if modifiers is not None:
        location["modifiers"] = modifiers
    location.update(extra)
    return location


def make_damage_tracks() -> dict:
    return {
        "reaver": {
            "head": make_damage_location(6, modifiers=[1, 2, 3]),
            "body": make_damage_location(8, modifiers=[1, 1, 2, 3]),
            "legs": make_damage_location(7),
        },
    }


def make_weapon_metadata() -> dict:
    return {
        "Volcano Cannon|arm": {
            "repairRoll": "4+",
            "disabledRollLines": ["1-2: Disabled", "3+: Ok"],
        },
    }


def make_critical_effects() -> dict:
    return {
        "head": [{"level": 1, "effects": ["Head hit"]}],
        "body": [{"level": 1, "effects": ["Body hit"]}],
        "legs": [{"level": 1, "effects": ["Legs hit"]}],
    }


def override_routes(**tables) -> dict:
    """Routes for every override table; pass ``name=value`` to replace one."""
    defaults = {
        "chassis-overrides": make_chassis_overrides(),
        "chassis-aliases": {},
        "damage-tracks": make_damage_tracks(),
        "weapon-metadata": make_weapon_metadata(),
        "critical-effects": make_critical_effects(),
    }
    for key, value in tables.items():
        defaults[key.replace("_", "-")] = value
    return {f"{ENGINE_KILL_URL}{name}.json": value for name, value in defaults.items()}


def catalog_routes(**files) -> dict:
    """``catalog_routes(**{"Battlegroup.cat": text})`` -> URL routes."""
    return {CATALOG_URL + name: body for name, body in files.items()}


def _respond(answer) -> httpx.Response:
    if isinstance(answer, Exception):
        raise answer
    if isinstance(answer, int):
        return httpx.Response(answer)
    if isinstance(answer, (dict, list)):
        return httpx.Response(200, content=json.dumps(answer).encode("utf-8"),
                              headers={"content-type": "application/json"})
    return httpx.Response(200, text=answer)


def make_transport(
    routes: dict, calls: Optional[list] = None, delay: float = 0.0, delay_prefix: str = ""
) -> httpx.MockTransport:
    """MockTransport serving ``routes``; unknown URLs are 404.

    ``delay`` applies only to URLs starting with ``delay_prefix``.
    """

    async def handler(request: httpx.Request) -> httpx.Response:
        url = unquote(str(request.url))
        if calls is not None:
            calls.append(url)
        if delay and url.startswith(delay_prefix):
            await asyncio.sleep(delay)
        if url not in routes:
            return httpx.Response(404)
        return _respond(routes[url])

    return httpx.MockTransport(handler)


def make_client(routes: dict, calls: Optional[list] = None, delay: float = 0.0) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=make_transport(routes, calls, delay))
