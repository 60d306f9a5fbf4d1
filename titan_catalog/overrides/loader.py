"""
Override data loader.

Fetches the engine-kill override tables (chassis maxima, damage tracks,
weapon UI metadata, plus the optional alias and critical-effect tables)
from a secondary data repository. Each table may fail on its own; a
failed table is empty and noted in the bundle's warnings.

The first load that resolves at least one table is cached for the life
of the process. Callers arriving while a load is running share it.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import httpx
import jsonschema

from ..config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

ENGINE_KILL_PATH = "engine-kill/"
SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class OverrideTable(Enum):
    """Override resources, by file stem."""
    CHASSIS = "chassis-overrides"
    ALIASES = "chassis-aliases"
    DAMAGE_TRACKS = "damage-tracks"
    WEAPON_METADATA = "weapon-metadata"
    CRITICAL_EFFECTS = "critical-effects"

    @property
    def file_name(self) -> str:
        return f"{self.value}.json"


# Tables whose absence is expected often enough not to warn about
OPTIONAL_TABLES = {OverrideTable.ALIASES, OverrideTable.CRITICAL_EFFECTS}


@dataclass
class OverrideBundle:
    """All override tables from one load; missing tables are empty."""
    chassis: dict[str, dict] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    damage_tracks: dict[str, dict] = field(default_factory=dict)
    weapon_metadata: dict[str, dict] = field(default_factory=dict)
    critical_effects: dict[str, list] = field(default_factory=dict)
    loaded: frozenset = frozenset()
    warnings: list[str] = field(default_factory=list)

    @property
    def any_loaded(self) -> bool:
        return bool(self.loaded)


def load_schema(table: OverrideTable) -> dict:
    """Load the JSON schema for an override table."""
    schema_path = SCHEMAS_DIR / f"{table.value}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")
    with open(schema_path) as f:
        return json.load(f)


def overrides_prefix(base_url: str) -> str:
    base = base_url if base_url.endswith("/") else base_url + "/"
    return base + ENGINE_KILL_PATH


def weapon_metadata_key(name: str, mount: str) -> str:
    """Lookup key for weapon metadata: ``"<name>|<mount>"``, lowercased."""
    return f"{name.strip().lower()}|{mount.strip().lower()}"


def _normalize_weapon_keys(table: dict[str, dict]) -> dict[str, dict]:
    out = {}
    for key, value in table.items():
        name, _, mount = key.rpartition("|")
        normalized = weapon_metadata_key(name, mount) if name else key.strip().lower()
        out.setdefault(normalized, value)
    return out


async def fetch_table(
    client: httpx.AsyncClient, base_url: str, table: OverrideTable
) -> tuple[Optional[Any], Optional[str]]:
    """(data, problem). Exactly one of the two is None.

    Non-2xx, undecodable and schema-invalid tables are problems; transport
    errors propagate.
    """
    url = overrides_prefix(base_url) + table.file_name
    response = await client.get(url)
    if not response.is_success:
        return None, f"Override table {table.file_name} unavailable ({response.status_code})"
    try:
        data = response.json()
    except ValueError:
        return None, f"Override table {table.file_name} is not valid JSON"
    try:
        jsonschema.validate(instance=data, schema=load_schema(table))
    except jsonschema.ValidationError as e:
        return None, f"Override table {table.file_name} failed validation: {e.message}"
    return data, None


async def fetch_bundle(client: httpx.AsyncClient, base_url: str) -> OverrideBundle:
    """Fetch every override table concurrently."""
    tables = list(OverrideTable)
    results = await asyncio.gather(*(fetch_table(client, base_url, t) for t in tables))

    data: dict[OverrideTable, Any] = {}
    warnings = []
    for table, (value, problem) in zip(tables, results):
        if problem is None:
            data[table] = value
            continue
        if table in OPTIONAL_TABLES:
            logger.debug(problem)
            continue
        logger.warning(problem)
        warnings.append(problem)

    bundle = OverrideBundle(
        chassis=data.get(OverrideTable.CHASSIS, {}),
        aliases=data.get(OverrideTable.ALIASES, {}),
        damage_tracks=data.get(OverrideTable.DAMAGE_TRACKS, {}),
        weapon_metadata=_normalize_weapon_keys(data.get(OverrideTable.WEAPON_METADATA, {})),
        critical_effects=data.get(OverrideTable.CRITICAL_EFFECTS, {}),
        loaded=frozenset(t.value for t in data),
        warnings=warnings,
    )
    logger.info(
        "Loaded override tables from %s: %s",
        base_url,
        ", ".join(sorted(bundle.loaded)) or "none",
    )
    return bundle


class OverrideLoader:
    """Process-wide override cache with a single shared in-flight load.

    Not keyed by URL: once a load succeeds, later calls get that bundle
    whatever base URL they pass, until :meth:`clear`.
    """

    def __init__(self):
        self._cached: Optional[OverrideBundle] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def cached(self) -> Optional[OverrideBundle]:
        return self._cached

    async def load(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> OverrideBundle:
        """Cached bundle, or the result of the shared in-flight fetch.

        Without ``client`` the fetch opens and closes its own client. An
        injected client must stay open until every caller sharing the load
        has its result.
        """
        if self._cached is not None:
            return self._cached
        task = self._in_flight
        if task is None or task.get_loop() is not asyncio.get_running_loop():
            task = asyncio.ensure_future(self._fetch(base_url, client, timeout))
            task.add_done_callback(self._finish)
            self._in_flight = task
        return await asyncio.shield(task)

    async def _fetch(
        self, base_url: str, client: Optional[httpx.AsyncClient], timeout: float
    ) -> OverrideBundle:
        if client is not None:
            return await fetch_bundle(client, base_url)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
            return await fetch_bundle(owned, base_url)

    def _finish(self, task: asyncio.Task) -> None:
        # A load superseded by clear() never populates the cache
        if self._in_flight is not task:
            return
        self._in_flight = None
        if task.cancelled() or task.exception() is not None:
            return
        bundle = task.result()
        # A load where every table failed is retried on the next call
        if bundle.any_loaded and self._cached is None:
            self._cached = bundle

    def clear(self) -> None:
        self._cached = None
        self._in_flight = None


default_loader = OverrideLoader()


async def load_overrides(base_url: str, client: Optional[httpx.AsyncClient] = None) -> OverrideBundle:
    """Load overrides through the process-wide loader."""
    return await default_loader.load(base_url, client)


def clear_override_cache() -> None:
    """Forget the cached bundle so the next load fetches again."""
    default_loader.clear()
