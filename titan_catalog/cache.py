"""
Result cache for catalog loads.

One :class:`ResultCache` per concept, each a small state machine:

    idle --load_once--> loading --ok--> loaded
                               \\--error--> error

``load_once`` returns the cached result, joins the running load, replays
the stored error, or starts a load, in that order of preference.
``force_reload`` drops whatever is stored and starts over.

Every load is tagged with a generation number. A load that finishes
after a reset belongs to an older generation and does not touch the
entry, so a stale result can never overwrite a fresher one.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import httpx

from .config import CatalogConfig
from .extract.pipeline import (
    load_formation_templates,
    load_legion_templates,
    load_titan_templates,
    load_trait_templates,
    load_upgrade_templates,
)
from .overrides import OverrideLoader

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class CacheEntry:
    """Snapshot of one concept's cache state."""
    status: CacheStatus = CacheStatus.IDLE
    result: Any = None
    error: Optional[BaseException] = None
    generation: int = 0


class ResultCache(Generic[T]):
    """Load-once memoization of an async loader."""

    def __init__(self, loader: Callable[[], Awaitable[T]], name: str = ""):
        self._loader = loader
        self.name = name or getattr(loader, "__name__", "result")
        self._generation = 0
        self._entry = CacheEntry()
        self._task: Optional[asyncio.Task] = None
        self.load_count = 0

    @property
    def status(self) -> CacheStatus:
        return self._entry.status

    def snapshot(self) -> CacheEntry:
        return CacheEntry(
            status=self._entry.status,
            result=self._entry.result,
            error=self._entry.error,
            generation=self._entry.generation,
        )

    async def load_once(self) -> T:
        entry = self._entry
        if entry.status is CacheStatus.LOADED:
            return entry.result
        if entry.status is CacheStatus.ERROR:
            raise entry.error
        task = self._task
        if entry.status is CacheStatus.LOADING and task is not None:
            if task.get_loop() is asyncio.get_running_loop():
                return await asyncio.shield(task)
            # Left over from an event loop that has since closed
            self.reset()
        return await asyncio.shield(self._start())

    async def force_reload(self) -> T:
        """Discard any stored result or error and load again."""
        self.reset()
        return await self.load_once()

    def reset(self) -> None:
        """Back to idle. A load still running keeps running but is ignored."""
        self._generation += 1
        self._entry = CacheEntry(generation=self._generation)
        self._task = None

    def _start(self) -> asyncio.Task:
        # Status is set before the first suspension point so concurrent
        # callers see LOADING and join this task.
        self._generation += 1
        generation = self._generation
        self._entry = CacheEntry(status=CacheStatus.LOADING, generation=generation)
        self._task = asyncio.ensure_future(self._run(generation))
        self.load_count += 1
        logger.debug("Starting %s load (generation %d)", self.name, generation)
        return self._task

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int) -> T:
        try:
            result = await self._loader()
        except asyncio.CancelledError:
            if self._is_current(generation):
                self.reset()
            raise
        except Exception as e:
            if self._is_current(generation):
                logger.warning("%s load failed: %s", self.name, e)
                self._entry = CacheEntry(status=CacheStatus.ERROR, error=e, generation=generation)
                self._task = None
            raise
        if self._is_current(generation):
            self._entry = CacheEntry(status=CacheStatus.LOADED, result=result, generation=generation)
            self._task = None
        else:
            logger.debug("Discarding superseded %s load (generation %d)", self.name, generation)
        return result


class CatalogCache:
    """Per-concept result caches sharing one configuration."""

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        overrides: Optional[OverrideLoader] = None,
    ):
        self.config = config or CatalogConfig()
        self.client = client
        self.overrides = overrides
        self.titans = ResultCache(self._load_titans, "titans")
        self.formations = ResultCache(
            lambda: load_formation_templates(self.config, client=self.client), "formations"
        )
        self.legions = ResultCache(
            lambda: load_legion_templates(self.config, client=self.client), "legions"
        )
        self.upgrades = ResultCache(
            lambda: load_upgrade_templates(self.config, client=self.client), "upgrades"
        )
        self.traits = ResultCache(
            lambda: load_trait_templates(self.config, client=self.client), "traits"
        )

    async def _load_titans(self):
        return await load_titan_templates(self.config, client=self.client, overrides=self.overrides)

    @property
    def caches(self) -> dict[str, ResultCache]:
        return {
            "titans": self.titans,
            "formations": self.formations,
            "legions": self.legions,
            "upgrades": self.upgrades,
            "traits": self.traits,
        }

    def configure(
        self,
        config: CatalogConfig,
        client: Optional[httpx.AsyncClient] = None,
        overrides: Optional[OverrideLoader] = None,
    ) -> None:
        """Switch sources; every concept goes back to idle."""
        self.config = config
        self.client = client
        self.overrides = overrides
        self.reset()

    def reset(self) -> None:
        for cache in self.caches.values():
            cache.reset()


catalog_cache = CatalogCache()
