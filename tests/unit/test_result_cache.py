"""Tests for the load-once result cache."""

import asyncio

import pytest

from titan_catalog.cache import CacheStatus, CatalogCache, ResultCache
from titan_catalog.config import CatalogConfig


class CountingLoader:
    """Async loader returning 1, 2, 3... with optional per-call delays."""

    def __init__(self, delays=(), error=None):
        self.calls = 0
        self.delays = list(delays)
        self.error = error

    async def __call__(self):
        self.calls += 1
        call = self.calls
        delay = self.delays[call - 1] if call <= len(self.delays) else 0
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return call


class TestLoadOnce:
    def test_concurrent_callers_share_one_load(self):
        loader = CountingLoader(delays=[0.01])
        cache = ResultCache(loader, "titans")

        async def run():
            return await asyncio.gather(*(cache.load_once() for _ in range(5)))

        assert asyncio.run(run()) == [1] * 5
        assert loader.calls == 1
        assert cache.load_count == 1
        assert cache.status is CacheStatus.LOADED

    def test_loaded_result_is_reused(self):
        loader = CountingLoader()
        cache = ResultCache(loader)

        async def run():
            first = await cache.load_once()
            second = await cache.load_once()
            return first, second

        assert asyncio.run(run()) == (1, 1)
        assert loader.calls == 1

    def test_status_is_loading_before_first_suspension(self):
        cache = ResultCache(CountingLoader(delays=[0.01]))
        seen = []

        async def run():
            pending = asyncio.ensure_future(cache.load_once())
            await asyncio.sleep(0)
            seen.append(cache.status)
            await pending

        asyncio.run(run())
        assert seen == [CacheStatus.LOADING]

    def test_error_is_replayed(self):
        loader = CountingLoader(error=ValueError("bad catalog"))
        cache = ResultCache(loader)

        async def run():
            for _ in range(2):
                with pytest.raises(ValueError, match="bad catalog"):
                    await cache.load_once()

        asyncio.run(run())
        assert loader.calls == 1
        snapshot = cache.snapshot()
        assert snapshot.status is CacheStatus.ERROR
        assert isinstance(snapshot.error, ValueError)

    def test_cancelled_caller_does_not_cancel_load(self):
        loader = CountingLoader(delays=[0.01])
        cache = ResultCache(loader)

        async def run():
            pending = asyncio.ensure_future(cache.load_once())
            await asyncio.sleep(0)
            pending.cancel()
            return await cache.load_once()

        assert asyncio.run(run()) == 1
        assert loader.calls == 1


class TestReload:
    def test_force_reload_after_error(self):
        loader = CountingLoader(error=RuntimeError("offline"))
        cache = ResultCache(loader)

        async def run():
            with pytest.raises(RuntimeError):
                await cache.load_once()
            loader.error = None
            return await cache.force_reload()

        assert asyncio.run(run()) == 2
        assert cache.status is CacheStatus.LOADED

    def test_superseded_load_does_not_overwrite(self):
        loader = CountingLoader(delays=[0.02])
        cache = ResultCache(loader)

        async def run():
            stale = asyncio.ensure_future(cache.load_once())
            await asyncio.sleep(0)
            fresh = await cache.force_reload()
            return await stale, fresh

        stale, fresh = asyncio.run(run())
        assert (stale, fresh) == (1, 2)
        snapshot = cache.snapshot()
        assert snapshot.status is CacheStatus.LOADED
        assert snapshot.result == 2

    def test_superseded_error_is_ignored(self):
        cache = ResultCache(CountingLoader())
        failing = CountingLoader(delays=[0.02], error=ValueError("late"))

        async def run():
            cache._loader = failing
            stale = asyncio.ensure_future(cache.load_once())
            await asyncio.sleep(0)
            cache._loader = CountingLoader()
            fresh = await cache.force_reload()
            with pytest.raises(ValueError):
                await stale
            return fresh

        assert asyncio.run(run()) == 1
        assert cache.status is CacheStatus.LOADED

    def test_reset_returns_to_idle(self):
        cache = ResultCache(CountingLoader())
        asyncio.run(cache.load_once())
        before = cache.snapshot().generation
        cache.reset()
        snapshot = cache.snapshot()
        assert snapshot.status is CacheStatus.IDLE
        assert snapshot.result is None
        assert snapshot.generation > before


class TestCatalogCache:
    def test_one_cache_per_concept(self):
        cache = CatalogCache(CatalogConfig())
        assert list(cache.caches) == ["titans", "formations", "legions", "upgrades", "traits"]
        assert all(c.status is CacheStatus.IDLE for c in cache.caches.values())

    def test_configure_resets_everything(self):
        cache = CatalogCache(CatalogConfig())
        cache.legions._entry.status = CacheStatus.LOADED
        config = CatalogConfig(base_url="https://mirror.test/bsdata")
        cache.configure(config)
        assert cache.config.base_url == "https://mirror.test/bsdata/"
        assert cache.legions.status is CacheStatus.IDLE
