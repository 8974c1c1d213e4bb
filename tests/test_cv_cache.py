# tests/test_cv_cache.py
import json

import pytest

from jobassist.core.config import settings
from jobassist.services import cv_cache
from jobassist.services.cv_cache import KEY_PREFIX, MemoryCVCache, RedisCVCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex

    async def get(self, key):
        return self.store.get(key)

    async def getdel(self, key):
        return self.store.pop(key, None)


def test_cache_key_format():
    key = cv_cache.new_cache_key()
    prefix, ms, suffix = key.split("_")
    assert prefix == "cv"
    assert ms.isdigit()
    assert len(suffix) == 12


@pytest.mark.asyncio
async def test_memory_get_keeps_pop_consumes():
    cache = MemoryCVCache(ttl=60, max_entries=10)
    key = await cache.put({"summary": "x"})
    assert await cache.get(key) == {"summary": "x"}
    assert await cache.get(key) == {"summary": "x"}
    assert await cache.pop(key) == {"summary": "x"}
    assert await cache.pop(key) is None
    assert await cache.get("cv_0_unknown") is None


@pytest.mark.asyncio
async def test_memory_entries_expire():
    clock = FakeClock()
    cache = MemoryCVCache(ttl=60, max_entries=10, clock=clock)
    key = await cache.put({"a": 1})
    clock.now += 59
    assert await cache.get(key) == {"a": 1}
    clock.now += 2
    assert await cache.get(key) is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memory_bounded_evicts_oldest():
    cache = MemoryCVCache(ttl=60, max_entries=2)
    k1 = await cache.put({"n": 1})
    k2 = await cache.put({"n": 2})
    k3 = await cache.put({"n": 3})
    assert len(cache) == 2
    assert await cache.get(k1) is None
    assert await cache.get(k2) == {"n": 2}
    assert await cache.get(k3) == {"n": 3}


@pytest.mark.asyncio
async def test_redis_backend_roundtrip():
    fake = FakeRedis()
    cache = RedisCVCache(ttl=120, client=fake)
    key = await cache.put({"skills": ["SQL"]})
    assert json.loads(fake.store[KEY_PREFIX + key]) == {"skills": ["SQL"]}
    assert fake.ttls[KEY_PREFIX + key] == 120
    assert await cache.get(key) == {"skills": ["SQL"]}
    assert await cache.pop(key) == {"skills": ["SQL"]}
    assert await cache.get(key) is None


def test_backend_selected_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "CV_CACHE_BACKEND", "redis")
    monkeypatch.setattr(cv_cache, "_cache", None)
    assert isinstance(cv_cache.get_cv_cache(), RedisCVCache)

    monkeypatch.setattr(settings, "CV_CACHE_BACKEND", "memory")
    monkeypatch.setattr(cv_cache, "_cache", None)
    cache = cv_cache.get_cv_cache()
    assert isinstance(cache, MemoryCVCache)
    assert cv_cache.get_cv_cache() is cache
