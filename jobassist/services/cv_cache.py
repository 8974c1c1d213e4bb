# jobassist/services/cv_cache.py
"""
Short-lived store for parsed CVs between the parse -> review -> improve steps.

Two backends behind the same async interface:
- MemoryCVCache: in-process, bounded (oldest entry evicted first) and time-expiring
- RedisCVCache:  redis.asyncio, survives restarts and is shared between workers

CV_CACHE_BACKEND selects one; `get_cv_cache()` returns the process-wide instance.
"""

import asyncio
import json
import secrets
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as aioredis

from jobassist.core.config import settings

KEY_PREFIX = "cvcache:"


def new_cache_key() -> str:
    return f"cv_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


class MemoryCVCache:
    def __init__(self, ttl: int, max_entries: int, clock=time.monotonic):
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Dict[str, Any]]]" = OrderedDict()
        self._lock = asyncio.Lock()

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (exp, _) in self._entries.items() if exp <= now]:
            del self._entries[key]

    async def put(self, value: Dict[str, Any]) -> str:
        key = new_cache_key()
        async with self._lock:
            self._purge_expired()
            while len(self._entries) >= self._max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock() + self._ttl, value)
        return key

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            self._purge_expired()
            entry = self._entries.get(key)
            return entry[1] if entry else None

    async def pop(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            self._purge_expired()
            entry = self._entries.pop(key, None)
            return entry[1] if entry else None

    def __len__(self) -> int:
        return len(self._entries)


class RedisCVCache:
    def __init__(self, url: Optional[str] = None, ttl: int = 3600, client=None):
        self._url = url or settings.REDIS_URL
        self._ttl = ttl
        self._client = client

    async def _get_client(self):
        if self._client is None:
            self._client = aioredis.from_url(self._url, decode_responses=True)
        return self._client

    async def put(self, value: Dict[str, Any]) -> str:
        client = await self._get_client()
        key = new_cache_key()
        await client.set(KEY_PREFIX + key, json.dumps(value), ex=self._ttl)
        return key

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        client = await self._get_client()
        val = await client.get(KEY_PREFIX + key)
        return json.loads(val) if val is not None else None

    async def pop(self, key: str) -> Optional[Dict[str, Any]]:
        client = await self._get_client()
        val = await client.getdel(KEY_PREFIX + key)
        return json.loads(val) if val is not None else None


_cache = None


def get_cv_cache():
    global _cache
    if _cache is None:
        if settings.CV_CACHE_BACKEND == "redis":
            _cache = RedisCVCache(settings.REDIS_URL, ttl=settings.CV_CACHE_TTL_SEC)
        else:
            _cache = MemoryCVCache(ttl=settings.CV_CACHE_TTL_SEC, max_entries=settings.CV_CACHE_MAX_ENTRIES)
    return _cache
