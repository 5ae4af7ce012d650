"""
utils/cache.py
---------------

In‑process cache with TTL support for WooCommerce API responses.

Each entry records when it was inserted and how long it lives.  Expired
entries are evicted lazily when they are read; a periodic :meth:`sweep`
started by the application lifespan also removes entries nobody asks
for again, so the table cannot grow without bound.

The store is a plain dict shared by every request handled by one
process.  None of its methods await, so under asyncio each operation
runs to completion without interleaving.  There is no cross‑process
sharing: with several uvicorn workers every worker keeps its own copy.

:meth:`CacheStore.get_or_fetch` implements cache‑aside on top of the
store.  When ``single_flight`` is enabled, concurrent misses on the same
key share one in‑flight producer instead of each calling the upstream.
"""

from __future__ import annotations

import asyncio
import json
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from woodash.logging_config import logger

# Returned by ``get`` on a miss when no other default is given by callers
# that need to tell a cached ``None`` or ``[]`` apart from a miss.
MISS = object()

Producer = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    value: Any
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl


class CacheStore:
    """In‑memory cache with time to live (TTL).

    :param clock: callable returning the current time in seconds.  Tests
        pass a fake clock to simulate expiry without sleeping.
    :param single_flight: share a single producer call between concurrent
        misses on the same key in :meth:`get_or_fetch`.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, single_flight: bool = True) -> None:
        self._store: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        self._clock = clock
        self.single_flight = single_flight

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return self.get(key, MISS) is not MISS

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value for ``ttl`` seconds, replacing any existing entry.

        :raises ValueError: if ``ttl`` is not positive
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        self._store[key] = CacheEntry(value=value, inserted_at=self._clock(), ttl=ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if absent or expired.

        An expired entry is removed as a side effect.
        """
        entry = self._store.get(key)
        if entry is None:
            return default
        if entry.is_expired(self._clock()):
            self._store.pop(key, None)
            return default
        return entry.value

    def invalidate(self, pattern: Optional[str] = None, *, regex: bool = False) -> int:
        """Remove entries and return how many were dropped.

        With no pattern every entry is cleared.  Otherwise keys containing
        ``pattern`` are removed; with ``regex=True`` the pattern is applied
        with :func:`re.search` instead of a substring test.
        """
        if not pattern:
            removed = len(self._store)
            self._store.clear()
            return removed
        if regex:
            compiled = re.compile(pattern)
            matches: Callable[[str], bool] = lambda key: compiled.search(key) is not None
        else:
            matches = lambda key: pattern in key
        doomed = [key for key in self._store if matches(key)]
        for key in doomed:
            del self._store[key]
        return len(doomed)

    def clear(self) -> None:
        self._store.clear()

    def sweep(self) -> int:
        """Drop every expired entry regardless of access pattern."""
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        """Return the current size and keys, for debugging only."""
        return {"size": len(self._store), "keys": list(self._store.keys())}

    async def get_or_fetch(self, key: str, producer: Producer, ttl: float) -> Tuple[Any, bool]:
        """Cache‑aside lookup.

        Returns ``(value, from_cache)``.  On a miss ``producer`` is awaited
        and its result stored under ``key`` for ``ttl`` seconds.  If the
        producer raises, the exception propagates and nothing is stored.
        """
        value = self.get(key, MISS)
        if value is not MISS:
            logger.debug(json.dumps({"event": "cache_hit", "key": key}))
            return value, True

        logger.debug(json.dumps({"event": "cache_miss", "key": key}))
        if not self.single_flight:
            value = await producer()
            self.set(key, value, ttl)
            return value, False

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._produce(key, producer, ttl))
            self._inflight[key] = pending
            pending.add_done_callback(lambda fut: self._release(key, fut))
        else:
            logger.debug(json.dumps({"event": "cache_join_inflight", "key": key}))
        # shield: a cancelled waiter must not cancel the fetch others wait on
        return await asyncio.shield(pending), False

    async def _produce(self, key: str, producer: Producer, ttl: float) -> Any:
        value = await producer()
        self.set(key, value, ttl)
        return value

    def _release(self, key: str, fut: asyncio.Future) -> None:
        if self._inflight.get(key) is fut:
            del self._inflight[key]
        # mark the exception retrieved when every waiter was cancelled
        if not fut.cancelled():
            fut.exception()


async def with_cache(cache: CacheStore, key: str, producer: Producer, ttl: float) -> Any:
    """Return the cached value for ``key`` or compute and store it."""
    value, _ = await cache.get_or_fetch(key, producer, ttl)
    return value


def _store_segment(store_url: str) -> str:
    # percent-encoded so the segment holds no ":" even when the URL has a port
    return quote(store_url, safe="")


def build_cache_key(entity: str, store_url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a deterministic cache key ``entity:store:filters``.

    Parameters are sorted by name and ``None`` values are dropped, so two
    requests with the same effective filters share an entry.  The store
    URL is percent-encoded, which keeps the store segment free of colons
    and lets :func:`keys_for_store` and :func:`invalidate_store` match it
    exactly.
    """
    params = params or {}
    serialized = "&".join(
        f"{name}={params[name]}" for name in sorted(params) if params[name] is not None
    )
    return f"{entity}:{_store_segment(store_url)}:{serialized}"


def _store_pattern(store_url: str, entity: Optional[str] = None) -> str:
    prefix = re.escape(entity) if entity else "[^:]+"
    return f"^{prefix}:{re.escape(_store_segment(store_url))}:"


def keys_for_store(cache: CacheStore, store_url: str) -> List[str]:
    pattern = re.compile(_store_pattern(store_url))
    return [key for key in cache.stats()["keys"] if pattern.match(key)]


def invalidate_store(cache: CacheStore, store_url: str, entity: Optional[str] = None) -> int:
    """Drop one store's entries, optionally for a single entity only."""
    return cache.invalidate(_store_pattern(store_url, entity), regex=True)
