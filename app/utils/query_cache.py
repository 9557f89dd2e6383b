"""In-memory TTL cache for read endpoints.

Keys are namespaced strings such as ``businesses`` or ``business:{id}``;
writes invalidate by prefix so every view derived from a business is
refreshed together. Thread-safe, per-process, and easy to swap for Redis
while keeping the same interface.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from app.core.config import settings

logger = logging.getLogger(__name__)

QueryKey = str | Sequence[str]

BUSINESSES_KEY = "businesses"
DASHBOARD_KEY = "dashboard"
MODULES_KEY = "modules"


@dataclass
class CacheItem:
    """Container for cached values with the time they were stored."""

    value: Any
    stored_at: float


def build_query_key(key: QueryKey) -> str:
    """Normalize a key: strings pass through, sequences are joined with ``:``.

    Examples:
        >>> build_query_key("businesses")
        'businesses'
        >>> build_query_key(["business", "42"])
        'business:42'
    """
    if isinstance(key, str):
        return key
    return ":".join(str(part) for part in key)


class QueryCache:
    """Thread-safe, in-memory TTL cache with LRU eviction.

    Attributes:
        ttl_seconds: Time-to-live applied to all entries.
        max_entries: Maximum number of cached items (None for unlimited).
        enabled: When False every lookup misses and nothing is stored.
    """

    def __init__(
        self,
        ttl_seconds: float = 30,
        max_entries: int | None = 512,
        *,
        enabled: bool = True,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._enabled = enabled
        self._clock = clock
        self._store: OrderedDict[str, CacheItem] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._invalidations = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"QueryCache(ttl_seconds={self._ttl}, max_entries={self._max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses})"
        )

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get(self, key: QueryKey) -> Any | None:
        """Return the cached value while it is fresh, otherwise None."""

        cache_key = build_query_key(key)
        if not self._enabled:
            return None

        with self._lock:
            item = self._store.get(cache_key)
            if item is None:
                self._misses += 1
                logger.debug("query_cache.miss", extra={"cache_key": cache_key, "reason": "not_found"})
                return None

            if self._is_expired(item):
                self._evict_single(cache_key)
                self._misses += 1
                logger.debug("query_cache.miss", extra={"cache_key": cache_key, "reason": "expired"})
                return None

            self._hits += 1
            self._store.move_to_end(cache_key)
            logger.debug("query_cache.hit", extra={"cache_key": cache_key})
            return item.value

    def set(self, key: QueryKey, value: Any) -> None:
        cache_key = build_query_key(key)
        if not self._enabled:
            return

        with self._lock:
            self._store[cache_key] = CacheItem(value=value, stored_at=self._now())
            self._store.move_to_end(cache_key)
            self._evict_if_over_capacity_locked()

    def invalidate(self, key: QueryKey) -> bool:
        """Drop a single key; returns whether it was cached."""

        cache_key = build_query_key(key)
        with self._lock:
            removed = self._store.pop(cache_key, None) is not None
            if removed:
                self._invalidations += 1
            return removed

    def invalidate_prefix(self, prefix: QueryKey) -> int:
        """Drop every key starting with ``prefix`` and return how many were removed."""

        cache_prefix = build_query_key(prefix)
        with self._lock:
            doomed = [k for k in self._store if k.startswith(cache_prefix)]
            for key in doomed:
                del self._store[key]
            self._invalidations += len(doomed)

        if doomed:
            logger.debug("query_cache.invalidated", extra={"prefix": cache_prefix, "count": len(doomed)})
        return len(doomed)

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._invalidations = 0

    def stats(self) -> dict[str, int | float | bool | None]:
        """Return lightweight cache metrics without exposing values."""

        with self._lock:
            return {
                "enabled": self._enabled,
                "ttl_seconds": self._ttl,
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "invalidations": self._invalidations,
            }

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value or await ``loader`` and cache its result.

        Exceptions from ``loader`` propagate and nothing is cached.
        """

        cached = self.get(key)
        if cached is not None:
            return cached

        value = await loader()
        self.set(key, value)
        return value

    def _evict_single(self, key: str) -> None:
        if key in self._store:
            self._store.pop(key, None)
            self._evictions += 1

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)
            self._evictions += 1

    def _is_expired(self, item: CacheItem) -> bool:
        return self._now() - item.stored_at >= self._ttl


def business_key(business_id: str) -> str:
    return build_query_key(["business", business_id])


def business_stats_key(business_id: str) -> str:
    return build_query_key(["business-stats", business_id])


def business_users_key(business_id: str) -> str:
    return build_query_key(["business-users", business_id])


def business_modules_key(business_id: str) -> str:
    return build_query_key(["business-modules", business_id])


def invalidate_business_queries(cache: QueryCache, business_id: str | None = None) -> None:
    """Invalidate every cached view derived from a business.

    Args:
        cache: Cache to invalidate.
        business_id: Business whose detail views changed; list views and the
            dashboard are always invalidated.
    """
    if business_id:
        cache.invalidate_prefix(business_key(business_id))
        cache.invalidate_prefix(business_stats_key(business_id))
        cache.invalidate_prefix(business_users_key(business_id))
        cache.invalidate_prefix(business_modules_key(business_id))
    cache.invalidate_prefix(BUSINESSES_KEY)
    cache.invalidate_prefix(DASHBOARD_KEY)


_query_cache: QueryCache | None = None
_query_cache_config: tuple[int, int, bool] | None = None


def get_query_cache() -> QueryCache:
    """Return the process-wide query cache.

    The cache is rebuilt, and therefore emptied, when its settings change.
    """

    global _query_cache, _query_cache_config

    config = (
        settings.app.query_cache_ttl_seconds,
        settings.app.query_cache_max_entries,
        settings.app.query_cache_enabled,
    )

    if _query_cache is None or _query_cache_config != config:
        _query_cache = QueryCache(
            ttl_seconds=settings.app.query_cache_ttl_seconds,
            max_entries=settings.app.query_cache_max_entries,
            enabled=settings.app.query_cache_enabled,
        )
        _query_cache_config = config
        logger.debug("query_cache.built", extra={"config": config})

    return _query_cache
