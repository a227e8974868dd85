"""
In-memory caching for the Dobble deck service.
Designs never change for a given order, so they are cached for a long time;
daily decks are keyed by (date, order) and expire after a day.
"""

import time
from collections import Counter, OrderedDict
from typing import Any, Optional, Dict, Iterable
import threading
from dataclasses import dataclass

from .logging_utils import get_logger

logger = get_logger("dobble.cache")

DESIGN_TTL_SECONDS = 7 * 24 * 3600
MAX_ENTRIES = 512


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def expired(self, now: float) -> bool:
        return now > self.expires_at


class MemoryCache:
    """Thread-safe TTL cache; once full, the oldest insert is dropped first"""

    def __init__(self, max_entries: int = MAX_ENTRIES):
        self.max_entries = max_entries
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats: Counter = Counter(hits=0, misses=0, sets=0, evictions=0)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired"""
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None and entry.expired(time.time()):
                del self._cache[key]
                self._stats['evictions'] += 1
                entry = None
            self._stats['hits' if entry is not None else 'misses'] += 1
            return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl_seconds: int = 3600) -> None:
        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = CacheEntry(value=value, expires_at=time.time() + ttl_seconds)
            self._stats['sets'] += 1
            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)
                self._stats['evictions'] += 1

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._stats['evictions'] += len(self._cache)
            self._cache.clear()

    def cleanup_expired(self) -> int:
        """Drop expired entries and return how many were removed"""
        with self._lock:
            now = time.time()
            expired_keys = [key for key, entry in self._cache.items() if entry.expired(now)]
            for key in expired_keys:
                del self._cache[key]
            self._stats['evictions'] += len(expired_keys)
            return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total_requests = self._stats['hits'] + self._stats['misses']
            hit_rate = (self._stats['hits'] / total_requests * 100) if total_requests > 0 else 0
            return {
                **self._stats,
                'total_requests': total_requests,
                'hit_rate_percent': round(hit_rate, 2),
                'cache_size': len(self._cache),
                'max_entries': self.max_entries,
            }


# Global cache instance
_cache = MemoryCache()


def get_cache() -> MemoryCache:
    return _cache


def cache_design(order: int, payload: dict, ttl_seconds: int = DESIGN_TTL_SECONDS) -> None:
    _cache.set(f"design:{order}", payload, ttl_seconds)


def get_cached_design(order: int) -> Optional[dict]:
    return _cache.get(f"design:{order}")


def cache_daily_deck(date: str, order: int, deck: dict, ttl_hours: int = 24) -> None:
    """Cache the daily deck for the given date and order"""
    _cache.set(f"daily_deck:{date}:{order}", deck, ttl_hours * 3600)


def get_cached_daily_deck(date: str, order: int) -> Optional[dict]:
    return _cache.get(f"daily_deck:{date}:{order}")


def cleanup_cache_periodically():
    expired_count = _cache.cleanup_expired()
    if expired_count > 0:
        logger.info("cache_cleanup", extra={"evicted": expired_count})
    return expired_count


def warm_design_cache(orders: Iterable[int]) -> None:
    """Pre-populate cache with designs for the given orders"""
    from . import design

    for order in orders:
        if get_cached_design(order) is None:
            cache_design(order, design.generate_design(order).to_dict())


def warm_cache_for_today_and_recent(order: int) -> None:
    """Warm cache with today's deck and the next few days"""
    from . import game
    from datetime import date, timedelta

    today = date.today()
    for i in range(-1, 3):
        date_str = (today + timedelta(days=i)).isoformat()
        if get_cached_daily_deck(date_str, order) is None:
            cache_daily_deck(date_str, order, game.daily_deck(date_str, order))
