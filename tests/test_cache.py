import time
from dobble.cache import (
    MemoryCache,
    cache_daily_deck,
    cache_design,
    cleanup_cache_periodically,
    get_cache,
    get_cached_daily_deck,
    get_cached_design,
    warm_cache_for_today_and_recent,
    warm_design_cache,
)
from dobble import game


def test_memory_cache_set_get_and_expire():
    c = MemoryCache()
    c.set('k', 'v', ttl_seconds=1)
    assert c.get('k') == 'v'
    time.sleep(1.1)
    assert c.get('k') is None
    assert c.cleanup_expired() >= 0
    stats = c.get_stats()
    assert stats['hits'] == 1 and stats['misses'] == 1 and 'cache_size' in stats


def test_memory_cache_delete_and_clear():
    c = MemoryCache()
    c.set('a', 1)
    c.set('b', 2)
    assert c.delete('a') is True
    assert c.delete('a') is False
    c.clear()
    assert c.get('b') is None
    assert c.get_stats()['cache_size'] == 0


def test_cleanup_removes_expired_entries():
    c = get_cache()
    c.set('short', 1, ttl_seconds=0)
    time.sleep(0.01)
    assert cleanup_cache_periodically() == 1


def test_design_and_daily_helpers():
    cache_design(3, {"order": 3})
    assert get_cached_design(3) == {"order": 3}
    assert get_cached_design(5) is None

    deck = {"date": "2099-01-01", "cards": [[0, 1, 2]]}
    cache_daily_deck("2099-01-01", 2, deck)
    assert get_cached_daily_deck("2099-01-01", 2) == deck
    assert get_cached_daily_deck("2099-01-01", 3) is None


def test_warming():
    warm_design_cache([2, 3])
    assert get_cached_design(2)["symbol_count"] == 7
    assert get_cached_design(3)["symbol_count"] == 13

    warm_cache_for_today_and_recent(2)
    today = game.today_str()
    assert get_cached_daily_deck(today, 2) == game.daily_deck(today, 2)


def test_memory_cache_evicts_oldest_when_full():
    c = MemoryCache(max_entries=2)
    c.set('a', 1)
    c.set('b', 2)
    c.set('a', 10)
    c.set('c', 3)
    assert c.get('b') is None
    assert c.get('a') == 10 and c.get('c') == 3
    stats = c.get_stats()
    assert stats['cache_size'] == 2 and stats['max_entries'] == 2
    assert stats['evictions'] == 1
