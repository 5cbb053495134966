"""Tests for the TTL/LRU response cache."""

from __future__ import annotations

import pytest

from grok_mcp.cache import ResponseCache, make_key
from grok_mcp.foundation.types import ChatMessage, ChatRequest


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def test_get_set_and_miss() -> None:
    cache: ResponseCache[str] = ResponseCache()
    cache.set("chat:a", "result")
    assert cache.get("chat:a") == "result"
    assert cache.get("chat:b") is None
    assert "chat:a" in cache and len(cache) == 1


def test_entries_expire_after_ttl(clock: FakeClock) -> None:
    cache: ResponseCache[str] = ResponseCache(ttl=300, clock=clock)
    cache.set("k", "v")
    clock.now += 299
    assert cache.get("k") == "v"
    clock.now += 1
    assert cache.get("k") is None
    assert len(cache) == 0  # expired entry removed on access


def test_per_entry_ttl(clock: FakeClock) -> None:
    cache: ResponseCache[str] = ResponseCache(ttl=300, clock=clock)
    cache.set("short", "v", ttl=1)
    clock.now += 2
    assert cache.get("short") is None


def test_least_recently_used_evicted_first() -> None:
    cache: ResponseCache[int] = ResponseCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1  # a is now most recent
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_overwrite_does_not_grow() -> None:
    cache: ResponseCache[int] = ResponseCache(max_entries=2)
    cache.set("a", 1)
    cache.set("a", 2)
    cache.set("b", 3)
    assert len(cache) == 2
    assert cache.get("a") == 2


def test_invalidate_and_clear() -> None:
    cache: ResponseCache[int] = ResponseCache()
    cache.set("a", 1)
    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0


def test_rejects_zero_capacity() -> None:
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)


def test_make_key_is_order_insensitive() -> None:
    assert make_key("chat", {"a": 1, "b": [1, 2]}) == make_key("chat", {"b": [1, 2], "a": 1})
    assert make_key("chat", {"a": 1}) != make_key("search", {"a": 1})
    assert make_key("chat", {"a": 1}).startswith("chat:")


def test_make_key_accepts_models() -> None:
    request = ChatRequest(messages=(ChatMessage(role="user", content="hi"),), model="grok-4")
    assert make_key("chat", request) == make_key("chat", request.model_dump(mode="json"))


def test_stats(clock: FakeClock) -> None:
    cache: ResponseCache[str] = ResponseCache(ttl=10, max_entries=5, clock=clock)
    cache.set("a", "1")
    cache.set("b", "2", ttl=1)
    cache.get("a")
    cache.get("missing")
    clock.now += 5
    stats = cache.stats()
    assert stats["total_entries"] == 2
    assert stats["expired_entries"] == 1
    assert stats["active_entries"] == 1
    assert stats["hits"] == 1 and stats["misses"] == 1
    assert stats["max_entries"] == 5
