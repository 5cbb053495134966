"""Response caching with TTL and LRU eviction.

Upstream responses are cached by the canonical form of the request that
produced them, so repeating an identical chat or search inside the TTL
window costs no network call.
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

import orjson
from pydantic import BaseModel

DEFAULT_TTL: float = 300.0  # 5 minutes
DEFAULT_MAX_ENTRIES: int = 100

V = TypeVar("V")


@dataclass(slots=True)
class CacheEntry(Generic[V]):
    """A cached value with its absolute expiry time."""
    value: V
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


def make_key(kind: str, payload: BaseModel | dict[str, object]) -> str:
    """Canonical cache key: kind prefix plus a digest of sorted-key JSON.

    Two payloads that differ only in key order map to the same key.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    canonical = orjson.dumps(payload, option=orjson.OPT_SORT_KEYS, default=str)
    return f"{kind}:{hashlib.sha256(canonical).hexdigest()}"


class ResponseCache(Generic[V]):
    """Thread-safe bounded in-memory cache.

    Entries expire `ttl` seconds after insertion and are never returned once
    expired. When full, the least recently used entry is evicted first.

    Args:
        ttl: Entry lifetime in seconds
        max_entries: Capacity before LRU eviction
        clock: Monotonic time source (injectable for tests)

    Example:
        >>> cache = ResponseCache(ttl=60)
        >>> key = make_key("chat", {"q": "test"})
        >>> cache.set(key, "result")
        >>> cache.get(key)
        'result'
    """

    __slots__ = ("_entries", "_ttl", "_max_entries", "_clock", "_lock", "_hits", "_misses")

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(value, self._clock() + (self._ttl if ttl is None else ttl))

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.expired(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, object]:
        """Get cache statistics for monitoring."""
        with self._lock:
            now = self._clock()
            expired = sum(1 for e in self._entries.values() if e.expired(now))
            return {
                "total_entries": len(self._entries),
                "expired_entries": expired,
                "active_entries": len(self._entries) - expired,
                "hits": self._hits,
                "misses": self._misses,
                "ttl": self._ttl,
                "max_entries": self._max_entries,
            }
