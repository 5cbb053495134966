"""Response cache keyed by canonical request form."""

from .cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL, CacheEntry, ResponseCache, make_key

__all__ = ["CacheEntry", "DEFAULT_MAX_ENTRIES", "DEFAULT_TTL", "ResponseCache", "make_key"]
