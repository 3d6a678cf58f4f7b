"""Download response cache package.

Provides the conditional-request cache for Phrase downloads and the stores backing it.
"""

from __future__ import annotations

from core.cache.response_cache import ResponseCache, cache_key
from core.cache.stores import CacheItem, CacheStore, MemoryCacheStore, SqliteCacheStore

__all__: list[str] = ["CacheItem", "CacheStore", "MemoryCacheStore", "ResponseCache", "SqliteCacheStore", "cache_key"]
