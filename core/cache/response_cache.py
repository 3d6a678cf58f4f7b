"""Conditional-request cache for Phrase locale downloads.

Downloads are cached per locale, domain and option set. The stored `ETag` is sent back as
`If-None-Match`; a 304 answer then reuses the stored body.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from models.phrase_models import CachedResponse
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.cache.stores import CacheItem, CacheStore

__all__: list[str] = ["ResponseCache", "cache_key"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


def cache_key(locale: str, domain: str, options: Mapping[str, Any]) -> str:
    """Build the cache key of a download.

    The option set is serialized with keys sorted at every nesting level before hashing,
    so the order in which options were added never changes the key.

    Args:
        locale (str): Locale identifier as given by the caller (e.g. "en_GB").
        domain (str): Translation domain.
        options (Mapping[str, Any]): Fully materialized read option set.

    Returns:
        str: "<locale>.<domain>.<sha1 of the sorted option set>".
    """
    canonical: str = json.dumps(options, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest: str = hashlib.sha1(canonical.encode("utf-8")).hexdigest()  # noqa: S324
    return f"{locale}.{domain}.{digest}"


class ResponseCache:
    """Adapter storing `CachedResponse` values in a generic `CacheStore`."""

    def __init__(self, store: CacheStore) -> None:
        self.store: CacheStore = store

    def lookup(self, key: str) -> CachedResponse | None:
        """Return the cached response for a key.

        Entries that are missing, empty or of an unexpected shape are all reported as a miss.
        """
        item: CacheItem = self.store.get_item(key)
        if not item.is_hit():
            return None
        return self._to_cached_response(key, item.get())

    def store_response(self, key: str, response: CachedResponse) -> None:
        item: CacheItem = self.store.get_item(key)
        item.set(response.to_dict())
        if not self.store.save(item):
            logger.warning("Failed to store cached response for '%s'", key)
            return
        logger.debug("Stored cached response for '%s' (etag=%s)", key, response.etag)

    def _to_cached_response(self, key: str, value: Any) -> CachedResponse | None:
        if isinstance(value, CachedResponse):
            return value
        if isinstance(value, Mapping) and all(
            isinstance(value.get(name), str) for name in ("etag", "last_modified", "content")
        ):
            return CachedResponse(etag=value["etag"], last_modified=value["last_modified"], content=value["content"])
        if value is not None:
            logger.debug("Ignoring cache entry '%s' of unexpected type %s", key, type(value).__name__)
        return None
