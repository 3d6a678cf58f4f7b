from __future__ import annotations

import hashlib
import logging

import pytest

from core.cache.response_cache import ResponseCache, cache_key
from core.cache.stores import CacheItem, MemoryCacheStore
from models.phrase_models import CachedResponse


def test_cache_key_shape() -> None:
    options = {"file_format": "symfony_xliff", "tags": "messages"}
    digest = hashlib.sha1(b'{"file_format":"symfony_xliff","tags":"messages"}').hexdigest()  # noqa: S324
    assert cache_key("en_GB", "messages", options) == f"en_GB.messages.{digest}"


def test_cache_key_ignores_option_order_at_every_level() -> None:
    first = {"tags": "messages", "format_options": {"b": "2", "a": "1"}, "file_format": "symfony_xliff"}
    second = {"file_format": "symfony_xliff", "format_options": {"a": "1", "b": "2"}, "tags": "messages"}
    assert cache_key("de", "messages", first) == cache_key("de", "messages", second)


def test_cache_key_changes_with_content() -> None:
    assert cache_key("de", "messages", {"tags": "a"}) != cache_key("de", "messages", {"tags": "b"})
    assert cache_key("de", "messages", {}) != cache_key("de", "validators", {})


def test_cache_key_keeps_non_ascii_text() -> None:
    key = cache_key("ja", "messages", {"tags": "日本"})
    digest = hashlib.sha1('{"tags":"日本"}'.encode()).hexdigest()  # noqa: S324
    assert key == f"ja.messages.{digest}"


def test_store_and_lookup_roundtrip() -> None:
    store = MemoryCacheStore()
    cache = ResponseCache(store)
    cache.store_response("k", CachedResponse(etag="W/1", last_modified="Mon", content="<xliff/>"))

    assert cache.lookup("k") == CachedResponse(etag="W/1", last_modified="Mon", content="<xliff/>")
    assert store.get_item("k").get() == {"etag": "W/1", "last_modified": "Mon", "content": "<xliff/>"}


def test_lookup_miss() -> None:
    assert ResponseCache(MemoryCacheStore()).lookup("missing") is None


@pytest.mark.parametrize(
    "value",
    [
        None,
        "text",
        42,
        ["etag"],
        {"etag": "e", "last_modified": "m"},
        {"etag": 1, "last_modified": "m", "content": "c"},
    ],
)
def test_unexpected_cached_values_are_misses(value: object, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    store = MemoryCacheStore()
    store.save(CacheItem("k").set(value))

    assert ResponseCache(store).lookup("k") is None


def test_cached_response_instances_are_accepted() -> None:
    store = MemoryCacheStore()
    cached = CachedResponse(etag="e", last_modified="m", content="c")
    store.save(CacheItem("k").set(cached))

    assert ResponseCache(store).lookup("k") is cached


def test_failed_save_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    class RejectingStore(MemoryCacheStore):
        def save(self, item: CacheItem) -> bool:
            _ = item
            return False

    caplog.set_level(logging.WARNING)
    cache = ResponseCache(RejectingStore())
    cache.store_response("k", CachedResponse(etag="e", last_modified="m", content="c"))

    assert cache.lookup("k") is None
    assert any("Failed to store cached response for 'k'" in rec.message for rec in caplog.records)
