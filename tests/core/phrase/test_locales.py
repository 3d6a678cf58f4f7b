from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import pytest

from core.phrase.errors import ProviderClientError, RateLimitError
from core.phrase.locales import MAX_PAGES, LocaleDirectory, to_phrase_locale
from handlers.phrase_http import HttpResponse
from models.phrase_models import LocaleRecord, LocaleReference


class FakeHttp:
    """Replays queued responses and records every request."""

    def __init__(self, responses: list[HttpResponse] | None = None) -> None:
        self.responses: list[HttpResponse] = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    async def request(self, method: str, path: str, **kwargs: Any) -> HttpResponse:
        self.calls.append({"method": method, "path": path, **kwargs})
        await asyncio.sleep(0)
        return self.responses.pop(0)

    async def close(self) -> None:
        return None


def _page(locales: list[dict[str, Any]], next_page: int | None = None) -> HttpResponse:
    return HttpResponse.build(200, {"Pagination": json.dumps({"next_page": next_page})}, json.dumps(locales))


def _created(name: str, locale_id: str) -> HttpResponse:
    return HttpResponse.build(201, body=json.dumps({"id": locale_id, "name": name, "code": name}))


def test_to_phrase_locale() -> None:
    assert to_phrase_locale("en_GB") == "en-GB"
    assert to_phrase_locale("de") == "de"


@pytest.mark.asyncio
async def test_prepopulated_directory_resolves_without_requests() -> None:
    http = FakeHttp()
    directory = LocaleDirectory("en")
    directory.add(LocaleRecord(id="X", name="de", code="de"))

    assert await directory.resolve(http, "de") == "X"
    assert http.calls == []


@pytest.mark.asyncio
async def test_missing_locale_is_created_once_and_remembered_until_reset() -> None:
    http = FakeHttp([_created("fr", "F1"), _page([]), _created("fr", "F2")])
    directory = LocaleDirectory("en")
    directory.add(LocaleRecord(id="X", name="de"))

    assert await directory.resolve(http, "fr") == "F1"
    assert await directory.resolve(http, "fr") == "F1"
    assert [call["method"] for call in http.calls] == ["POST"]
    assert http.calls[0]["path"] == "locales"
    assert http.calls[0]["data"] == {"name": "fr", "code": "fr", "default": False}

    directory.reset()
    assert len(directory) == 0
    assert await directory.resolve(http, "fr") == "F2"
    assert [call["method"] for call in http.calls] == ["POST", "GET", "POST"]


@pytest.mark.asyncio
async def test_default_locale_is_created_as_default() -> None:
    http = FakeHttp([_page([]), _created("en-GB", "E")])
    directory = LocaleDirectory("en_GB")

    assert await directory.resolve(http, "en_GB") == "E"
    assert http.calls[1]["data"] == {"name": "en-GB", "code": "en-GB", "default": True}


@pytest.mark.asyncio
async def test_listing_follows_pagination() -> None:
    http = FakeHttp(
        [
            _page([{"id": "1", "name": "de", "code": "de"}], next_page=2),
            _page(
                [
                    {
                        "id": "2",
                        "name": "en-GB",
                        "code": "en-GB",
                        "default": True,
                        "fallback_locale": {"id": "1", "name": "de", "code": "de"},
                        "unknown": "ignored",
                    }
                ]
            ),
        ]
    )
    directory = LocaleDirectory("en")

    assert await directory.resolve(http, "en_GB") == "2"
    assert [call["params"] for call in http.calls] == [{"per_page": 100, "page": 1}, {"per_page": 100, "page": 2}]
    assert "de" in directory
    assert directory.records["en-GB"].fallback_locale == LocaleReference(id="1", name="de", code="de")
    assert directory.resolve_fallback("en_GB") == "de"
    assert directory.resolve_fallback("de") is None
    assert directory.resolve_fallback("fr") is None


@pytest.mark.asyncio
async def test_listing_without_pagination_header_stops_after_first_page() -> None:
    http = FakeHttp([HttpResponse.build(200, body=json.dumps([{"id": "1", "name": "de"}]))])
    directory = LocaleDirectory("en")

    records = await directory.list(http)

    assert list(records) == ["de"]
    assert len(http.calls) == 1


@pytest.mark.asyncio
async def test_malformed_pagination_header_is_terminal(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    http = FakeHttp([HttpResponse.build(200, {"pagination": "not json"}, json.dumps([{"id": "1", "name": "de"}]))])
    directory = LocaleDirectory("en")

    await directory.list(http)

    assert len(http.calls) == 1
    assert any("malformed pagination" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_listing_is_capped(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    monkeypatch.setattr("core.phrase.locales.MAX_PAGES", 3)
    http = FakeHttp([_page([{"id": str(i), "name": f"l{i}"}], next_page=i + 1) for i in range(5)])
    directory = LocaleDirectory("en")

    await directory.list(http)

    assert len(http.calls) == 3
    assert len(directory) == 3
    assert MAX_PAGES == 1000
    assert any("Stopped listing locales" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_failed_listing_leaves_directory_empty(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    http = FakeHttp(
        [
            _page([{"id": "1", "name": "de"}], next_page=2),
            HttpResponse.build(500, body="oops"),
        ]
    )
    directory = LocaleDirectory("en")

    with pytest.raises(ProviderClientError, match=r"^Unable to get locales from phrase\.$"):
        await directory.resolve(http, "de")

    assert len(directory) == 0
    assert any('Unable to get locales from phrase: "oops".' in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_failed_creation_raises_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    http = FakeHttp([HttpResponse.build(429, {"x-rate-limit-limit": "10", "x-rate-limit-reset": "5"}, "slow")])
    directory = LocaleDirectory("en")
    directory.add(LocaleRecord(id="X", name="de"))

    with pytest.raises(RateLimitError, match=r"Rate limit exceeded \(10\)\. please wait 5 seconds\."):
        await directory.resolve(http, "fr")

    assert "fr" not in directory
    assert any('Unable to create locale "fr" in phrase: "slow".' in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_non_list_payload_is_rejected() -> None:
    http = FakeHttp([HttpResponse.build(200, body=json.dumps({"id": "1"}))])
    directory = LocaleDirectory("en")

    with pytest.raises(ProviderClientError):
        await directory.list(http)


@pytest.mark.asyncio
async def test_concurrent_lookups_create_a_locale_once() -> None:
    http = FakeHttp([_page([]), _created("fr", "F1")])
    directory = LocaleDirectory("en")

    results = await asyncio.gather(directory.resolve(http, "fr"), directory.resolve(http, "fr"))

    assert results == ["F1", "F1"]
    assert [call["method"] for call in http.calls] == ["GET", "POST"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("not json", r"^Unable to decode created locale from phrase\.$"),
        ("", r"^Unexpected locale from phrase\.$"),
        (json.dumps({"name": "fr", "code": "fr"}), r"^Unexpected locale from phrase\.$"),
        (json.dumps([{"id": "F1", "name": "fr"}]), r"^Unexpected locale from phrase\.$"),
    ],
)
async def test_unusable_created_locale_is_rejected(body: str, message: str) -> None:
    http = FakeHttp([HttpResponse.build(201, body=body)])
    directory = LocaleDirectory("en")
    directory.add(LocaleRecord(id="X", name="de"))

    with pytest.raises(ProviderClientError, match=message):
        await directory.resolve(http, "fr")

    assert "fr" not in directory


@pytest.mark.asyncio
async def test_directory_lists_once_for_every_transport_using_it() -> None:
    first = FakeHttp([_page([{"id": "1", "name": "de"}])])
    second = FakeHttp([_created("fr", "F1")])
    directory = LocaleDirectory("en")

    assert await directory.resolve(first, "de") == "1"
    assert await directory.resolve(second, "de") == "1"
    assert await directory.resolve(second, "fr") == "F1"

    assert [call["method"] for call in first.calls] == ["GET"]
    assert [call["method"] for call in second.calls] == ["POST"]
