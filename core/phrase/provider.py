"""Phrase translation provider.

Synchronizes message catalogues with a Phrase project:

- `read()` downloads one file per locale and domain, revalidating cached downloads with
  `If-None-Match`, and returns the loaded catalogues.
- `write()` uploads every non-empty domain of every catalogue.
- `delete()` removes every message key of the given catalogues from the project.

Each operation works through its items one request at a time. The first failing request
aborts the whole operation; items already processed stay processed.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Any, Final, Protocol, Self

from core.cache.response_cache import ResponseCache, cache_key
from core.phrase.errors import classify_failure
from core.phrase.events import EventDispatcher, ReadEvent, WriteEvent
from handlers.phrase_http import UploadFile
from models.catalogue_models import MessageCatalogue, TranslatorBag
from models.phrase_models import CachedResponse
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from core.phrase.locales import LocaleDirectory
    from core.phrase.options import ReadOptions, WriteOptions
    from handlers.phrase_http import HttpResponse, PhraseHttp

__all__: list[str] = ["CatalogueDumper", "CatalogueLoader", "PhraseProvider", "escape_key_name"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# Characters with a meaning in Phrase's key search query syntax.
_SEARCH_SPECIAL_CHARS: Final[re.Pattern[str]] = re.compile(r"([\s:,])")


class CatalogueLoader(Protocol):
    def load(self, content: str, locale: str, domain: str = ...) -> MessageCatalogue: ...


class CatalogueDumper(Protocol):
    def format_catalogue(self, catalogue: MessageCatalogue, domain: str, *, default_locale: str = ...) -> str: ...


def escape_key_name(key: str) -> str:
    """Escape a key name for a `name:` search query (whitespace, comma and colon)."""
    return _SEARCH_SPECIAL_CHARS.sub(r"\\\1", key)


class PhraseProvider:
    """Reads, writes and deletes translations in one Phrase project.

    Args:
        http (PhraseHttp): Transport bound to the project.
        loader (CatalogueLoader): Parses downloaded files into catalogues.
        dumper (CatalogueDumper): Renders catalogue domains into upload files.
        dispatcher (EventDispatcher): Notified after reads and before writes.
        cache (ResponseCache): Conditional-request cache for downloads.
        locales (LocaleDirectory): Remote locale directory, usually shared per project.
        default_locale (str): The application's default locale.
        endpoint (str): Host (and port) of the API, used for display.
        read_options (ReadOptions): Base option set for downloads.
        write_options (WriteOptions): Base option set for uploads.
    """

    def __init__(
        self,
        http: PhraseHttp,
        *,
        loader: CatalogueLoader,
        dumper: CatalogueDumper,
        dispatcher: EventDispatcher,
        cache: ResponseCache,
        locales: LocaleDirectory,
        default_locale: str,
        endpoint: str,
        read_options: ReadOptions,
        write_options: WriteOptions,
    ) -> None:
        self.http: PhraseHttp = http
        self.loader: CatalogueLoader = loader
        self.dumper: CatalogueDumper = dumper
        self.dispatcher: EventDispatcher = dispatcher
        self.cache: ResponseCache = cache
        self.locales: LocaleDirectory = locales
        self.default_locale: str = default_locale
        self.endpoint: str = endpoint
        self.read_options: ReadOptions = read_options
        self.write_options: WriteOptions = write_options

    def __str__(self) -> str:
        return f"phrase://{self.endpoint}"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    async def close(self) -> None:
        await self.http.close()

    async def read(self, domains: Iterable[str], locales: Iterable[str]) -> TranslatorBag:
        """Download the catalogues of every domain in every locale.

        Args:
            domains (Iterable[str]): Domains to download.
            locales (Iterable[str]): Locale identifiers to download (e.g. "en_GB").

        Returns:
            TranslatorBag: The downloaded catalogues, possibly replaced by a `ReadEvent` listener.

        Raises:
            ProviderError: If a locale lookup or a download fails.
        """
        domains = list(domains)
        bag = TranslatorBag()

        for locale in locales:
            locale_id: str = await self.locales.resolve(self.http, locale)
            for domain in domains:
                bag.add_catalogue(await self._download(locale, locale_id, domain))

        event: ReadEvent = await self.dispatcher.dispatch(ReadEvent(bag))
        return event.bag

    async def _download(self, locale: str, locale_id: str, domain: str) -> MessageCatalogue:
        options: ReadOptions = self.read_options.with_tag(domain)
        fallback_enabled: bool = options.is_fallback_locale_enabled()
        if fallback_enabled:
            fallback_locale: str | None = self.locales.resolve_fallback(locale)
            if fallback_locale is not None:
                options = options.with_fallback_locale(fallback_locale)

        query: dict[str, Any] = options.get_options()
        key: str = cache_key(locale, domain, query)
        cached: CachedResponse | None = self.cache.lookup(key)
        headers: dict[str, str] = {"If-None-Match": cached.etag} if cached is not None and cached.etag else {}

        response: HttpResponse = await self.http.request(
            "GET", f"locales/{locale_id}/download", params=query, headers=headers
        )
        if response.status not in (200, 304):
            logger.error('Unable to get translations for locale "%s" from phrase: "%s".', locale, response.body)
            raise classify_failure(response, "Unable to get translations from phrase.")

        revalidated: CachedResponse | None = cached if response.status == 304 else None
        content: str = revalidated.content if revalidated is not None else response.body
        logger.debug("Downloaded '%s' for locale '%s' (status=%s)", domain, locale, response.status)
        catalogue: MessageCatalogue = self.loader.load(content, locale, domain)

        # Weak etags do not change when fallback translations do, so those downloads are never cached.
        if not fallback_enabled:
            self.cache.store_response(
                key,
                CachedResponse(
                    etag=response.header("etag", revalidated.etag if revalidated else ""),
                    last_modified=response.header("last-modified", revalidated.last_modified if revalidated else ""),
                    content=content,
                ),
            )
        return catalogue

    async def write(self, bag: TranslatorBag) -> None:
        """Upload every non-empty domain of every catalogue.

        A `WriteEvent` is dispatched before anything is sent; its listeners may replace the bag.

        Raises:
            TypeError: If `bag` is not a `TranslatorBag`.
            ProviderError: If a locale lookup or an upload fails.
        """
        if not isinstance(bag, TranslatorBag):
            msg: str = f"Expected a TranslatorBag, got {type(bag).__name__}."
            raise TypeError(msg)

        event: WriteEvent = await self.dispatcher.dispatch(WriteEvent(bag))

        uploaded: int = 0
        for catalogue in event.bag.catalogues():
            for domain in catalogue.domains():
                if not catalogue.all(domain):
                    continue
                await self._upload(catalogue, domain)
                uploaded += 1
        logger.info("Uploaded %d translation files to %s", uploaded, self)

    async def _upload(self, catalogue: MessageCatalogue, domain: str) -> None:
        locale_id: str = await self.locales.resolve(self.http, catalogue.locale)
        content: str = self.dumper.format_catalogue(catalogue, domain, default_locale=self.default_locale)
        filename: str = f"{datetime.now():%Y%m%d%H%M%S}-{domain}-{catalogue.locale}.xlf"
        fields: dict[str, Any] = self.write_options.with_tag(domain).with_locale(locale_id).get_options()

        response: HttpResponse = await self.http.request(
            "POST",
            "uploads",
            data=fields,
            files={"file": UploadFile(filename=filename, content=content, content_type="application/xml")},
        )
        if response.status != 201:
            logger.error('Unable to upload translations for domain "%s" to phrase: "%s".', domain, response.body)
            raise classify_failure(response, "Unable to upload translations to phrase.")
        logger.debug("Uploaded '%s'", filename)

    async def delete(self, bag: TranslatorBag) -> None:
        """Delete every message key of every catalogue from the project.

        Keys are deduplicated across domains and catalogues, so each is deleted once.

        Raises:
            ProviderError: If a deletion fails. Keys deleted before the failure stay deleted.
        """
        keys: dict[str, None] = {}
        for catalogue in bag.catalogues():
            for domain in catalogue.domains():
                keys.update(dict.fromkeys(catalogue.all(domain)))

        for key in keys:
            response: HttpResponse = await self.http.request(
                "DELETE", "keys", params={"q": f"name:{escape_key_name(key)}"}
            )
            if response.status != 200:
                logger.error('Unable to delete key "%s" in phrase: "%s".', key, response.body)
                raise classify_failure(response, "Unable to delete key in phrase.")
        logger.info("Deleted %d keys from %s", len(keys), self)
