"""Directory of the remote locales of a Phrase project.

Callers name locales the way their catalogues do ("en_GB"); Phrase names them with a hyphen
("en-GB") and addresses them by an opaque id. The directory translates between the two,
lists the project's locales on first use, and creates missing locales on demand.

Population and creation happen under a lock: creating a locale is not idempotent, so two
concurrent lookups of the same unknown locale must not both create it.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, Final

from core.phrase.errors import ProviderClientError, classify_failure
from models.phrase_models import LocaleRecord, PaginationInfo
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from handlers.phrase_http import HttpResponse, PhraseHttp

__all__: list[str] = ["LocaleDirectory", "to_phrase_locale"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

PAGE_SIZE: Final[int] = 100
MAX_PAGES: Final[int] = 1000


def to_phrase_locale(locale: str) -> str:
    """Translate a locale identifier to Phrase's naming convention ("en_GB" -> "en-GB")."""
    return locale.replace("_", "-")


class LocaleDirectory:
    """Mapping of Phrase locale names to locale records for one project.

    One directory is meant to be shared by every provider talking to the same project for
    the lifetime of the process. It holds no transport: every remote call uses the transport of
    the provider asking. `reset()` forgets everything, e.g. between tests or when the remote
    locale set is known to have changed.

    Args:
        default_locale (str): The application's default locale; created remotely as default.
    """

    def __init__(self, default_locale: str) -> None:
        self.default_locale: str = default_locale
        self._records: dict[str, LocaleRecord] = {}
        self._lock: asyncio.Lock = asyncio.Lock()

    def __contains__(self, locale: str) -> bool:
        return to_phrase_locale(locale) in self._records

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> dict[str, LocaleRecord]:
        return dict(self._records)

    def add(self, record: LocaleRecord) -> None:
        """Register a locale record under its name."""
        self._records[record.name] = record

    def reset(self) -> None:
        """Forget every known locale. The next lookup lists the project again."""
        self._records.clear()
        logger.debug("Locale directory reset")

    async def resolve(self, http: PhraseHttp, locale: str) -> str:
        """Return the remote id of a locale, listing or creating locales as needed.

        Args:
            http (PhraseHttp): Transport bound to the project.
            locale (str): Locale identifier as used by the catalogues (e.g. "en_GB").

        Returns:
            str: The remote locale id.

        Raises:
            ProviderError: If listing or creating locales fails.
        """
        phrase_locale: str = to_phrase_locale(locale)
        async with self._lock:
            if not self._records:
                await self._load(http)

            record: LocaleRecord | None = self._records.get(phrase_locale)
            if record is None:
                record = await self._create(http, phrase_locale)
        return record.id

    def resolve_fallback(self, locale: str) -> str | None:
        """Return the name of the fallback locale recorded for a locale, if any.

        Only answers from what is already known; call `resolve()` first.
        """
        record: LocaleRecord | None = self._records.get(to_phrase_locale(locale))
        if record is None or record.fallback_locale is None:
            return None
        return record.fallback_locale.name or None

    async def list(self, http: PhraseHttp) -> dict[str, LocaleRecord]:
        """List the project's locales into the directory and return them."""
        async with self._lock:
            await self._load(http)
        return self.records

    async def _load(self, http: PhraseHttp) -> None:
        """Fetch every page of the locale listing.

        The directory is only updated once the last page arrived, so a failure half-way
        leaves it as it was and lookups never see a partial listing.
        """
        loaded: dict[str, LocaleRecord] = {}
        page: int | None = 1
        pages: int = 0

        while page is not None:
            if pages >= MAX_PAGES:
                logger.warning("Stopped listing locales after %d pages", pages)
                break

            response: HttpResponse = await http.request(
                "GET", "locales", params={"per_page": PAGE_SIZE, "page": page}
            )
            if response.status != 200:
                logger.error('Unable to get locales from phrase: "%s".', response.body)
                raise classify_failure(response, "Unable to get locales from phrase.")

            for item in self._decode_list(response):
                record: LocaleRecord = LocaleRecord.from_dict(item, infer_missing=True)
                loaded[record.name] = record

            pages += 1
            page = self._next_page(response)

        self._records.update(loaded)
        logger.info("Loaded %d locales from phrase", len(loaded))

    def _decode(self, response: HttpResponse, subject: str) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError as err:
            logger.error('Unable to decode %s from phrase: "%s".', subject, response.body)
            msg = f"Unable to decode {subject} from phrase."
            raise ProviderClientError(msg, response) from err

    def _decode_list(self, response: HttpResponse) -> list[dict[str, Any]]:
        payload: Any = self._decode(response, "locales")
        if payload is None:
            return []
        if not isinstance(payload, list):
            logger.error('Unexpected locale listing from phrase: "%s".', response.body)
            msg = "Unexpected locale listing from phrase."
            raise ProviderClientError(msg, response)
        return payload

    def _next_page(self, response: HttpResponse) -> int | None:
        pagination: str = response.header("pagination", "{}")
        try:
            return PaginationInfo.from_json(pagination).next_page
        except (json.JSONDecodeError, TypeError, ValueError, AttributeError):
            logger.warning("Ignoring malformed pagination header: %s", pagination)
            return None

    async def _create(self, http: PhraseHttp, phrase_locale: str) -> LocaleRecord:
        """Create a locale in the project and register it."""
        response: HttpResponse = await http.request(
            "POST",
            "locales",
            data={
                "name": phrase_locale,
                "code": phrase_locale,
                "default": phrase_locale == to_phrase_locale(self.default_locale),
            },
        )
        if response.status != 201:
            logger.error('Unable to create locale "%s" in phrase: "%s".', phrase_locale, response.body)
            raise classify_failure(response, "Unable to create locale phrase.")

        payload: Any = self._decode(response, "created locale")
        if not isinstance(payload, dict) or not payload.get("id") or not payload.get("name"):
            logger.error('Unexpected locale from phrase: "%s".', response.body)
            msg = "Unexpected locale from phrase."
            raise ProviderClientError(msg, response)

        record: LocaleRecord = LocaleRecord.from_dict(payload, infer_missing=True)
        self.add(record)
        logger.info("Created locale '%s' (id=%s) in phrase", record.name, record.id)
        return record
