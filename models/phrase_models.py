"""Data models for Phrase API payloads and cached download responses."""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, Undefined, dataclass_json

__all__: list[str] = ["CachedResponse", "LocaleRecord", "LocaleReference", "PaginationInfo"]


@dataclass_json(letter_case=LetterCase.SNAKE, undefined=Undefined.EXCLUDE)
@dataclass
class LocaleReference(DataClassJsonMixin):
    """Short form of a remote locale, as embedded in another locale's `fallback_locale`."""

    id: str
    name: str
    code: str = ""


@dataclass_json(letter_case=LetterCase.SNAKE, undefined=Undefined.EXCLUDE)
@dataclass
class LocaleRecord(DataClassJsonMixin):
    """A locale as the Phrase API returns it.

    Attributes:
        id (str): Opaque identifier assigned by Phrase, used by download and upload endpoints.
        name (str): Locale name, also the key of the locale directory (e.g. "en-GB").
        code (str): Locale code.
        default (bool): Whether this is the project's default locale.
        fallback_locale (LocaleReference | None): Locale that fills gaps in this one, if any.
    """

    id: str
    name: str
    code: str = ""
    default: bool = False
    fallback_locale: LocaleReference | None = None


@dataclass_json(letter_case=LetterCase.SNAKE, undefined=Undefined.EXCLUDE)
@dataclass
class PaginationInfo(DataClassJsonMixin):
    """Content of the JSON-encoded `pagination` response header."""

    total_count: int | None = None
    current_page: int | None = None
    current_per_page: int | None = None
    previous_page: int | None = None
    next_page: int | None = None


@dataclass_json(letter_case=LetterCase.SNAKE)
@dataclass(frozen=True)
class CachedResponse(DataClassJsonMixin):
    """A downloaded translation file together with the validators needed to revalidate it.

    Attributes:
        etag (str): `ETag` response header, sent back as `If-None-Match`.
        last_modified (str): `Last-Modified` response header.
        content (str): Response body.
    """

    etag: str
    last_modified: str
    content: str = field(repr=False)
