"""Phrase translation provider: synchronization engine and its building blocks."""

from __future__ import annotations

from core.phrase.errors import (
    ProviderClientError,
    ProviderError,
    ProviderServerError,
    RateLimitError,
    classify_failure,
)
from core.phrase.events import EventDispatcher, PhraseEvent, ReadEvent, WriteEvent
from core.phrase.factory import PhraseProviderFactory, UnsupportedSchemeError
from core.phrase.locales import LocaleDirectory, to_phrase_locale
from core.phrase.options import ReadOptions, WriteOptions
from core.phrase.provider import PhraseProvider, escape_key_name

__all__: list[str] = [
    "EventDispatcher",
    "LocaleDirectory",
    "PhraseEvent",
    "PhraseProvider",
    "PhraseProviderFactory",
    "ProviderClientError",
    "ProviderError",
    "ProviderServerError",
    "RateLimitError",
    "ReadEvent",
    "ReadOptions",
    "UnsupportedSchemeError",
    "WriteEvent",
    "WriteOptions",
    "classify_failure",
    "escape_key_name",
    "to_phrase_locale",
]
