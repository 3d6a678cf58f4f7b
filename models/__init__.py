"""Data models for the Phrase synchronization tool.

This package contains dataclass definitions for configuration, message catalogues,
and the Phrase API payloads.
"""

from __future__ import annotations

from models.catalogue_models import MessageCatalogue, TranslatorBag
from models.config_models import Config
from models.phrase_models import CachedResponse, LocaleRecord, LocaleReference, PaginationInfo

__all__: list[str] = [
    "CachedResponse",
    "Config",
    "LocaleRecord",
    "LocaleReference",
    "MessageCatalogue",
    "PaginationInfo",
    "TranslatorBag",
]
