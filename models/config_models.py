"""Configuration data models for the Phrase synchronization tool.

Each dataclass maps onto one section of the INI configuration file. Field types drive the
conversion of the INI strings, so the defaults below also document the expected types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__: list[str] = [
    "Config",
    # "General",
    # "Phrase",
    # "Sync",
]


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"
    SCRIPT_NAME: str = ""


@dataclass
class Phrase:
    DSN: str = ""
    PROJECT_ID: str = ""
    API_TOKEN: str = ""
    ENDPOINT: str = "default"
    USER_AGENT: str = ""
    DEFAULT_LOCALE: str = "en"
    TIMEOUT: float = 30.0
    CACHE_FILE: str = ""


@dataclass
class Sync:
    DOMAINS: list[str] = field(default_factory=list)
    LOCALES: list[str] = field(default_factory=list)
    TRANSLATIONS_DIR: str = "translations"


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    PHRASE: Phrase = field(default_factory=Phrase)
    SYNC: Sync = field(default_factory=Sync)
    # Free-form option maps handed to the read/write option sets.
    READ: dict[str, Any] = field(default_factory=dict)
    WRITE: dict[str, Any] = field(default_factory=dict)
