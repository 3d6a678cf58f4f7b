"""Read and write option sets sent with Phrase download and upload requests.

Both sets start from fixed defaults, take user configuration for every key that is not
protected, and get per-request values (tag, locale, fallback locale) through `with_*`
methods. Those methods return a new option set, so an instance can be shared freely between
requests without one request's overlay leaking into another.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Final, Self

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["ReadOptions", "WriteOptions", "is_enabled"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


def is_enabled(value: Any) -> bool:
    """Interpret a configuration flag ("1", "true", True, ...) as a boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def _normalize(value: Any) -> Any:
    """Convert configured scalars to the string form the API expects, keeping nesting."""
    if isinstance(value, Mapping):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    return str(value)


class _OptionSet:
    DEFAULTS: ClassVar[dict[str, Any]] = {}
    PROTECTED: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, options: Mapping[str, Any]) -> None:
        self._options: dict[str, Any] = copy.deepcopy(dict(options))

    def _with(self, key: str, value: Any) -> Self:
        new: Self = copy.copy(self)
        new._options = copy.deepcopy(self._options)
        new._options[key] = value
        return new

    @classmethod
    def _strip_protected(cls, options: Mapping[str, Any]) -> dict[str, Any]:
        configured: dict[str, Any] = {}
        for key, value in options.items():
            if key in cls.PROTECTED:
                logger.debug("Ignoring protected option '%s' in %s configuration", key, cls.__name__)
                continue
            configured[key] = _normalize(value)
        return configured

    def get_options(self) -> dict[str, Any]:
        """Return a copy of the materialized option set."""
        return copy.deepcopy(self._options)

    def with_tag(self, tag: str) -> Self:
        """Restrict the request to keys tagged with the given domain."""
        return self._with("tags", tag)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _OptionSet):
            return NotImplemented
        return type(self) is type(other) and self._options == other._options

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._options!r})"


class ReadOptions(_OptionSet):
    """Query parameters of the locale download endpoint.

    When fallback locales are enabled, `include_empty_translations` is forced on whatever the
    configuration says: Phrase only fills untranslated keys from the fallback locale when empty
    translations are part of the download.

    Attributes:
        fallback_enabled (bool): Whether downloads should include the fallback locale.
    """

    DEFAULTS: ClassVar[dict[str, Any]] = {
        "file_format": "symfony_xliff",
        "include_empty_translations": "1",
        "tags": [],
        "format_options": {
            "enclose_in_cdata": "1",
        },
    }
    PROTECTED: ClassVar[frozenset[str]] = frozenset(
        {"file_format", "tags", "tag", "fallback_locale_id", "fallback_locale_enabled"}
    )

    def __init__(self, options: Mapping[str, Any], *, fallback_enabled: bool = False) -> None:
        super().__init__(options)
        self.fallback_enabled: bool = fallback_enabled

    @classmethod
    def from_config(cls, options: Mapping[str, Any] | None = None) -> ReadOptions:
        """Build the read option set from the user's `read` configuration.

        Args:
            options (Mapping[str, Any] | None): Configured read options.

        Returns:
            ReadOptions: Defaults overlaid with every non-protected configured option.
        """
        options = dict(options or {})
        fallback_enabled: bool = is_enabled(options.get("fallback_locale_enabled", "0"))

        configured: dict[str, Any] = cls._strip_protected(options)
        format_options: Any = configured.pop("format_options", {})
        if not isinstance(format_options, Mapping):
            logger.warning("Ignoring read option 'format_options': a mapping is expected, got %r", format_options)
            format_options = {}

        merged: dict[str, Any] = copy.deepcopy(cls.DEFAULTS)
        merged.update(configured)
        merged["format_options"] = {**cls.DEFAULTS["format_options"], **format_options}

        if fallback_enabled:
            merged["include_empty_translations"] = "1"

        return cls(merged, fallback_enabled=fallback_enabled)

    def is_fallback_locale_enabled(self) -> bool:
        return self.fallback_enabled

    def with_fallback_locale(self, locale: str) -> ReadOptions:
        """Ask Phrase to fill missing translations from the given fallback locale."""
        return self._with("fallback_locale_id", locale)


class WriteOptions(_OptionSet):
    """Form fields of the upload endpoint."""

    DEFAULTS: ClassVar[dict[str, Any]] = {
        "file_format": "symfony_xliff",
        "update_translations": "1",
    }
    PROTECTED: ClassVar[frozenset[str]] = frozenset({"file_format", "tags", "locale_id", "file"})

    @classmethod
    def from_config(cls, options: Mapping[str, Any] | None = None) -> WriteOptions:
        """Build the write option set from the user's `write` configuration."""
        merged: dict[str, Any] = copy.deepcopy(cls.DEFAULTS)
        merged.update(cls._strip_protected(options or {}))
        return cls(merged)

    def with_locale(self, locale_id: str) -> WriteOptions:
        """Target the upload at the given remote locale id."""
        return self._with("locale_id", locale_id)
