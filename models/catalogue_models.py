"""Models for translation message catalogues.

A catalogue holds the messages of one locale, partitioned into domains. A bag groups
catalogues of several locales and is the unit exchanged with the Phrase provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

__all__: list[str] = ["MessageCatalogue", "TranslatorBag"]


@dataclass
class MessageCatalogue:
    """Messages of a single locale, keyed by domain and message key.

    Attributes:
        locale (str): Locale identifier (e.g. "en_GB").
        messages (dict[str, dict[str, str]]): domain -> message key -> translated text.
        metadata (dict[str, dict[str, dict[str, Any]]]): domain -> message key -> metadata.
    """

    locale: str
    messages: dict[str, dict[str, str]] = field(default_factory=dict)
    metadata: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)

    def domains(self) -> list[str]:
        return list(self.messages)

    def all(self, domain: str) -> dict[str, str]:
        """Return the messages of a domain. Unknown domains give an empty mapping."""
        return self.messages.get(domain, {})

    def get(self, key: str, domain: str = "messages") -> str | None:
        return self.messages.get(domain, {}).get(key)

    def set(self, key: str, text: str, domain: str = "messages") -> None:
        self.messages.setdefault(domain, {})[key] = text

    def add(self, messages: Mapping[str, str], domain: str = "messages") -> None:
        self.messages.setdefault(domain, {}).update(messages)

    def get_metadata(self, key: str, domain: str = "messages") -> dict[str, Any]:
        return self.metadata.get(domain, {}).get(key, {})

    def set_metadata(self, key: str, value: dict[str, Any], domain: str = "messages") -> None:
        self.metadata.setdefault(domain, {})[key] = value

    def merge(self, other: MessageCatalogue) -> None:
        """Merge another catalogue of the same locale into this one.

        Raises:
            ValueError: If the locales differ.
        """
        if other.locale != self.locale:
            msg: str = f"Cannot merge catalogue '{other.locale}' into catalogue '{self.locale}'."
            raise ValueError(msg)
        for domain, messages in other.messages.items():
            self.add(messages, domain)
        for domain, entries in other.metadata.items():
            for key, value in entries.items():
                self.set_metadata(key, value, domain)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self.messages.values())


class TranslatorBag:
    """Collection of catalogues, at most one per locale."""

    def __init__(self, catalogues: list[MessageCatalogue] | None = None) -> None:
        self._catalogues: dict[str, MessageCatalogue] = {}
        for catalogue in catalogues or []:
            self.add_catalogue(catalogue)

    def add_catalogue(self, catalogue: MessageCatalogue) -> None:
        """Add a catalogue, merging it into an existing one for the same locale."""
        existing: MessageCatalogue | None = self._catalogues.get(catalogue.locale)
        if existing is None:
            self._catalogues[catalogue.locale] = catalogue
        else:
            existing.merge(catalogue)

    def get_catalogue(self, locale: str) -> MessageCatalogue | None:
        return self._catalogues.get(locale)

    def catalogues(self) -> list[MessageCatalogue]:
        return list(self._catalogues.values())

    def locales(self) -> list[str]:
        return list(self._catalogues)

    def __iter__(self) -> Iterator[MessageCatalogue]:
        return iter(self._catalogues.values())

    def __len__(self) -> int:
        return len(self._catalogues)

    def __repr__(self) -> str:
        return f"TranslatorBag(locales={self.locales()!r})"
