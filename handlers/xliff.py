"""XLIFF 1.2 reading and writing for message catalogues.

The dumper produces the documents uploaded to Phrase; the loader parses the `symfony_xliff`
files Phrase returns from locale downloads as well as local translation files.
"""

from __future__ import annotations

import base64
import hashlib
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Any, Final

from models.catalogue_models import MessageCatalogue
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["InvalidResourceError", "XliffFileDumper", "XliffFileLoader"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

XLIFF_NAMESPACE: Final[str] = "urn:oasis:names:tc:xliff:document:1.2"
XML_DECLARATION: Final[str] = '<?xml version="1.0" encoding="utf-8"?>\n'


class InvalidResourceError(Exception):
    """The content is not a readable XLIFF document."""


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _unit_id(key: str) -> str:
    digest: bytes = hashlib.sha1(key.encode("utf-8")).digest()  # noqa: S324
    return base64.b64encode(digest).decode("ascii")[:7].translate(str.maketrans("/+", "._"))


class XliffFileDumper:
    """Renders one domain of a catalogue as an XLIFF 1.2 document."""

    def format_catalogue(self, catalogue: MessageCatalogue, domain: str, *, default_locale: str = "en") -> str:
        """Render the messages of a domain.

        Metadata `notes` become `<note>` elements and `target-attributes` become attributes
        of the `<target>` element.

        Args:
            catalogue (MessageCatalogue): Catalogue to render.
            domain (str): Domain whose messages are rendered.
            default_locale (str): Source language of the document.

        Returns:
            str: The XLIFF document.
        """
        root = ET.Element("xliff", {"xmlns": XLIFF_NAMESPACE, "version": "1.2"})
        file_element = ET.SubElement(
            root,
            "file",
            {
                "source-language": default_locale.replace("_", "-"),
                "target-language": catalogue.locale.replace("_", "-"),
                "datatype": "plaintext",
                "original": "file.ext",
            },
        )
        header = ET.SubElement(file_element, "header")
        ET.SubElement(header, "tool", {"tool-id": "phrase-sync", "tool-name": "phrase-sync"})
        body = ET.SubElement(file_element, "body")

        for key, text in catalogue.all(domain).items():
            metadata: dict[str, Any] = catalogue.get_metadata(key, domain)
            unit = ET.SubElement(body, "trans-unit", {"id": _unit_id(key), "resname": key})
            ET.SubElement(unit, "source").text = key
            target_attributes: dict[str, str] = {
                str(name): str(value) for name, value in metadata.get("target-attributes", {}).items()
            }
            ET.SubElement(unit, "target", target_attributes).text = text
            for note in metadata.get("notes", []):
                # Notes may be plain strings or {"content": ...} mappings.
                note_text: str = str(note.get("content", "")) if isinstance(note, dict) else str(note)
                ET.SubElement(unit, "note").text = note_text

        ET.indent(root, space="  ")
        return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


class XliffFileLoader:
    """Parses XLIFF 1.2 documents into catalogues."""

    def load(self, content: str, locale: str, domain: str = "messages") -> MessageCatalogue:
        """Parse a document into a catalogue holding a single domain.

        The `resname` attribute names the message, falling back to the `<source>` text.
        Units without a `<target>` keep their source text. Empty content gives an empty catalogue.

        Args:
            content (str): XLIFF document.
            locale (str): Locale of the resulting catalogue.
            domain (str): Domain the messages are stored under.

        Returns:
            MessageCatalogue: The parsed catalogue.

        Raises:
            InvalidResourceError: If the content is not well-formed XLIFF.
        """
        catalogue = MessageCatalogue(locale)
        if not content.strip():
            catalogue.add({}, domain)
            return catalogue

        try:
            root: ET.Element = ET.fromstring(content)  # noqa: S314
        except ET.ParseError as err:
            msg: str = f"Unable to parse XLIFF content for locale '{locale}', domain '{domain}': {err}"
            raise InvalidResourceError(msg) from err

        if _local_name(root.tag) != "xliff":
            msg = f"Unexpected root element '{_local_name(root.tag)}' in XLIFF content for locale '{locale}'"
            raise InvalidResourceError(msg)

        messages: dict[str, str] = {}
        for unit in root.iter():
            if _local_name(unit.tag) != "trans-unit":
                continue
            self._load_unit(unit, catalogue, messages, domain)

        catalogue.add(messages, domain)
        logger.debug("Loaded %d messages for locale '%s', domain '%s'", len(messages), locale, domain)
        return catalogue

    def _load_unit(
        self,
        unit: ET.Element,
        catalogue: MessageCatalogue,
        messages: dict[str, str],
        domain: str,
    ) -> None:
        source: str | None = None
        target: ET.Element | None = None
        notes: list[str] = []
        for child in unit:
            name: str = _local_name(child.tag)
            if name == "source":
                source = "".join(child.itertext())
            elif name == "target":
                target = child
            elif name == "note":
                notes.append("".join(child.itertext()))

        key: str | None = unit.get("resname") or source
        if not key:
            logger.debug("Skipping trans-unit without a name (id=%s)", unit.get("id"))
            return

        messages[key] = "".join(target.itertext()) if target is not None else (source or "")

        metadata: dict[str, Any] = {}
        if notes:
            metadata["notes"] = notes
        if target is not None and target.attrib:
            metadata["target-attributes"] = dict(target.attrib)
        if metadata:
            catalogue.set_metadata(key, metadata, domain)
