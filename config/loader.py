"""Configuration file loader and validator.

Handles reading, formatting, and validating settings from the INI configuration file.
Raises exceptions for any issues encountered during loading.

The `[PHRASE]` section either holds a complete `DSN` or the parts it is assembled from
(`PROJECT_ID`, `API_TOKEN`, `ENDPOINT`, `USER_AGENT`). `[READ]` and `[WRITE]` are free-form
option maps merged over the `read`/`write` options of the DSN.
"""

from __future__ import annotations

import ast
import configparser
import copy
import os
from configparser import ConfigParser
from dataclasses import fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from config.dsn import Dsn, DsnError
from core.version import VERSION
from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

API_TOKEN_ENV: Final[str] = "PHRASE_API_TOKEN"
DEFAULT_USER_AGENT: Final[str] = f"phrase-sync/{VERSION}"

# Sections holding free-form option maps instead of typed fields.
OPTION_SECTIONS: Final[dict[str, str]] = {"READ": "read", "WRITE": "write"}


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    This class reads the configuration file, applies formatting rules, resolves the provider
    connection string and validates settings.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        debug (bool): Optional override enabling debug logging.
        domains (list[str] | None): Optional override for the synchronized domains.
        locales (list[str] | None): Optional override for the synchronized locales.

    Attributes:
        config (Config): The loaded configuration.
        dsn (Dsn): Connection string of the Phrase project, with the `[READ]`/`[WRITE]`
            options merged in.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        **args,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        # DSNs and tokens may contain '%', which must not be taken for interpolation.
        parser: ConfigParser = ConfigParser(interpolation=None)

        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self.config.GENERAL.SCRIPT_NAME = script_name
        self._convert_settings(parser)
        self._convert_option_sections(parser)

        # Apply command-line argument overrides
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
            self.config.GENERAL.LOG_LEVEL = "DEBUG"
        if args.get("domains"):
            self.config.SYNC.DOMAINS = list(args["domains"])
        if args.get("locales"):
            self.config.SYNC.LOCALES = list(args["locales"])

        env_token: str | None = os.environ.get(API_TOKEN_ENV)
        if env_token:
            logger.debug("Using the API token from '%s'", API_TOKEN_ENV)
            self.config.PHRASE.API_TOKEN = env_token

        self._validate_settings()
        self.dsn: Dsn = self._resolve_dsn()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Convert configuration settings from the parser to the Config object.

        Args:
            parser (ConfigParser): Parsed INI data.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if section.name in OPTION_SECTIONS:
                continue
            self._convert_section_field(parser, formatter, section)

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section: DataclassField[Any]
    ) -> None:
        """Convert all fields in a configuration section.

        Args:
            parser (ConfigParser): Parsed INI data.
            formatter (_ConfigFormatter): Formatter used to coerce string values to typed values.
            section (Field[Any]): Target configuration section dataclass field.

        Raises:
            ConfigFormatError: If a value fails to format correctly.
        """
        for key in fields(getattr(self.config, section.name)):
            try:
                parser[section.name][key.name]
            except KeyError:
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value = formatter.apply_format(section, key)
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _convert_option_sections(self, parser: ConfigParser) -> None:
        """Copy the free-form `[READ]` and `[WRITE]` sections into option maps."""
        for section_name in OPTION_SECTIONS:
            if not parser.has_section(section_name):
                continue
            options: dict[str, Any] = {
                key: _parse_option_value(value) for key, value in parser.items(section_name)
            }
            setattr(self.config, section_name, options)
            logger.debug("Loaded %d options from [%s]", len(options), section_name)

    def _validate_settings(self) -> None:
        """Validate the Phrase connection and synchronization settings.

        Raises:
            ConfigValueError: If a required value is missing or out of range.
            ConfigTypeError: If a list setting holds something other than strings.
        """
        phrase = self.config.PHRASE
        if not phrase.DSN:
            self._require("PHRASE", "PROJECT_ID")
            self._require("PHRASE", "API_TOKEN")
        self._require("PHRASE", "DEFAULT_LOCALE")

        if phrase.TIMEOUT <= 0:
            msg: str = f"'PHRASE.TIMEOUT' must be a positive number of seconds: {phrase.TIMEOUT}"
            raise ConfigValueError(msg)

        for key_name in ("DOMAINS", "LOCALES"):
            value: Any = getattr(self.config.SYNC, key_name)
            if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
                msg = f"'SYNC.{key_name}' must be a list of strings: {value!r}"
                raise ConfigTypeError(msg)

    def _require(self, section_name: str, key_name: str) -> None:
        value: str = getattr(getattr(self.config, section_name), key_name)
        if not value:
            msg: str = f"'{section_name}.{key_name}' is required but not set."
            raise ConfigValueError(msg)

    def _resolve_dsn(self) -> Dsn:
        """Build the project connection string from the `[PHRASE]` settings.

        Raises:
            ConfigValueError: If the connection string is invalid.
        """
        phrase = self.config.PHRASE
        try:
            if phrase.DSN:
                dsn: Dsn = Dsn.from_string(phrase.DSN)
                if self.config.PHRASE.API_TOKEN:
                    dsn = replace(dsn, password=self.config.PHRASE.API_TOKEN)
            else:
                dsn = Dsn(
                    scheme="phrase",
                    host=phrase.ENDPOINT or "default",
                    user=phrase.PROJECT_ID,
                    password=phrase.API_TOKEN,
                )
        except DsnError as err:
            msg: str = f"Invalid value for PHRASE.DSN: {err}"
            raise ConfigValueError(msg) from err

        options: dict[str, Any] = copy.deepcopy(dsn.options)
        if phrase.USER_AGENT or "userAgent" not in options:
            options["userAgent"] = phrase.USER_AGENT or DEFAULT_USER_AGENT
        for section_name, option_name in OPTION_SECTIONS.items():
            configured: dict[str, Any] = getattr(self.config, section_name)
            if configured:
                base: Any = options.get(option_name)
                options[option_name] = _merge_options(base if isinstance(base, dict) else {}, configured)
        return replace(dsn, options=options)


def _parse_option_value(value: str) -> Any:
    """Parse a free-form option as a Python literal, or keep it as a plain string."""
    try:
        return ast.literal_eval(value)
    except (ValueError, SyntaxError):
        return value


def _merge_options(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current: Any = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_options(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list, dict)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert INI value to the expected Python type based on the Config field type.

        Args:
            section (DataclassField[Any]): Configuration section field containing the key.
            key (DataclassField[Any]): Target field within the section.

        Returns:
            Any: Parsed value coerced to the type declared in the config dataclass.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[
            type[bool | int | float | str],
            Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float | str],
        ] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float | str] | None = (
            formatters.get(type(getattr(getattr(self.config, section.name), key.name)))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        """Convert INI string to float."""
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return float(value)

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        """Convert INI string to integer."""
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return int(float(value))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        """Convert INI string to boolean."""
        return self.parser.getboolean(section.name, key.name)

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Take an INI string verbatim, dropping one pair of enclosing quotes."""
        value: str = self.parser.get(section.name, key.name).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            return value[1:-1]
        return value
