"""Configuration loading and validation for the Phrase synchronization tool.

This package provides utilities for loading, parsing, and validating configuration
settings from the phrase_sync.ini file, and for parsing provider connection strings.
"""

from config.dsn import Dsn, DsnError, IncompleteDsnError, MissingRequiredOptionError
from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigLoaderError,
    ConfigTypeError,
    ConfigValueError,
)

__all__: list[str] = [
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
    "Dsn",
    "DsnError",
    "IncompleteDsnError",
    "MissingRequiredOptionError",
]
