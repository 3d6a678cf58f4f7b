from __future__ import annotations

import logging
import sys
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, TextIO, TypeAlias

if TYPE_CHECKING:
    from pathlib import Path

__all__: list[str] = ["LogLevel", "LoggerUtils"]

LevelType: TypeAlias = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 1 * 1024 * 1024  # 1MB
_LOG_BACKUP_COUNT: Final[int] = 3

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "PhraseSync"


class LogLevel(NamedTuple):
    """Logging level as both name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Process-wide logging setup for the sync tool.

    All module loggers hang below a single namespace logger, so handlers are attached once
    and every module inherits them. Console output is kept at WARNING and above; the
    optional rotating file receives everything down to DEBUG.

    Attributes:
        _LOGGER_NAMESPACE (str): Parent logger name for every module logger.
        _configured (bool): Whether handlers have already been attached.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False

    @classmethod
    def configure(
        cls,
        filename: str | Path = "",
        *,
        level: LevelType = "INFO",
        use_null_console: bool = False,
    ) -> logging.Logger:
        """Attach console and file handlers to the namespace logger.

        Calling this more than once is harmless; only the level is updated on later calls.

        Args:
            filename (str | Path): Absolute path of the log file. Empty disables file logging.
            level (LevelType): Level of the namespace logger.
            use_null_console (bool): Replace the console handler with a NullHandler.

        Returns:
            logging.Logger: The namespace logger.
        """
        root_logger: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        cls.set_level(level)
        if cls._configured:
            return root_logger

        cls._console_logging(root_logger, use_null_console=use_null_console or sys.stderr is None)
        filename = str(filename)
        if filename.strip():
            cls._file_logging(root_logger, filename)

        cls._configured = True
        return root_logger

    @classmethod
    def reset(cls) -> None:
        """Detach every handler from the namespace logger."""
        root_logger: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        cls._configured = False

    @staticmethod
    def _console_logging(root_logger: logging.Logger, *, use_null_console: bool) -> None:
        if use_null_console:
            root_logger.addHandler(NullHandler())
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(Formatter("%(levelname)s: %(message)s"))
        root_logger.addHandler(console_handler)

    @staticmethod
    def _file_logging(root_logger: logging.Logger, filename: str) -> None:
        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            root_logger.error("Incorrect log file name: %s. Logging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname)-8s %(lineno)4d %(name)-36s\t%(funcName)s\t%(message)s")
        )
        root_logger.addHandler(file_handler)

    @classmethod
    def set_level(cls, level: LevelType) -> None:
        """Set the level of the namespace logger.

        Unknown names fall back to INFO with a warning.
        """
        root_logger: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            root_logger.setLevel(DEFAULT_LOG_LEVEL)
            root_logger.warning("Unknown logging level '%s' specified. Logging level set to 'INFO'.", level)

    @classmethod
    def get_level(cls) -> LogLevel:
        level_value: int = logging.getLogger(cls._LOGGER_NAMESPACE).getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger below the namespace logger.

        Args:
            name (str | None): Module name. None returns the namespace logger itself.

        Returns:
            logging.Logger: The logger instance.
        """
        full_name: str | None
        if LoggerUtils._LOGGER_NAMESPACE:
            full_name = f"{LoggerUtils._LOGGER_NAMESPACE}.{name}" if name else LoggerUtils._LOGGER_NAMESPACE
        else:
            full_name = name or None
        return logging.getLogger(full_name)
