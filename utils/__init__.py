"""Utility modules for the Phrase synchronization tool.

This package provides utility functions for logging and file handling.
"""

from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

__all__: list[str] = ["FileUtils", "LoggerUtils"]
