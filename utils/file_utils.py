from __future__ import annotations

import os
from pathlib import Path

__all__: list[str] = [
    "FileMissingError",
    "FilePermissionError",
    "FileUtils",
    "FileUtilsError",
    "UnsupportedFileFormatError",
]


class FileUtils:
    """Utility class for file operations with safety checks.

    Provides methods to resolve paths, validate file types, and locate translation files.
    """

    @staticmethod
    def resolve_path(path: str | Path, *, strict: bool = False) -> Path:
        """Convert a user-input path to an absolute path safely.

        Expands environment variables (e.g., $HOME, %APPDATA%), expands ~ to the home directory,
        and resolves relative paths based on the current working directory.
        Optionally resolves symbolic links with `.resolve()`.

        Args:
            path (str | Path): The input path (e.g., "~/translations/$APP_ENV").
            strict (bool): Whether to raise an exception if the path does not exist. Defaults to False.

        Returns:
            Path: The converted absolute `Path` object.
        """
        path_str = str(path)
        expanded: str = os.path.expandvars(path_str)
        user_expanded: Path = Path(expanded).expanduser()

        resolved_path: Path
        if user_expanded.is_absolute():
            resolved_path = user_expanded.resolve(strict=strict)
        else:
            resolved_path = (Path.cwd() / user_expanded).resolve(strict=strict)
        return resolved_path

    @staticmethod
    def validate_file_path(file_path: Path, suffix: list[str] | str) -> None:
        """Validate that a file exists and has an allowed suffix.

        Args:
            file_path (Path): The path to the file to validate.
            suffix (list[str] | str): Allowed file suffix(es) (e.g., [".xlf", ".xliff"] or ".xlf").

        Raises:
            FileMissingError: If the path does not name an existing file.
            UnsupportedFileFormatError: If the file's suffix is not in the allowed list.
        """

        if isinstance(suffix, str):
            suffix = [suffix]

        if not file_path.is_file():
            msg = f"File does not exist: {file_path}"
            raise FileMissingError(msg)
        if file_path.suffix.lower() not in [s.lower() for s in suffix]:
            msg = f"Unsupported file format: '{file_path.suffix}'. Supported formats are: {', '.join(suffix)}"
            raise UnsupportedFileFormatError(msg)

    @staticmethod
    def catalogue_path(directory: Path, domain: str, locale: str) -> Path:
        """Return the path of the translation file of a domain and locale (`{domain}.{locale}.xlf`)."""
        return directory / f"{domain}.{locale}.xlf"

    @staticmethod
    def write_text(file_path: Path, content: str) -> None:
        """Write a UTF-8 text file, creating missing parent directories.

        Raises:
            FilePermissionError: If the file or its directory cannot be written.
        """
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except PermissionError as err:
            msg = f"Insufficient permissions to write the file: {file_path}"
            raise FilePermissionError(msg) from err


class FileUtilsError(Exception):
    """Custom exception for FileUtils-related errors."""


class FileMissingError(FileUtilsError):
    """Custom exception for file missing errors."""


class FilePermissionError(FileUtilsError):
    """Custom exception for file permission errors."""


class UnsupportedFileFormatError(FileUtilsError):
    """Custom exception for unsupported file format errors."""
