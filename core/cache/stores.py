"""Key/value stores backing the download response cache.

A store hands out `CacheItem`s: `get_item()` returns an item that is either a hit carrying
the stored value or a miss, and `save()` persists an item after `set()` gave it a value.
Values must be JSON-serializable for the SQLite store.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, Self

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["CacheItem", "CacheStore", "MemoryCacheStore", "SqliteCacheStore"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class CacheItem:
    """A single cache slot as returned by a store."""

    def __init__(self, key: str, value: Any = None, *, hit: bool = False) -> None:
        self.key: str = key
        self._value: Any = value
        self._hit: bool = hit

    def is_hit(self) -> bool:
        return self._hit

    def get(self) -> Any:
        return self._value if self._hit else None

    def set(self, value: Any) -> Self:
        self._value = value
        return self

    @property
    def pending_value(self) -> Any:
        """Value given by `set()`, waiting to be saved."""
        return self._value

    def __repr__(self) -> str:
        return f"CacheItem(key={self.key!r}, hit={self._hit})"


class CacheStore(Protocol):
    def get_item(self, key: str) -> CacheItem: ...

    def save(self, item: CacheItem) -> bool: ...


class MemoryCacheStore:
    """Store living for the lifetime of the process."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def get_item(self, key: str) -> CacheItem:
        if key in self._values:
            return CacheItem(key, self._values[key], hit=True)
        return CacheItem(key)

    def save(self, item: CacheItem) -> bool:
        self._values[item.key] = item.pending_value
        return True

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class SqliteCacheStore:
    """Store persisting values as JSON text in a SQLite database using WAL mode.

    The connection is opened lazily on first use. A row holding invalid JSON is reported as
    a miss, so a damaged cache never stops a download.

    Attributes:
        DB_SCHEMA_VERSION (ClassVar[int]): Cache database schema version.
    """

    DB_SCHEMA_VERSION: ClassVar[int] = 1

    def __init__(self, db_path: str | Path) -> None:
        self._db_path: Path = Path(db_path)
        self._db_conn: sqlite3.Connection | None = None
        logger.debug("SqliteCacheStore instance created for '%s'", self._db_path)

    def __enter__(self) -> Self:
        self._connection()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._db_conn is None:
            self._db_conn = self._initialize_database()
        return self._db_conn

    def _initialize_database(self) -> sqlite3.Connection:
        """Open the database, enable WAL mode and create the tables."""
        try:
            conn: sqlite3.Connection = sqlite3.connect(str(self._db_path))
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS response_cache (
                    cache_key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "INSERT OR IGNORE INTO cache_metadata (key, value) VALUES (?, ?)",
                ("schema_version", str(self.DB_SCHEMA_VERSION)),
            )
            row = conn.execute("SELECT value FROM cache_metadata WHERE key = ?", ("schema_version",)).fetchone()
            if row is not None and row[0] != str(self.DB_SCHEMA_VERSION):
                logger.warning(
                    "Cache DB schema version mismatch (db: %s, expected: %s)", row[0], self.DB_SCHEMA_VERSION
                )
            conn.commit()
        except sqlite3.Error as err:
            msg: str = f"Cache database initialization failed: {err}"
            logger.critical(msg)
            raise RuntimeError(msg) from err
        else:
            logger.info("Cache database '%s' initialized with WAL mode", self._db_path)
            return conn

    def close(self) -> None:
        if self._db_conn is not None:
            self._db_conn.close()
            self._db_conn = None
            logger.debug("Cache database connection closed")

    def get_item(self, key: str) -> CacheItem:
        try:
            row = self._connection().execute(
                "SELECT value FROM response_cache WHERE cache_key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as err:
            logger.error("Error reading cache entry '%s': %s", key, err)
            return CacheItem(key)

        if row is None:
            return CacheItem(key)
        try:
            value: Any = json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry '%s'", key)
            return CacheItem(key)
        return CacheItem(key, value, hit=True)

    def save(self, item: CacheItem) -> bool:
        try:
            conn: sqlite3.Connection = self._connection()
            conn.execute(
                "INSERT OR REPLACE INTO response_cache (cache_key, value, updated_at) VALUES (?, ?, ?)",
                (item.key, json.dumps(item.pending_value), int(datetime.now().astimezone().timestamp())),
            )
            conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as err:
            logger.error("Error saving cache entry '%s': %s", item.key, err)
            return False
        return True

    def delete(self, key: str) -> None:
        conn: sqlite3.Connection = self._connection()
        conn.execute("DELETE FROM response_cache WHERE cache_key = ?", (key,))
        conn.commit()

    def clear(self) -> None:
        conn: sqlite3.Connection = self._connection()
        cursor: sqlite3.Cursor = conn.execute("DELETE FROM response_cache")
        conn.commit()
        logger.info("Deleted %d cache entries", cursor.rowcount)
