"""
Key-Value Storage
=================

Single-slot text storage used by the post cache. The SQLite backend keeps
one table of key/value rows; the memory backend is a plain dict.
"""

import sqlite3
import threading
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Generator, Optional

from ..utils.exceptions import CacheError, ErrorCode

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Text key-value slot storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; missing keys are ignored."""


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed store with one ``cache_entries`` table."""

    def __init__(self, db_path: str = "data/sheetblog_cache.db"):
        """Initialize store and create the table if needed.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.lock = threading.Lock()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection, commit on success and always close.

        Raises:
            CacheError: If SQLite reports an error
        """
        with self.lock:
            try:
                conn = sqlite3.connect(self.db_path, timeout=5.0)
            except sqlite3.Error as e:
                raise CacheError(
                    f"Cannot open cache database {self.db_path}: {e}",
                    error_code=ErrorCode.CACHE_READ_FAILED,
                ) from e
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise CacheError(f"Cache database error: {e}") from e
            finally:
                conn.close()

    def get(self, key: str) -> Optional[str]:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO cache_entries (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
        logger.debug(f"Stored cache entry '{key}' ({len(value)} chars)")

    def delete(self, key: str) -> None:
        with self.get_connection() as conn:
            conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
