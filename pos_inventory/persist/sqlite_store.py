"""
SQLite-backed key-value store for the collection cache.

Uses SQLite with separate tables per namespace:
- collections: cache key → serialized document list envelope
- timestamps: "<collection key>.lastFetchTime" / ".lastUpdateTime" → instant

All values stored as BLOB with a write timestamp for inspection.
"""

import sqlite3
import time
from pathlib import Path
from typing import Optional

from ..errors import StorageError

TABLES = ("collections", "timestamps")


class KVStore:
    """
    File-backed SQLite key-value store.

    Synchronous and durable: every write is committed before returning, so the
    cache and ledger survive process restarts. Any SQLite failure is raised as
    StorageError.
    """

    def __init__(self, db_path: Path | str):
        """
        Initialize KV store at given path.

        Args:
            db_path: Path to SQLite database file (":memory:" for a throwaway store)
        """
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Served from the API worker thread as well as the event loop thread
        self._conn = sqlite3.connect(
            str(db_path),
            check_same_thread=False,
            timeout=10.0,
        )

        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")

        self._init_tables()

    def _init_tables(self) -> None:
        """Create namespace tables if they don't exist."""
        for table in TABLES:
            self._conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    ts REAL NOT NULL
                )
            """)

        self._conn.commit()

    @staticmethod
    def _check_table(table: str) -> None:
        if table not in TABLES:
            raise ValueError(f"Unknown table: {table}")

    def set(self, table: str, key: str, value: bytes) -> None:
        """
        Set a key-value pair in the specified table.

        Args:
            table: Table name (collections, timestamps)
            key: String key
            value: Binary value

        Raises:
            StorageError: If the write could not be committed
        """
        self._check_table(table)
        try:
            self._conn.execute(
                f"INSERT OR REPLACE INTO {table} (key, value, ts) VALUES (?, ?, ?)",
                (key, value, time.time())
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {table}/{key}: {e}") from e

    def get(self, table: str, key: str) -> Optional[bytes]:
        """
        Get value for a key from the specified table.

        Args:
            table: Table name
            key: String key

        Returns:
            Binary value if found, None otherwise
        """
        self._check_table(table)
        try:
            cursor = self._conn.execute(
                f"SELECT value FROM {table} WHERE key = ?",
                (key,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {table}/{key}: {e}") from e

        return row[0] if row else None

    def delete(self, table: str, key: str) -> bool:
        """
        Delete a key from the specified table.

        Returns:
            True if a row was removed
        """
        self._check_table(table)
        try:
            cursor = self._conn.execute(
                f"DELETE FROM {table} WHERE key = ?",
                (key,)
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete {table}/{key}: {e}") from e
        return cursor.rowcount > 0

    def list_keys(self, table: str, prefix: str = "") -> list[str]:
        """
        List keys in a table, optionally restricted to a prefix.

        Args:
            table: Table name
            prefix: Key prefix filter

        Returns:
            Sorted list of keys
        """
        self._check_table(table)
        cursor = self._conn.execute(
            f"SELECT key FROM {table} WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix)
        )
        return [row[0] for row in cursor.fetchall()]

    def purge_table(self, table: str) -> int:
        """
        Delete all entries from a table.

        Returns:
            Number of rows deleted
        """
        self._check_table(table)
        cursor = self._conn.execute(f"SELECT COUNT(*) FROM {table}")
        count = cursor.fetchone()[0]

        self._conn.execute(f"DELETE FROM {table}")
        self._conn.commit()

        return count

    def stats(self, table: str) -> dict:
        """
        Get statistics for a table.

        Returns:
            Dict with count, total_bytes, oldest_ts, newest_ts
        """
        self._check_table(table)
        cursor = self._conn.execute(f"""
            SELECT
                COUNT(*) as count,
                SUM(LENGTH(value)) as total_bytes,
                MIN(ts) as oldest_ts,
                MAX(ts) as newest_ts
            FROM {table}
        """)
        row = cursor.fetchone()

        return {
            "count": row[0] or 0,
            "total_bytes": row[1] or 0,
            "oldest_ts": row[2] or 0,
            "newest_ts": row[3] or 0,
        }

    def vacuum(self) -> None:
        """
        Reclaim space and optimize database.

        Should be called after purging tables.
        """
        self._conn.execute("VACUUM")
        self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
