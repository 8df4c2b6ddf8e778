"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_map.core.connection import ConnectionConfig
from row_map.core.dialect import SQLITE, Dialect


class SqliteAdapter:
    """SQLite adapter using stdlib sqlite3."""

    @property
    def dialect(self) -> Dialect:
        return SQLITE

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        """Open an autocommit SQLite connection."""
        conn = sqlite3.connect(config.database, isolation_level=None, **config.extra)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def close(self, connection: sqlite3.Connection) -> None:
        connection.close()

    def quote(self, connection: sqlite3.Connection, value: Any) -> str:
        """Quote through SQLite's built-in quote() function."""
        row = connection.execute("SELECT quote(?)", (value,)).fetchone()
        return str(row[0])

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: Any = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, params or {})

    def last_insert_id(self, cursor: sqlite3.Cursor, rows: list[dict[str, Any]]) -> Any:
        return cursor.lastrowid
