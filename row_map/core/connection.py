"""Connection configuration and the single synchronous connection.

ConnectionConfig is a Pydantic model for type-safe connection config.
Connection wraps one DB-API connection through a backend adapter and is the
only object the query builder and entity stores talk to.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel

from row_map.core.dialect import Dialect
from row_map.core.exceptions import AdapterError, ConnectionFailure

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for a database connection."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    extra: dict[str, Any] = {}


# Adapter module mapping: driver name → (module_path, class_name)
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "sqlite": ("row_map.adapters.sqlite", "SqliteAdapter"),
    "postgresql": ("row_map.adapters.postgresql", "PostgresqlAdapter"),
    "mysql": ("row_map.adapters.mysql", "MysqlAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load an adapter by driver name."""
    driver_lower = driver.lower()
    if driver_lower not in _ADAPTER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _ADAPTER_MAP[driver_lower]

    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # Check if rows are already dict-like (e.g., psycopg dict_row, MySQL dict cursor)
    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


class ResultSet:
    """Fully fetched result of one statement.

    Rows are read eagerly so the underlying cursor can be closed right away.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]],
        rowcount: int = -1,
        last_insert_id: Any = None,
    ) -> None:
        self.rows = rows
        self.rowcount = rowcount
        self.last_insert_id = last_insert_id

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def fetch_one(self) -> dict[str, Any] | None:
        """Return the first row, or None."""
        return self.rows[0] if self.rows else None

    def fetch_all(self) -> list[dict[str, Any]]:
        return list(self.rows)

    def scalar(self) -> Any:
        """Return the first column of the first row, or None."""
        row = self.fetch_one()
        if row is None:
            return None
        return next(iter(row.values()))

    def __repr__(self) -> str:
        return f"<ResultSet rows={len(self.rows)} rowcount={self.rowcount}>"


class Connection:
    """A single synchronous database connection.

    Provides driver-native value quoting, statement execution, row counts and
    generated-key retrieval. Not thread-safe: use one Connection per thread.
    """

    def __init__(self, config: ConnectionConfig, adapter: Any = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver)
        self._raw: Any = None

    @classmethod
    def connect(cls, config: ConnectionConfig) -> Connection:
        """Create and open a Connection."""
        connection = cls(config)
        connection.open()
        return connection

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def is_open(self) -> bool:
        return self._raw is not None

    @property
    def raw(self) -> Any:
        """The underlying DB-API connection, opened on first use."""
        if self._raw is None:
            self.open()
        return self._raw

    def open(self) -> None:
        """Open the underlying connection if it is not open yet."""
        if self._raw is not None:
            return
        try:
            self._raw = self._adapter.connect(self.config)
        except Exception as e:
            raise ConnectionFailure(f"could not connect to '{self.config.database}': {e}") from e
        logger.info("Opened %s connection to %s", self.config.driver, self.config.database)

    def close(self) -> None:
        """Close the underlying connection."""
        if self._raw is not None:
            self._adapter.close(self._raw)
            self._raw = None
            logger.info("Closed %s connection to %s", self.config.driver, self.config.database)

    def __enter__(self) -> Connection:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def quote(self, value: Any) -> str:
        """Quote *value* as an SQL literal using the driver's own escaping."""
        try:
            return self._adapter.quote(self.raw, value)
        except ConnectionFailure:
            raise
        except Exception as e:
            raise ConnectionFailure(f"could not quote {value!r}: {e}") from e

    def execute(self, sql: str, params: Any = None) -> ResultSet:
        """Execute a single statement and return its fully fetched result."""
        logger.debug("Executing SQL: %s", sql)
        try:
            cursor = self._adapter.execute(self.raw, sql, params)
            try:
                rows = _rows_to_dicts(cursor)
                result = ResultSet(
                    rows=rows,
                    rowcount=int(cursor.rowcount),
                    last_insert_id=self._adapter.last_insert_id(cursor, rows),
                )
            finally:
                cursor.close()
        except ConnectionFailure:
            raise
        except Exception as e:
            raise ConnectionFailure(str(e), sql) from e
        return result
