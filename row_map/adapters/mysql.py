"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from typing import Any

from row_map.core.connection import ConnectionConfig
from row_map.core.dialect import MYSQL, Dialect


class MysqlAdapter:
    """MySQL adapter using mysql-connector-python (pure Python protocol)."""

    @property
    def dialect(self) -> Dialect:
        return MYSQL

    def connect(self, config: ConnectionConfig) -> Any:
        """Open an autocommit MySQL connection."""
        import mysql.connector

        kwargs: dict[str, Any] = {"database": config.database}
        for name in ("host", "port", "user", "password"):
            value = getattr(config, name)
            if value is not None:
                kwargs[name] = value
        kwargs.update(config.extra)
        # the pure implementation exposes the converter used for quoting
        return mysql.connector.connect(autocommit=True, use_pure=True, **kwargs)

    def close(self, connection: Any) -> None:
        connection.close()

    def quote(self, connection: Any, value: Any) -> str:
        """Quote with the connection's converter, as cursor parameter binding does."""
        converter = connection.converter
        value = converter.to_mysql(value)
        value = converter.escape(value)
        quoted = converter.quote(value)
        if isinstance(quoted, (bytes, bytearray)):
            return quoted.decode(connection.python_charset)
        return str(quoted)

    def execute(
        self,
        connection: Any,
        sql: str,
        params: Any = None,
    ) -> Any:
        """Execute SQL and return a cursor with dictionary results."""
        cursor = connection.cursor(dictionary=True)
        if params:
            cursor.execute(sql, params)
        else:
            cursor.execute(sql)
        return cursor

    def last_insert_id(self, cursor: Any, rows: list[dict[str, Any]]) -> Any:
        return cursor.lastrowid
