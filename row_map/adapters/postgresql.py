"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from row_map.core.connection import ConnectionConfig
from row_map.core.dialect import POSTGRESQL, Dialect


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlAdapter:
    """PostgreSQL adapter using psycopg (v3+)."""

    @property
    def dialect(self) -> Dialect:
        return POSTGRESQL

    def connect(self, config: ConnectionConfig) -> Any:
        import psycopg
        import psycopg.rows

        return psycopg.connect(
            _build_conninfo(config),
            row_factory=psycopg.rows.dict_row,
            autocommit=True,
            **config.extra,
        )

    def close(self, connection: Any) -> None:
        connection.close()

    def quote(self, connection: Any, value: Any) -> str:
        from psycopg import sql

        return sql.Literal(value).as_string(connection)

    def execute(
        self,
        connection: Any,
        sql: str,
        params: Any = None,
    ) -> Any:
        return connection.execute(sql, params)

    def last_insert_id(self, cursor: Any, rows: list[dict[str, Any]]) -> Any:
        # INSERT ... RETURNING <key> leaves the key in the first row
        if not rows:
            return None
        return next(iter(rows[0].values()))
