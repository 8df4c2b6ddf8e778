"""Database adapter protocol.

Every adapter module MUST implement this protocol so that Connection can
treat all backends alike.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_map.core.connection import ConnectionConfig
from row_map.core.dialect import Dialect


@runtime_checkable
class Adapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def dialect(self) -> Dialect:
        """Identifier quoting and pagination rules for this backend."""
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        """Open a DB-API connection in autocommit mode."""
        ...

    def close(self, connection: Any) -> None:
        """Close the connection."""
        ...

    def quote(self, connection: Any, value: Any) -> str:
        """Quote a value as an SQL literal using the driver's escaping."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: Any = None,
    ) -> Any:
        """Execute SQL and return a cursor-like object."""
        ...

    def last_insert_id(self, cursor: Any, rows: list[dict[str, Any]]) -> Any:
        """Return the key generated by the INSERT that produced *cursor*."""
        ...
