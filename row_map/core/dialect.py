"""SQL dialects.

A Dialect knows how to quote identifiers and how to spell pagination for one
backend. Value quoting is not part of the dialect: it always goes through the
driver (see Connection.quote).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from row_map.core.enums import DatabaseBackend
from row_map.core.exceptions import MalformedValue

# Field name rendered without quoting ("SELECT * FROM ...")
ALL_FIELDS = "*"


@dataclass(frozen=True)
class Dialect:
    """Identifier quoting and pagination rules for a backend."""

    backend: DatabaseBackend
    quote_char: str
    max_limit: int
    offset_keyword: bool = False  # LIMIT n OFFSET m instead of LIMIT m, n
    insert_returning: bool = False  # generated keys come back via RETURNING

    def quote_identifier(self, name: Any) -> str:
        """Wrap *name* in the delimiter, doubling any embedded delimiter."""
        q = self.quote_char
        return q + str(name).replace(q, q + q) + q

    def field_name(self, field: Any) -> str:
        """Render a field reference.

        Accepts a plain name or a ``(table, field)`` pair, which renders in
        ``table.field`` notation.
        """
        if isinstance(field, (tuple, list)):
            if len(field) > 1:
                return self.quote_identifier(field[0]) + "." + self.quote_identifier(field[1])
            if len(field) == 1:
                field = field[0]
            else:
                raise MalformedValue("the given field name is an empty sequence")
        if field == ALL_FIELDS:
            return ALL_FIELDS
        return self.quote_identifier(field)

    def table_name(self, table: Any) -> str:
        """Render a table reference: a name or a ``(database, table)`` pair."""
        if isinstance(table, (tuple, list)):
            if not table:
                raise MalformedValue("the given table name is an empty sequence")
            if len(table) > 1:
                return self.quote_identifier(table[0]) + "." + self.quote_identifier(table[1])
            table = table[0]
        return self.quote_identifier(table)

    def limit_clause(self, skip: int | None, limit: int | None) -> str:
        """Render the pagination suffix (with leading space) or ``""``."""
        if self.offset_keyword:
            if skip is not None:
                count = "ALL" if limit is None else str(limit)
                return f" LIMIT {count} OFFSET {skip}"
            if limit is not None:
                return f" LIMIT {limit}"
            return ""

        if skip is not None:
            count = self.max_limit if limit is None else limit
            return f" LIMIT {skip}, {count}"
        if limit is not None:
            return f" LIMIT {limit}"
        return ""


MYSQL = Dialect(
    backend=DatabaseBackend.MYSQL,
    quote_char="`",
    max_limit=18446744073709551615,
)

# SQLite accepts MySQL-style backtick identifiers and the "LIMIT skip, count"
# form, but its integers are signed 64-bit.
SQLITE = Dialect(
    backend=DatabaseBackend.SQLITE,
    quote_char="`",
    max_limit=9223372036854775807,
)

POSTGRESQL = Dialect(
    backend=DatabaseBackend.POSTGRESQL,
    quote_char='"',
    max_limit=9223372036854775807,
    offset_keyword=True,
    insert_returning=True,
)

_DIALECTS: dict[DatabaseBackend, Dialect] = {
    DatabaseBackend.MYSQL: MYSQL,
    DatabaseBackend.SQLITE: SQLITE,
    DatabaseBackend.POSTGRESQL: POSTGRESQL,
}


def get_dialect(backend: DatabaseBackend | str) -> Dialect:
    """Return the dialect for a backend or driver name."""
    return _DIALECTS[DatabaseBackend(backend)]
