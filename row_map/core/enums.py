"""Backend, query type and comparator enumerations."""

from __future__ import annotations

from enum import Enum, IntEnum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class QueryType(IntEnum):
    """Statement kinds the query builder can render."""

    SELECT = 0
    UPDATE = 1
    DELETE = 2
    COUNT = 3


class Comparator(IntEnum):
    """Condition comparators."""

    EQ = 0
    NEQ = 1
    LT = 2
    GT = 3
    IN = 4
    LTEQ = 5
    GTEQ = 6
    REFS = 7
