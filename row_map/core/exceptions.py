"""RowMap exception hierarchy.

All exceptions are RowMap-specific. Raw driver exceptions are never exposed
to callers; they are wrapped in ConnectionFailure.
"""

from __future__ import annotations

from typing import Any


class RowMapError(Exception):
    """Base exception for all RowMap errors."""


# --- Query building ---


class QueryError(RowMapError):
    """Base for query builder errors."""


class InvalidQueryType(QueryError):
    """Raised when a builder is created with an unknown query type."""

    def __init__(self, query_type: Any) -> None:
        self.query_type = query_type
        super().__init__(f"{query_type!r} is not a valid query type")


class InvalidComparator(QueryError):
    """Raised when a condition uses an unknown comparator."""

    def __init__(self, comparator: Any) -> None:
        self.comparator = comparator
        super().__init__(f"{comparator!r} is not a valid comparator")


class EmptyFieldList(QueryError):
    """Raised when a SELECT, UPDATE or INSERT has no fields to work with."""

    def __init__(self, table: Any, action: str = "select") -> None:
        self.table = table
        self.action = action
        super().__init__(f"No fields provided to {action} for table {table!r}")


class MalformedValue(QueryError):
    """Raised when a clause value cannot be rendered."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Malformed value: {detail}")


class QueryStateError(QueryError):
    """Raised when a builder is modified after it has been rendered."""

    def __init__(self, attempted_action: str) -> None:
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} a query that has already been rendered")


# --- Entities ---


class EntityError(RowMapError):
    """Base for entity store errors."""


class DescriptorError(EntityError):
    """Raised when an entity descriptor is inconsistent."""


class FieldNotReadable(EntityError):
    """Raised when reading a field the descriptor does not expose."""

    def __init__(self, table: Any, field: str) -> None:
        self.table = table
        self.field = field
        super().__init__(f"Field {table}.{field} is not readable")


class FieldNotWritable(EntityError):
    """Raised when writing a field the descriptor does not allow."""

    def __init__(self, table: Any, field: str) -> None:
        self.table = table
        self.field = field
        super().__init__(f"Field {table}.{field} is not writable")


class UnknownField(EntityError):
    """Raised when the loaded row has no such column."""

    def __init__(self, table: Any, field: str) -> None:
        self.table = table
        self.field = field
        super().__init__(f"Field {table}.{field} is not defined")


class TypeMismatch(EntityError):
    """Raised when a reference field is assigned an entity of the wrong type."""

    def __init__(self, table: Any, field: str, expected: type, actual: type) -> None:
        self.table = table
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Value for {table}.{field} must be {expected.__name__}, got {actual.__name__}"
        )


class RowNotFound(EntityError):
    """Raised where a row is required but none matches the key.

    Single-row lookups (``EntityStore.by_key``, ``EntityQuery.find(1)``)
    return ``None`` instead of raising this.
    """

    def __init__(self, table: Any, key_field: str, key: Any) -> None:
        self.table = table
        self.key_field = key_field
        self.key = key
        super().__init__(f"There is no row in {table} with {key_field} = {key!r}")


class InsufficientRows(EntityError):
    """Raised when a batch fetch requests more rows than exist."""

    def __init__(self, requested: int, found: int) -> None:
        self.requested = requested
        self.found = found
        super().__init__(f"Only {found} rows were found, while {requested} were requested")


# --- Adapter ---


class AdapterError(RowMapError):
    """Base for adapter errors."""


class ConnectionFailure(AdapterError):
    """Raised when the backend rejects a statement or the connection is lost."""

    def __init__(self, detail: str, sql: str | None = None) -> None:
        self.detail = detail
        self.sql = sql
        super().__init__(f"Database error: {detail}")
