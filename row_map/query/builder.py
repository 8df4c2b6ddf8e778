"""Fluent SQL query builder.

Assembles SELECT, bulk UPDATE, bulk DELETE and COUNT statements from
conditions, sort rules and pagination, and renders them as SQL text for the
connection's dialect. Values are always quoted by the connection, never
concatenated raw.

Usage:
    query = (
        QueryBuilder(QueryType.SELECT, "posts", ["id", "title"], connection=conn)
        .where("author", Comparator.EQ, 3)
        .or_where("pinned", Comparator.EQ, 1)
        .desc("created_at")
        .limit(10)
    )
    result = query.execute()
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from row_map.core.connection import ResultSet
from row_map.core.enums import Comparator, QueryType
from row_map.core.exceptions import (
    EmptyFieldList,
    InvalidQueryType,
    MalformedValue,
    QueryStateError,
)
from row_map.query.clauses import OrderRule, WhereCondition

logger = logging.getLogger(__name__)

_OPERATORS: dict[Comparator, str] = {
    Comparator.EQ: "=",
    Comparator.NEQ: "!=",
    Comparator.LT: "<",
    Comparator.GT: ">",
    Comparator.LTEQ: "<=",
    Comparator.GTEQ: ">=",
}


def _coerce_query_type(query_type: Any) -> QueryType:
    if isinstance(query_type, bool):
        raise InvalidQueryType(query_type)
    try:
        return QueryType(query_type)
    except ValueError as e:
        raise InvalidQueryType(query_type) from e


def _coerce_amount(amount: Any) -> int:
    """int() the amount and clamp it to zero."""
    return max(0, int(amount))


def entity_key(value: Any) -> Any:
    """Return the primary key of an entity, or *value* unchanged."""
    pk = getattr(value, "pk", None)
    if pk is not None and not isinstance(value, type) and hasattr(value, "__entity__"):
        return pk
    return value


class QueryBuilder:
    """Builds one SQL statement.

    Builders are write-once-then-render: once rendered or executed they may
    not be modified any more.

    Args:
        query_type: A QueryType (or its integer value).
        table: Table name, or a ``(database, table)`` pair.
        fields: Column list for SELECT; field → value mapping for UPDATE.
        connection: The Connection used for quoting and execution.

    Raises:
        InvalidQueryType: If query_type is unknown.
    """

    def __init__(
        self,
        query_type: QueryType | int,
        table: Any,
        fields: Sequence[Any] | Mapping[str, Any] = (),
        *,
        connection: Any,
    ) -> None:
        self._type = _coerce_query_type(query_type)
        self._table = table
        self._fields = fields
        self._connection = connection
        self._wheres: list[WhereCondition] = []
        self._orders: list[OrderRule] = []
        self._skip: int | None = None
        self._limit: int | None = None
        self._rendered = False

    # -- introspection ---------------------------------------------------

    @property
    def query_type(self) -> QueryType:
        return self._type

    @property
    def table(self) -> Any:
        return self._table

    @property
    def fields(self) -> Sequence[Any] | Mapping[str, Any]:
        return self._fields

    @property
    def conditions(self) -> tuple[WhereCondition, ...]:
        return tuple(self._wheres)

    @property
    def orderings(self) -> tuple[OrderRule, ...]:
        return tuple(self._orders)

    @property
    def pagination(self) -> tuple[int | None, int | None]:
        """``(skip, limit)``; either may be None."""
        return self._skip, self._limit

    @property
    def connection(self) -> Any:
        return self._connection

    # -- clauses ---------------------------------------------------------

    def where(self, field: Any, comparator: Comparator | int, value: Any) -> QueryBuilder:
        """Add a condition conjoined with AND."""
        self._check_mutable("add a condition to")
        condition = WhereCondition(field, comparator, value, or_=False)  # type: ignore[arg-type]
        self._wheres.append(condition)
        return self

    def or_where(self, field: Any, comparator: Comparator | int, value: Any) -> QueryBuilder:
        """Add a condition tested only when the previous condition failed."""
        self._check_mutable("add a condition to")
        condition = WhereCondition(field, comparator, value, or_=True)  # type: ignore[arg-type]
        self._wheres.append(condition)
        return self

    def asc(self, field: Any) -> QueryBuilder:
        """Add an ascending sort rule."""
        self._check_mutable("add a sort rule to")
        self._orders.append(OrderRule(field, descending=False))
        return self

    def desc(self, field: Any) -> QueryBuilder:
        """Add a descending sort rule."""
        self._check_mutable("add a sort rule to")
        self._orders.append(OrderRule(field, descending=True))
        return self

    def skip(self, amount: Any) -> QueryBuilder:
        """Set the number of rows skipped."""
        self._check_mutable("paginate")
        self._skip = _coerce_amount(amount)
        return self

    def limit(self, amount: Any) -> QueryBuilder:
        """Set the maximum number of rows affected."""
        self._check_mutable("paginate")
        self._limit = _coerce_amount(amount)
        return self

    # -- rendering -------------------------------------------------------

    def render(self) -> str:
        """Render the statement.

        Raises:
            EmptyFieldList: SELECT without fields or UPDATE without assignments.
            MalformedValue: An IN value that is not a non-empty collection,
                or a REFS value without a key.
            InvalidQueryType: Unknown query type.
        """
        dialect = self._connection.dialect
        table = dialect.table_name(self._table)

        if self._type == QueryType.SELECT:
            if not self._fields:
                raise EmptyFieldList(self._table, "select")
            columns = ", ".join(dialect.field_name(f) for f in self._fields)
            query = f"SELECT {columns} FROM {table}"
            query += self._render_where() + self._render_order()
            query += dialect.limit_clause(self._skip, self._limit)
        elif self._type == QueryType.UPDATE:
            if not isinstance(self._fields, Mapping) or not self._fields:
                raise EmptyFieldList(self._table, "update")
            assignments = ", ".join(
                f"{dialect.field_name(f)} = {self._quote(v)}" for f, v in self._fields.items()
            )
            query = f"UPDATE {table} SET {assignments}"
            query += self._render_where() + self._render_order()
            query += dialect.limit_clause(self._skip, self._limit)
        elif self._type == QueryType.DELETE:
            query = f"DELETE FROM {table}"
            query += self._render_where() + self._render_order()
            query += dialect.limit_clause(self._skip, self._limit)
        elif self._type == QueryType.COUNT:
            query = f"SELECT COUNT(*) FROM {table}" + self._render_where() + " LIMIT 1"
        else:
            raise InvalidQueryType(self._type)

        self._rendered = True
        return query

    def __str__(self) -> str:
        return self.render()

    def execute(self) -> ResultSet:
        """Render the statement and run it on the connection."""
        return self._connection.execute(self.render())

    def _quote(self, value: Any) -> str:
        return self._connection.quote(entity_key(value))

    def _render_where(self) -> str:
        if not self._wheres:
            return ""

        dialect = self._connection.dialect
        parts: list[str] = []
        for i, where in enumerate(self._wheres):
            prefix = "" if i == 0 else ("OR " if where.or_ else "AND ")
            parts.append(prefix + dialect.field_name(where.field) + " " + self._render_test(where))
        return " WHERE " + " ".join(parts)

    def _render_test(self, where: WhereCondition) -> str:
        """Render the comparator and value half of a condition."""
        comparator, value = where.comparator, where.value

        if comparator == Comparator.EQ and value is None:
            return "IS NULL"
        if comparator == Comparator.NEQ and value is None:
            return "IS NOT NULL"
        if comparator == Comparator.IN:
            if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Collection):
                raise MalformedValue("the value for a WHERE IN must be a collection")
            if not value:
                raise MalformedValue("the collection for a WHERE IN is empty")
            return "IN (" + ", ".join(self._quote(v) for v in value) + ")"
        if comparator == Comparator.REFS:
            key = entity_key(value)
            if key is value or key is None:
                raise MalformedValue(f"{value!r} is not an entity with a key")
            return "= " + self._connection.quote(key)
        return _OPERATORS[comparator] + " " + self._quote(value)

    def _render_order(self) -> str:
        if not self._orders:
            return ""
        dialect = self._connection.dialect
        rules = ", ".join(
            dialect.field_name(rule.field) + (" DESC" if rule.descending else " ASC")
            for rule in self._orders
        )
        return " ORDER BY " + rules

    def _check_mutable(self, attempted_action: str) -> None:
        if self._rendered:
            raise QueryStateError(attempted_action)


def new_query(
    query_type: QueryType | int,
    table: Any,
    fields: Sequence[Any] | Mapping[str, Any] = (),
    *,
    connection: Any,
) -> QueryBuilder:
    """Create a QueryBuilder. See QueryBuilder for the arguments."""
    return QueryBuilder(query_type, table, fields, connection=connection)


def render_insert(
    connection: Any,
    table: Any,
    values: Mapping[str, Any],
    returning: str | None = None,
) -> str:
    """Render an INSERT statement for one row.

    Entity values are replaced by their key. When *returning* is given and
    the dialect reports generated keys through RETURNING, the clause is
    appended.
    """
    if not values:
        raise EmptyFieldList(table, "insert")
    dialect = connection.dialect
    columns = ", ".join(dialect.field_name(f) for f in values)
    literals = ", ".join(connection.quote(entity_key(v)) for v in values.values())
    query = f"INSERT INTO {dialect.table_name(table)} ({columns}) VALUES ({literals})"
    if returning is not None and dialect.insert_returning:
        query += " RETURNING " + dialect.field_name(returning)
    return query
