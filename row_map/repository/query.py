"""Entity queries.

An EntityQuery is a SELECT over the key column of one table whose results
are turned into entities through the owning store.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_map.core.enums import QueryType
from row_map.core.exceptions import InsufficientRows, MalformedValue
from row_map.query.builder import QueryBuilder

if TYPE_CHECKING:
    from row_map.repository.store import EntityStore

T = TypeVar("T")


def _first_value(row: dict[str, Any]) -> Any:
    return next(iter(row.values()))


class EntityQuery(QueryBuilder, Generic[T]):
    """SELECT builder that yields identity-mapped entities."""

    def __init__(self, store: EntityStore[Any]) -> None:
        descriptor = store.descriptor
        super().__init__(
            QueryType.SELECT,
            descriptor.table,
            [descriptor.key],
            connection=store.connection,
        )
        self._store = store

    def find(self, amount: int = 1) -> Any:
        """Fetch the first *amount* entities.

        Returns:
            For ``amount == 1`` the entity, or None when nothing matches.
            Otherwise a list of exactly *amount* entities.

        Raises:
            MalformedValue: amount is lower than 1.
            InsufficientRows: Fewer than *amount* rows match (amount > 1).
        """
        amount = int(amount)
        if amount < 1:
            raise MalformedValue("cannot request 0 or fewer entities")

        rows = self.limit(amount).execute().rows
        if amount == 1:
            if not rows:
                return None
            return self._store.by_key(_first_value(rows[0]))

        if len(rows) < amount:
            raise InsufficientRows(amount, len(rows))
        return [self._store.by_key(_first_value(row)) for row in rows]

    def all(self) -> Iterator[T]:
        """Yield every matching entity."""
        for row in self.execute():
            entity = self._store.by_key(_first_value(row))
            if entity is not None:
                yield entity

    def count(self) -> int:
        """Count the rows matching the conditions added so far."""
        counter = QueryBuilder(QueryType.COUNT, self.table, connection=self.connection)
        counter._wheres = list(self._wheres)
        return int(counter.execute().scalar() or 0)
