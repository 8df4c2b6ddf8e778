"""Identity-mapped entity store.

One EntityStore exists per entity class per Session. It keeps exactly one
live instance per primary key, loads rows through the query builder on a
cache miss, resolves reference fields through the stores of their own types
and writes pending changes back with builder-generated UPDATEs.

Entries leave the cache only through ``release``/``release_all``. Statements
built with ``bulk_update``/``bulk_delete`` bypass the cache: release the
affected keys afterwards or the cached instances go stale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_map.core.dialect import ALL_FIELDS
from row_map.core.enums import Comparator, QueryType
from row_map.core.exceptions import DescriptorError, EmptyFieldList, RowNotFound
from row_map.mapping.entity import Entity
from row_map.query.builder import QueryBuilder, entity_key, render_insert
from row_map.repository.query import EntityQuery

if TYPE_CHECKING:
    from row_map.mapping.descriptor import EntityDescriptor
    from row_map.repository.session import Session

T = TypeVar("T", bound=Entity)

logger = logging.getLogger(__name__)


class EntityStore(Generic[T]):
    """Identity map and persistence for one entity class.

    Not thread-safe: a store belongs to one Session, which belongs to one
    thread of control.
    """

    def __init__(self, entity_class: type[T], session: Session) -> None:
        if not (isinstance(entity_class, type) and issubclass(entity_class, Entity)):
            raise DescriptorError(f"{entity_class!r} is not an Entity subclass")
        self._entity_class = entity_class
        self._descriptor = entity_class.descriptor()
        self._session = session
        self._cache: dict[Any, T] = {}
        # requested key -> key as stored, for lookups spelled differently (e.g. "1" for 1)
        self._aliases: dict[Any, Any] = {}

    @property
    def entity_class(self) -> type[T]:
        return self._entity_class

    @property
    def descriptor(self) -> EntityDescriptor:
        return self._descriptor

    @property
    def session(self) -> Session:
        return self._session

    @property
    def connection(self) -> Any:
        return self._session.connection

    @property
    def cached_keys(self) -> list[Any]:
        return list(self._cache)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, pk: Any) -> bool:
        return self._aliases.get(pk, pk) in self._cache

    # -- loading ---------------------------------------------------------

    def by_key(self, pk: Any) -> T | None:
        """Return the entity with primary key *pk*, or None if no row has it.

        Raises:
            ConnectionFailure: The backend failed while loading the row.
        """
        cached = self._cache.get(self._aliases.get(pk, pk))
        if cached is not None:
            logger.debug("Cache hit for %s %r", self._entity_class.__name__, pk)
            return cached

        logger.debug("Cache miss for %s %r", self._entity_class.__name__, pk)
        try:
            return self._load(pk)
        except RowNotFound:
            return None

    def _load(self, pk: Any) -> T:
        descriptor = self._descriptor
        query = QueryBuilder(
            QueryType.SELECT, descriptor.table, [ALL_FIELDS], connection=self.connection
        )
        row = (
            query.where(descriptor.key, Comparator.EQ, pk)
            .limit(1)
            .execute()
            .fetch_one()
        )
        if row is None:
            raise RowNotFound(descriptor.table, descriptor.key, pk)

        # Cache under the key as stored, so "1" and 1 share one instance
        key = row.get(descriptor.key, pk)
        existing = self._cache.get(key)
        if existing is not None:
            self._remember_alias(pk, key)
            return existing

        entity = self._entity_class(self, key, dict(row))
        # Registered before references are resolved so that cycles terminate
        self._cache[key] = entity
        try:
            self._resolve_references(entity)
        except BaseException:
            self._cache.pop(key, None)
            raise
        self._remember_alias(pk, key)
        return entity

    def _remember_alias(self, pk: Any, key: Any) -> None:
        if type(pk) is not type(key) or pk != key:
            self._aliases[pk] = key

    def _resolve_references(self, entity: T) -> None:
        data = entity._data
        for name in self._descriptor.references:
            if name not in data:
                continue
            raw = data[name]
            if raw is None:
                continue
            target = self._entity_class.reference_class(name)
            data[name] = self._session.store(target).by_key(raw)  # type: ignore[arg-type]

    @contextmanager
    def checkout(self, pk: Any) -> Iterator[T]:
        """Yield the entity for *pk* and save it on every exit path.

        Raises:
            RowNotFound: No row has the key.
        """
        entity = self.by_key(pk)
        if entity is None:
            raise RowNotFound(self._descriptor.table, self._descriptor.key, pk)
        try:
            yield entity
        finally:
            self.save(entity)

    def select(self) -> EntityQuery[T]:
        """Start a SELECT over this table that yields entities."""
        return EntityQuery(self)

    # -- invalidation ----------------------------------------------------

    def release(self, pk: Any) -> bool:
        """Drop a cached entity, discarding its unsaved changes.

        Returns:
            True if an entity was cached under *pk*.
        """
        key = self._aliases.get(pk, pk)
        entity = self._cache.pop(key, None)
        if entity is None:
            return False
        self._aliases = {alias: k for alias, k in self._aliases.items() if k != key}
        if entity.is_dirty:
            logger.warning(
                "Released %r with %d unsaved change(s)", entity, len(entity._changes)
            )
        return True

    def release_all(self) -> None:
        """Drop every cached entity of this class."""
        self._cache.clear()
        self._aliases.clear()

    # -- writing ---------------------------------------------------------

    def save(self, entity: T) -> T:
        """Write the pending changes of *entity*. No changes, no statement."""
        if not entity._changes:
            return entity
        logger.debug("Saving %d change(s) to %r", len(entity._changes), entity)
        (
            self.bulk_update(entity._changes)
            .where(self._descriptor.key, Comparator.EQ, entity.pk)
            .execute()
        )
        entity._changes.clear()
        return entity

    def flush(self) -> int:
        """Save every cached entity with pending changes.

        Returns:
            The number of entities written.
        """
        dirty = [entity for entity in self._cache.values() if entity.is_dirty]
        for entity in dirty:
            self.save(entity)
        return len(dirty)

    def insert(self, fields: Mapping[str, Any]) -> T:
        """Insert a row and return it as an entity.

        Entity values are stored as their key. The new row is loaded with
        the key given in *fields*, or else the key generated by the backend.
        """
        descriptor = self._descriptor
        if not fields:
            raise EmptyFieldList(descriptor.table, "insert")

        sql = render_insert(self.connection, descriptor.table, fields, returning=descriptor.key)
        result = self.connection.execute(sql)
        if descriptor.key in fields:
            key = entity_key(fields[descriptor.key])
        else:
            key = result.last_insert_id

        entity = self.by_key(key)
        if entity is None:
            raise RowNotFound(descriptor.table, descriptor.key, key)
        return entity

    def bulk_update(self, fields: Mapping[str, Any]) -> QueryBuilder:
        """Start an UPDATE of this table setting *fields*. Bypasses the cache."""
        if not fields:
            raise EmptyFieldList(self._descriptor.table, "update")
        return QueryBuilder(
            QueryType.UPDATE, self._descriptor.table, dict(fields), connection=self.connection
        )

    def bulk_delete(self) -> QueryBuilder:
        """Start a DELETE on this table. Bypasses the cache."""
        return QueryBuilder(QueryType.DELETE, self._descriptor.table, connection=self.connection)

    def __repr__(self) -> str:
        return f"<EntityStore {self._entity_class.__name__} cached={len(self._cache)}>"
