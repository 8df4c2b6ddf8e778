"""Session - owner of the entity stores for one connection.

A Session holds one EntityStore per entity class, so the identity map has a
bounded lifetime instead of living in process-wide globals. Leaving a
``with Session(...)`` block flushes pending changes on every exit path.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from row_map.core.connection import Connection, ConnectionConfig
from row_map.mapping.entity import Entity
from row_map.repository.store import EntityStore

T = TypeVar("T", bound=Entity)

logger = logging.getLogger(__name__)


class Session:
    """Entity stores sharing one connection.

    Args:
        connection: The Connection used by every store.
        owns_connection: Close the connection when the session closes.
    """

    def __init__(self, connection: Connection, *, owns_connection: bool = False) -> None:
        self._connection = connection
        self._owns_connection = owns_connection
        self._stores: dict[type[Entity], EntityStore[Any]] = {}
        self._closed = False

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Session:
        """Create a Session with its own Connection."""
        return cls(Connection(config), owns_connection=True)

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def closed(self) -> bool:
        return self._closed

    def store(self, entity_class: type[T]) -> EntityStore[T]:
        """Return the store for *entity_class*, creating it on first use."""
        store = self._stores.get(entity_class)
        if store is None:
            store = self._stores[entity_class] = EntityStore(entity_class, self)
        return store

    def get(self, entity_class: type[T], pk: Any) -> T | None:
        """Shortcut for ``session.store(entity_class).by_key(pk)``."""
        return self.store(entity_class).by_key(pk)

    def flush(self) -> int:
        """Save pending changes of every cached entity.

        Returns:
            The number of entities written.
        """
        written = sum(store.flush() for store in list(self._stores.values()))
        if written:
            logger.debug("Flushed %d entit%s", written, "y" if written == 1 else "ies")
        return written

    def release_all(self) -> None:
        """Empty every store's cache, discarding unsaved changes."""
        for store in self._stores.values():
            store.release_all()

    def close(self) -> None:
        """Flush, empty the caches and close an owned connection."""
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self.release_all()
            self._stores.clear()
            if self._owns_connection:
                self._connection.close()
            self._closed = True

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()
