"""Entity descriptor DSL builder.

Provides a fluent builder for defining entity descriptors.
"""

from __future__ import annotations

from typing import Any

from row_map.core.exceptions import DescriptorError
from row_map.mapping.descriptor import EntityDescriptor


def entity(table: Any) -> EntityDescriptorBuilder:
    """Entry point for the descriptor DSL.

    Args:
        table: Table name, or a ``(database, table)`` pair.

    Returns:
        A builder for chaining field declarations.
    """
    return EntityDescriptorBuilder(table)


class EntityDescriptorBuilder:
    """Fluent builder for entity descriptors."""

    def __init__(self, table: Any) -> None:
        self._table = table
        self._key: str | None = None
        self._readable: set[str] = set()
        self._writable: set[str] = set()
        self._references: dict[str, type | str] = {}

    def key(self, field_name: str) -> EntityDescriptorBuilder:
        """Set the primary key field. The key is readable, never writable."""
        self._key = field_name
        self._readable.add(field_name)
        return self

    def readable(self, *field_names: str) -> EntityDescriptorBuilder:
        """Declare read-only fields."""
        self._readable.update(field_names)
        return self

    def writable(self, *field_names: str) -> EntityDescriptorBuilder:
        """Declare write-only fields."""
        self._writable.update(field_names)
        return self

    def field(self, field_name: str, *, writable: bool = True) -> EntityDescriptorBuilder:
        """Declare a readable field, writable unless told otherwise."""
        self._readable.add(field_name)
        if writable:
            self._writable.add(field_name)
        return self

    def reference(
        self,
        field_name: str,
        entity_class: type | str,
        *,
        writable: bool = True,
    ) -> EntityDescriptorBuilder:
        """Declare a foreign key field resolved into an entity of *entity_class*."""
        self.field(field_name, writable=writable)
        self._references[field_name] = entity_class
        return self

    def build(self) -> EntityDescriptor:
        """Compile and validate the declarations into an EntityDescriptor."""
        if self._key is None:
            raise DescriptorError(f"Entity {self._table!r} must have a key set via .key()")

        return EntityDescriptor(
            table=self._table,
            key=self._key,
            readable=frozenset(self._readable),
            writable=frozenset(self._writable),
            references=dict(self._references),
        )
