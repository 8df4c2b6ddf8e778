"""Entity descriptors.

An EntityDescriptor is the immutable, per-class table configuration consumed
by the entity store: table name, key field, readable and writable field sets
and the reference (foreign key) fields.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from row_map.core.exceptions import DescriptorError


@dataclass(frozen=True, eq=False)
class EntityDescriptor:
    """Table configuration for one entity class.

    Attributes:
        table: Table name, or a ``(database, table)`` pair.
        key: Name of the primary key field.
        readable: Fields that may be read.
        writable: Fields that may be written. The key is never writable.
        references: Field name → referenced entity class. A class name
            given as a string is resolved when first needed, which allows
            self references and forward references.
    """

    table: Any
    key: str
    readable: Iterable[str] = frozenset()
    writable: Iterable[str] = frozenset()
    references: Mapping[str, type | str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "readable", frozenset(self.readable))
        object.__setattr__(self, "writable", frozenset(self.writable))
        object.__setattr__(self, "references", MappingProxyType(dict(self.references)))

        if not self.table:
            raise DescriptorError("An entity descriptor needs a table")
        if not self.key:
            raise DescriptorError(f"Entity descriptor for {self.table!r} needs a key field")
        if self.key in self.writable:
            raise DescriptorError(f"Key field {self.table}.{self.key} cannot be writable")
        for name in self.references:
            if name not in self.readable and name not in self.writable:
                raise DescriptorError(
                    f"Reference field {self.table}.{name} must be readable or writable"
                )

    def is_readable(self, name: str) -> bool:
        return name in self.readable

    def is_writable(self, name: str) -> bool:
        return name in self.writable

    def is_reference(self, name: str) -> bool:
        return name in self.references

    @property
    def fields(self) -> frozenset[str]:
        """Every field named by the descriptor."""
        return self.readable | self.writable | {self.key}  # type: ignore[operator]

    def __repr__(self) -> str:
        return f"EntityDescriptor(table={self.table!r}, key={self.key!r})"


# Entity classes by name, used to resolve string references that are not
# found in the referring class's module.
_ENTITY_CLASSES: dict[str, type] = {}


def register_entity_class(cls: type) -> None:
    _ENTITY_CLASSES[cls.__name__] = cls


def lookup_entity_class(name: str) -> type | None:
    return _ENTITY_CLASSES.get(name)
