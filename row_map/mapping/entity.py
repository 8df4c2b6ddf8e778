"""Entity base class.

Subclasses declare their table with an ``__entity__`` descriptor. A property
is generated for every declared field, routed through ``get``/``set`` so the
descriptor's read and write policy always applies:

    class Post(Entity):
        __entity__ = (
            entity("posts")
            .key("id")
            .field("title")
            .reference("author", "User")
            .build()
        )

    post = session.get(Post, 1)
    post.title = "Hello"       # same as post.set("title", "Hello")
    post.author.name           # a User from the same session

Instances are created by an EntityStore only.
"""

from __future__ import annotations

import sys
from typing import Any, ClassVar

from row_map.core.exceptions import (
    DescriptorError,
    FieldNotReadable,
    FieldNotWritable,
    RowNotFound,
    TypeMismatch,
    UnknownField,
)
from row_map.mapping.descriptor import (
    EntityDescriptor,
    lookup_entity_class,
    register_entity_class,
)


# Instance attributes set by Entity.__init__; a generated property would shadow them
_INSTANCE_ATTRIBUTES = frozenset({"_store", "_pk", "_data", "_changes"})

# Values accepted as a raw key for a reference field
_KEY_TYPES = (str, int, float, bytes)


def _field_property(name: str) -> property:
    def getter(self: Entity) -> Any:
        return self.get(name)

    def setter(self: Entity, value: Any) -> None:
        self.set(name, value)

    return property(getter, setter, doc=f"The ``{name}`` field.")


class Entity:
    """Base class for identity-mapped entities."""

    __entity__: ClassVar[EntityDescriptor | None] = None
    _resolved_references: ClassVar[dict[str, type[Entity]]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        descriptor = cls.__dict__.get("__entity__")
        if descriptor is None:
            return
        if not isinstance(descriptor, EntityDescriptor):
            raise DescriptorError(f"{cls.__name__}.__entity__ must be an EntityDescriptor")

        cls._resolved_references = {}
        for name in sorted(descriptor.fields):
            if name in cls.__dict__:
                continue
            if hasattr(Entity, name) or name in _INSTANCE_ATTRIBUTES:
                raise DescriptorError(
                    f"Field {descriptor.table}.{name} clashes with the Entity API"
                )
            setattr(cls, name, _field_property(name))
        register_entity_class(cls)

    def __init__(self, store: Any, pk: Any, data: dict[str, Any]) -> None:
        self._store = store
        self._pk = pk
        self._data = data
        self._changes: dict[str, Any] = {}

    @classmethod
    def descriptor(cls) -> EntityDescriptor:
        if cls.__entity__ is None:
            raise DescriptorError(f"{cls.__name__} has no __entity__ descriptor")
        return cls.__entity__

    @classmethod
    def reference_class(cls, name: str) -> type[Entity] | None:
        """Return the entity class a reference field points to, or None."""
        descriptor = cls.descriptor()
        target = descriptor.references.get(name)
        if target is None:
            return None
        if not isinstance(target, str):
            return target

        resolved = cls._resolved_references.get(name)
        if resolved is None:
            candidate = getattr(sys.modules.get(cls.__module__), target, None)
            if not (isinstance(candidate, type) and issubclass(candidate, Entity)):
                candidate = lookup_entity_class(target)
            if candidate is None:
                raise DescriptorError(
                    f"Cannot resolve entity class {target!r} for {descriptor.table}.{name}"
                )
            resolved = cls._resolved_references[name] = candidate
        return resolved

    @property
    def pk(self) -> Any:
        """The primary key value. Never changes."""
        return self._pk

    @property
    def store(self) -> Any:
        """The EntityStore this instance belongs to."""
        return self._store

    @property
    def changes(self) -> dict[str, Any]:
        """Pending changes: field → raw value (reference fields hold keys)."""
        return dict(self._changes)

    @property
    def is_dirty(self) -> bool:
        return bool(self._changes)

    def get(self, name: str) -> Any:
        """Return the current value of a field.

        Raises:
            FieldNotReadable: The descriptor does not allow reading the field.
            UnknownField: The loaded row has no such column.
        """
        descriptor = self.descriptor()
        if not descriptor.is_readable(name):
            raise FieldNotReadable(descriptor.table, name)
        if name not in self._data:
            raise UnknownField(descriptor.table, name)
        return self._data[name]

    def set(self, name: str, value: Any) -> Entity:
        """Change a field and record it as pending.

        Reference fields accept a key (loaded through the referenced store),
        an instance of exactly the referenced class, or None.

        Raises:
            FieldNotWritable: The descriptor does not allow writing the field.
            TypeMismatch: An entity of another class, or a value that is not a
                key, was given for a reference.
            RowNotFound: A key was given for a reference but no row has it.
        """
        descriptor = self.descriptor()
        if not descriptor.is_writable(name):
            raise FieldNotWritable(descriptor.table, name)

        raw = value
        target = type(self).reference_class(name)
        if target is not None and value is not None:
            if isinstance(value, Entity):
                if type(value) is not target:
                    raise TypeMismatch(descriptor.table, name, target, type(value))
                raw = value.pk
            elif isinstance(value, _KEY_TYPES):
                value = self._store.session.store(target).by_key(value)
                if value is None:
                    raise RowNotFound(target.descriptor().table, target.descriptor().key, raw)
            else:
                raise TypeMismatch(descriptor.table, name, target, type(value))

        self._data[name] = value
        self._changes[name] = raw
        return self

    def save(self) -> Entity:
        """Write pending changes back. Does nothing when there are none."""
        self._store.save(self)
        return self

    def __enter__(self) -> Entity:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.save()

    def __str__(self) -> str:
        return str(self._pk)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.descriptor().key}={self._pk!r}>"
