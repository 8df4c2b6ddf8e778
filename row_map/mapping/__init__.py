"""Mapping layer - entity descriptors and the Entity base class."""

from __future__ import annotations

from row_map.mapping.builder import EntityDescriptorBuilder, entity
from row_map.mapping.descriptor import EntityDescriptor
from row_map.mapping.entity import Entity

__all__ = [
    "Entity",
    "EntityDescriptor",
    "EntityDescriptorBuilder",
    "entity",
]
