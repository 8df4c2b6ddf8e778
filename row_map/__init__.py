"""RowMap - query builder and identity-mapped entity store."""

from __future__ import annotations

import logging

from row_map.core.connection import Connection, ConnectionConfig, ResultSet
from row_map.core.dialect import Dialect, get_dialect
from row_map.core.enums import Comparator, DatabaseBackend, QueryType
from row_map.core.exceptions import (
    AdapterError,
    ConnectionFailure,
    DescriptorError,
    EmptyFieldList,
    EntityError,
    FieldNotReadable,
    FieldNotWritable,
    InsufficientRows,
    InvalidComparator,
    InvalidQueryType,
    MalformedValue,
    QueryError,
    QueryStateError,
    RowMapError,
    RowNotFound,
    TypeMismatch,
    UnknownField,
)
from row_map.core.log import configure_logging
from row_map.core.settings import Settings, get_settings
from row_map.mapping.builder import entity
from row_map.mapping.descriptor import EntityDescriptor
from row_map.mapping.entity import Entity
from row_map.query.builder import QueryBuilder, new_query, render_insert
from row_map.repository.query import EntityQuery
from row_map.repository.session import Session
from row_map.repository.store import EntityStore

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Connection
    "ConnectionConfig",
    "Connection",
    "ResultSet",
    # Configuration
    "Settings",
    "get_settings",
    "configure_logging",
    # Dialects
    "Dialect",
    "get_dialect",
    # Query builder
    "QueryBuilder",
    "new_query",
    "render_insert",
    # Entities
    "Entity",
    "EntityDescriptor",
    "entity",
    "EntityStore",
    "EntityQuery",
    "Session",
    # Enums
    "DatabaseBackend",
    "QueryType",
    "Comparator",
    # Exceptions
    "RowMapError",
    "QueryError",
    "InvalidQueryType",
    "InvalidComparator",
    "EmptyFieldList",
    "MalformedValue",
    "QueryStateError",
    "EntityError",
    "DescriptorError",
    "FieldNotReadable",
    "FieldNotWritable",
    "UnknownField",
    "TypeMismatch",
    "RowNotFound",
    "InsufficientRows",
    "AdapterError",
    "ConnectionFailure",
]
