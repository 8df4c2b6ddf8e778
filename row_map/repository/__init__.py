"""Repository layer - identity-mapped entity stores."""

from __future__ import annotations

from row_map.repository.query import EntityQuery
from row_map.repository.session import Session
from row_map.repository.store import EntityStore

__all__ = [
    "EntityStore",
    "EntityQuery",
    "Session",
]
