"""Query layer - fluent SQL statement builder."""

from __future__ import annotations

from row_map.query.builder import QueryBuilder, new_query, render_insert
from row_map.query.clauses import OrderRule, WhereCondition

__all__ = [
    "QueryBuilder",
    "new_query",
    "render_insert",
    "WhereCondition",
    "OrderRule",
]
