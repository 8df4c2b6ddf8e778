"""Condition and ordering clauses.

Frozen dataclasses collected by the QueryBuilder and rendered in insertion
order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from row_map.core.enums import Comparator
from row_map.core.exceptions import InvalidComparator


@dataclass(frozen=True)
class WhereCondition:
    """A single condition in a left-to-right AND/OR chain.

    ``or_`` marks a condition that is only tested when the previous one
    failed; otherwise it is conjoined with AND.
    """

    field: Any
    comparator: Comparator
    value: Any
    or_: bool = False

    def __post_init__(self) -> None:
        try:
            comparator = Comparator(self.comparator)
        except ValueError as e:
            raise InvalidComparator(self.comparator) from e
        object.__setattr__(self, "comparator", comparator)


@dataclass(frozen=True)
class OrderRule:
    """A sort rule."""

    field: Any
    descending: bool = False
