"""Immutable query description for the remote store.

A ``Query`` mirrors the chained filter style of the hosted REST API
(``eq``, ``in``, ``ilike``, ``or``, ``order``, ``range``) without binding to
its wire format. Adapters render it: the PostgREST adapter into URL
parameters, the in-memory store into predicates over dict rows.

Every builder method returns a new ``Query``; instances are safe to share
between the count query and the data query of one page load.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class FilterOperator(str, Enum):
    """Comparison operators supported by the store contract."""

    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    IN = "in"
    ILIKE = "ilike"
    IS_NOT_NULL = "not.is"


@dataclass(frozen=True)
class Filter:
    """A single column predicate.

    For ``ILIKE`` the value is a SQL-style pattern where ``%`` matches any
    run of characters.
    """

    column: str
    operator: FilterOperator
    value: Any = None


@dataclass(frozen=True)
class SearchClause:
    """Case-insensitive substring match of ``term`` against any of ``columns``."""

    columns: tuple[str, ...]
    term: str


@dataclass(frozen=True)
class Ordering:
    """Sort key for a query."""

    column: str
    ascending: bool = True


@dataclass(frozen=True)
class Query:
    """Description of a read against one table.

    Attributes:
        table: Table (REST resource) name
        columns: Column list in select syntax ("*" for all)
        filters: Conjunction of column predicates
        searches: Disjunctive substring searches, each ANDed with the filters
        ordering: Sort keys, applied in order
        offset: First row to return (0-based)
        max_rows: Maximum rows to return
    """

    table: str
    columns: str = "*"
    filters: tuple[Filter, ...] = ()
    searches: tuple[SearchClause, ...] = ()
    ordering: tuple[Ordering, ...] = ()
    offset: int | None = None
    max_rows: int | None = None

    def select(self, columns: str) -> Query:
        return replace(self, columns=columns)

    def _with_filter(self, column: str, operator: FilterOperator, value: Any) -> Query:
        return replace(self, filters=(*self.filters, Filter(column, operator, value)))

    def eq(self, column: str, value: Any) -> Query:
        return self._with_filter(column, FilterOperator.EQ, value)

    def neq(self, column: str, value: Any) -> Query:
        return self._with_filter(column, FilterOperator.NEQ, value)

    def lt(self, column: str, value: Any) -> Query:
        return self._with_filter(column, FilterOperator.LT, value)

    def in_(self, column: str, values: Iterable[Any]) -> Query:
        """Batch lookup: ``column`` is one of ``values``."""
        return self._with_filter(column, FilterOperator.IN, tuple(values))

    def ilike(self, column: str, pattern: str) -> Query:
        return self._with_filter(column, FilterOperator.ILIKE, pattern)

    def is_not_null(self, column: str) -> Query:
        return self._with_filter(column, FilterOperator.IS_NOT_NULL, None)

    def search(self, columns: Iterable[str], term: str | None) -> Query:
        """Match ``term`` as a substring of any of ``columns``.

        A blank term leaves the query unchanged, so an empty search is
        the same query as no search.
        """
        if term is None or not term.strip():
            return self
        clause = SearchClause(columns=tuple(columns), term=term.strip())
        return replace(self, searches=(*self.searches, clause))

    def order(self, column: str, *, ascending: bool = True) -> Query:
        return replace(self, ordering=(*self.ordering, Ordering(column, ascending)))

    def range(self, start: int, end: int) -> Query:
        """Restrict to rows ``start`` through ``end`` inclusive."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid range: {start}-{end}")
        return replace(self, offset=start, max_rows=end - start + 1)

    def limit(self, count: int) -> Query:
        if count < 0:
            raise ValueError(f"Invalid limit: {count}")
        return replace(self, max_rows=count)

    def for_count(self) -> Query:
        """The same predicates without ordering or paging."""
        return replace(self, ordering=(), offset=None, max_rows=None)

    def describe(self) -> dict[str, Any]:
        """Compact summary for logging (never includes in-list contents)."""
        summary: dict[str, Any] = {"table": self.table}
        if self.filters:
            summary["filters"] = [
                f"{f.column}.{f.operator.value}"
                + (f"[{len(f.value)}]" if f.operator is FilterOperator.IN else "")
                for f in self.filters
            ]
        if self.searches:
            summary["search"] = True
        if self.offset is not None:
            summary["offset"] = self.offset
        if self.max_rows is not None:
            summary["max_rows"] = self.max_rows
        return summary
