"""In-memory remote store.

Evaluates the same ``Query`` objects as the PostgREST adapter over plain
dict rows, and records every call it receives. The unit tests use it to
assert query counts and to inject failures at a given call.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from shared_kernel.remote_store import (
    Filter,
    FilterOperator,
    Query,
    RemoteStoreError,
    Row,
)


@dataclass(frozen=True)
class StoreCall:
    """One recorded call against the store."""

    operation: str
    table: str
    query: Query | None = None
    row_count: int = 0


@dataclass
class _Failure:
    after_calls: int
    error: RemoteStoreError | None


def _like_to_regex(pattern: str) -> re.Pattern[str]:
    parts = (re.escape(part) for part in pattern.split("%"))
    return re.compile(".*".join(parts), re.IGNORECASE | re.DOTALL)


def _matches(row: Mapping[str, Any], f: Filter) -> bool:
    value = row.get(f.column)
    match f.operator:
        case FilterOperator.EQ:
            return value == f.value
        case FilterOperator.NEQ:
            return value is not None and value != f.value
        case FilterOperator.LT:
            return value is not None and value < f.value
        case FilterOperator.IN:
            return value in f.value
        case FilterOperator.ILIKE:
            return value is not None and bool(
                _like_to_regex(str(f.value)).fullmatch(str(value))
            )
        case FilterOperator.IS_NOT_NULL:
            return value is not None
    raise ValueError(f"Unsupported operator: {f.operator}")


def _sort_key(column: str):
    def key(row: Mapping[str, Any]) -> tuple[bool, Any]:
        value = row.get(column)
        return (value is None, value if value is not None else "")

    return key


class InMemoryRemoteStore:
    """``IRemoteStore`` over dict rows held in memory.

    Example:
        store = InMemoryRemoteStore({"people": [{"id": "p1", "client_id": "c1"}]})
        rows = await store.fetch(Query("people").eq("client_id", "c1"))
        assert store.calls_for("people") == 1
    """

    def __init__(self, tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None):
        self._tables: dict[str, list[Row]] = {}
        self._failures: dict[tuple[str, str], _Failure] = {}
        self._successes: dict[tuple[str, str], int] = {}
        self.calls: list[StoreCall] = []
        for table, rows in (tables or {}).items():
            self.seed(table, rows)

    def seed(self, table: str, rows: Iterable[Mapping[str, Any]]) -> None:
        """Append rows to a table without recording a call."""
        self._tables.setdefault(table, []).extend(dict(row) for row in rows)

    def rows(self, table: str) -> list[Row]:
        """Snapshot of a table's rows (copies)."""
        return [dict(row) for row in self._tables.get(table, [])]

    def fail_on(
        self,
        table: str,
        operation: str,
        *,
        after_calls: int = 0,
        error: RemoteStoreError | None = None,
    ) -> None:
        """Make calls fail once ``after_calls`` calls have succeeded.

        The failure persists until ``clear_failures`` is called.
        """
        self._failures[(table, operation)] = _Failure(after_calls, error)

    def clear_failures(self) -> None:
        self._failures.clear()

    def calls_for(self, table: str, operation: str | None = None) -> int:
        return sum(
            1
            for call in self.calls
            if call.table == table
            and (operation is None or call.operation == operation)
        )

    def reset_calls(self) -> None:
        self.calls.clear()

    def _check(self, table: str, operation: str) -> None:
        failure = self._failures.get((table, operation))
        succeeded = self._successes.get((table, operation), 0)
        if failure is not None and succeeded >= failure.after_calls:
            raise failure.error or RemoteStoreError(
                f"{table}: could not reach the data service",
                table=table,
                operation=operation,
            )
        self._successes[(table, operation)] = succeeded + 1

    def _select(self, query: Query) -> list[Row]:
        rows = [
            row
            for row in self._tables.get(query.table, [])
            if all(_matches(row, f) for f in query.filters)
            and all(
                any(
                    search.term.lower() in str(row.get(column) or "").lower()
                    for column in search.columns
                )
                for search in query.searches
            )
        ]
        for ordering in reversed(query.ordering):
            rows.sort(key=_sort_key(ordering.column), reverse=not ordering.ascending)
        start = query.offset or 0
        end = start + query.max_rows if query.max_rows is not None else None
        return rows[start:end]

    def _project(self, row: Row, columns: str) -> Row:
        if columns.strip() == "*":
            return dict(row)
        wanted = [c.strip() for c in columns.split(",")]
        return {c: row.get(c) for c in wanted}

    async def fetch(self, query: Query) -> list[Row]:
        self.calls.append(StoreCall("select", query.table, query))
        self._check(query.table, "select")
        return [self._project(row, query.columns) for row in self._select(query)]

    async def fetch_one(self, query: Query) -> Row | None:
        rows = await self.fetch(query.limit(1))
        return rows[0] if rows else None

    async def count(self, query: Query) -> int:
        self.calls.append(StoreCall("count", query.table, query))
        self._check(query.table, "count")
        return len(self._select(query.for_count()))

    async def insert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        on_conflict: str | None = None,
    ) -> list[Row]:
        self.calls.append(StoreCall("insert", table, None, len(rows)))
        self._check(table, "insert")
        existing = self._tables.setdefault(table, [])
        key_columns = [c.strip() for c in on_conflict.split(",")] if on_conflict else []
        seen = {tuple(row.get(c) for c in key_columns) for row in existing}

        inserted: list[Row] = []
        for row in rows:
            if key_columns:
                key = tuple(row.get(c) for c in key_columns)
                if key in seen:
                    continue
                seen.add(key)
            stored = dict(row)
            stored.setdefault("id", str(uuid.uuid4()))
            existing.append(stored)
            inserted.append(dict(stored))
        return inserted

    async def delete(self, query: Query) -> int:
        self.calls.append(StoreCall("delete", query.table, query))
        self._check(query.table, "delete")
        doomed = {id(row) for row in self._select(query.for_count())}
        table = self._tables.get(query.table, [])
        self._tables[query.table] = [row for row in table if id(row) not in doomed]
        return len(doomed)

    async def aclose(self) -> None:
        return None
