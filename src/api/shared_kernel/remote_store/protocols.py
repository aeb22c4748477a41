"""Remote store interface (port).

The dashboard loaders depend only on this protocol. The hosted backend is
reached through the PostgREST adapter; tests use the in-memory store.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple, Protocol, runtime_checkable

from shared_kernel.remote_store.exceptions import RemoteStoreError, describe_error
from shared_kernel.remote_store.query import Query

Row = dict[str, Any]


@runtime_checkable
class IRemoteStore(Protocol):
    """Async access to tenant-scoped tables.

    All methods raise ``RemoteStoreError`` on failure; none of them return an
    error value.
    """

    async def fetch(self, query: Query) -> list[Row]:
        """Return the rows matching ``query`` in its requested order."""
        ...

    async def fetch_one(self, query: Query) -> Row | None:
        """Return the first matching row, or None."""
        ...

    async def count(self, query: Query) -> int:
        """Return the exact number of rows matching ``query`` (no rows transferred)."""
        ...

    async def insert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        on_conflict: str | None = None,
    ) -> list[Row]:
        """Insert ``rows`` and return the inserted representation.

        Args:
            table: Target table
            rows: Rows to insert in one request
            on_conflict: Natural key column(s). When given, rows colliding on
                that key are skipped instead of failing the request, so a
                retried batch never duplicates.
        """
        ...

    async def delete(self, query: Query) -> int:
        """Delete the rows matching ``query`` and return how many were removed."""
        ...


class StoreResult(NamedTuple):
    """A ``(data, error)`` pair as returned by result-style client libraries."""

    data: Any
    error: Any = None


def unwrap_result(result: StoreResult, *, table: str, operation: str) -> Any:
    """Collapse a ``(data, error)`` pair into data or a raised RemoteStoreError.

    Lets adapters built on result-style clients and adapters built on raising
    clients present the same contract.
    """
    if result.error is not None:
        status_code = None
        code = None
        if isinstance(result.error, Mapping):
            code = result.error.get("code")
            raw_status = result.error.get("status")
            status_code = int(raw_status) if raw_status is not None else None
        raise RemoteStoreError(
            f"{table}: {describe_error(result.error)}",
            table=table,
            operation=operation,
            status_code=status_code,
            code=code,
        )
    if result.data is None:
        return []
    return result.data
