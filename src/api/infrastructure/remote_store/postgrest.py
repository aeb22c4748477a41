"""PostgREST adapter for the remote store contract.

Talks to the hosted database's REST endpoint with ``httpx.AsyncClient``.
Queries are rendered into PostgREST's URL grammar; both failure forms
(error payloads on non-2xx responses and transport exceptions) are
normalized into ``RemoteStoreError`` with a readable message.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from infrastructure.observability.probes import (
    DefaultRemoteStoreProbe,
    RemoteStoreProbe,
)
from infrastructure.settings import RemoteStoreSettings
from shared_kernel.remote_store import (
    Filter,
    FilterOperator,
    Query,
    RemoteStoreError,
    Row,
    describe_error,
)


def _quote(value: Any) -> str:
    """Quote a value for use inside PostgREST list and logic syntax."""
    text = _scalar(value)
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _render_filter(f: Filter) -> tuple[str, str]:
    match f.operator:
        case FilterOperator.EQ if f.value is None:
            return f.column, "is.null"
        case FilterOperator.EQ | FilterOperator.NEQ | FilterOperator.LT:
            return f.column, f"{f.operator.value}.{_scalar(f.value)}"
        case FilterOperator.IN:
            return f.column, f"in.({','.join(_quote(v) for v in f.value)})"
        case FilterOperator.ILIKE:
            return f.column, f"ilike.{str(f.value).replace('%', '*')}"
        case FilterOperator.IS_NOT_NULL:
            return f.column, "not.is.null"
    raise ValueError(f"Unsupported operator: {f.operator}")


def render_params(query: Query) -> list[tuple[str, str]]:
    """Render a ``Query`` as PostgREST query parameters (order preserved)."""
    params: list[tuple[str, str]] = [("select", query.columns)]
    params.extend(_render_filter(f) for f in query.filters)

    disjunctions = [
        ",".join(f"{column}.ilike.{_quote(f'*{s.term}*')}" for column in s.columns)
        for s in query.searches
    ]
    if len(disjunctions) == 1:
        params.append(("or", f"({disjunctions[0]})"))
    elif disjunctions:
        params.append(("and", "(" + ",".join(f"or({d})" for d in disjunctions) + ")"))

    if query.ordering:
        params.append(
            (
                "order",
                ",".join(
                    f"{o.column}.{'asc' if o.ascending else 'desc'}"
                    for o in query.ordering
                ),
            )
        )
    if query.offset:
        params.append(("offset", str(query.offset)))
    if query.max_rows is not None:
        params.append(("limit", str(query.max_rows)))
    return params


def parse_content_range(header: str | None) -> int:
    """Extract the total from a ``Content-Range`` header (``0-24/1200``, ``*/0``)."""
    if not header or "/" not in header:
        raise ValueError(f"Missing total in Content-Range: {header!r}")
    total = header.rsplit("/", 1)[1]
    if total == "*":
        raise ValueError("Content-Range total was not computed")
    return int(total)


class PostgrestRemoteStore:
    """``IRemoteStore`` implementation backed by a PostgREST endpoint.

    The adapter owns its ``httpx.AsyncClient`` unless one is injected
    (tests inject a client built on ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: RemoteStoreSettings,
        client: httpx.AsyncClient | None = None,
        probe: RemoteStoreProbe | None = None,
    ):
        self._base_url = settings.rest_url
        self._schema = settings.db_schema
        self._key = settings.service_key.get_secret_value()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._probe = probe or DefaultRemoteStoreProbe()

    def _headers(
        self, *, write: bool = False, prefer: Sequence[str] = ()
    ) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._key:
            headers["apikey"] = self._key
            headers["Authorization"] = f"Bearer {self._key}"
        headers["Content-Profile" if write else "Accept-Profile"] = self._schema
        if prefer:
            headers["Prefer"] = ",".join(prefer)
        return headers

    async def _send(
        self,
        method: str,
        table: str,
        operation: str,
        *,
        params: list[tuple[str, str]] | None = None,
        headers: dict[str, str],
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"{self._base_url}/{table}",
                params=params,
                headers=headers,
                json=json,
            )
        except httpx.TimeoutException as e:
            raise self._failure(table, operation, "the data service timed out") from e
        except httpx.TransportError as e:
            raise self._failure(
                table, operation, "could not reach the data service"
            ) from e

        if response.status_code >= 400:
            payload: Any = None
            try:
                payload = response.json()
            except ValueError:
                pass
            if isinstance(payload, Mapping):
                detail = describe_error(payload)
                code = payload.get("code")
            else:
                detail = f"the data service responded with HTTP {response.status_code}"
                code = None
            raise self._failure(
                table, operation, detail, status_code=response.status_code, code=code
            )
        return response

    def _failure(
        self,
        table: str,
        operation: str,
        detail: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> RemoteStoreError:
        message = f"{table}: {detail}"
        self._probe.query_failed(
            table=table, operation=operation, message=message, status_code=status_code
        )
        return RemoteStoreError(
            message,
            table=table,
            operation=operation,
            status_code=status_code,
            code=code,
        )

    async def fetch(self, query: Query) -> list[Row]:
        response = await self._send(
            "GET",
            query.table,
            "select",
            params=render_params(query),
            headers=self._headers(),
        )
        rows = response.json()
        self._probe.query_executed(
            table=query.table,
            operation="select",
            row_count=len(rows),
            query=query.describe(),
        )
        return rows

    async def fetch_one(self, query: Query) -> Row | None:
        rows = await self.fetch(query.limit(1))
        return rows[0] if rows else None

    async def count(self, query: Query) -> int:
        count_query = query.for_count()
        response = await self._send(
            "HEAD",
            query.table,
            "count",
            params=render_params(count_query),
            headers=self._headers(prefer=("count=exact",)),
        )
        try:
            total = parse_content_range(response.headers.get("content-range"))
        except ValueError as e:
            raise self._failure(
                query.table, "count", "the data service did not report a row count"
            ) from e
        self._probe.query_executed(
            table=query.table,
            operation="count",
            row_count=total,
            query=count_query.describe(),
        )
        return total

    async def insert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        on_conflict: str | None = None,
    ) -> list[Row]:
        if not rows:
            return []
        prefer = ["return=representation"]
        params: list[tuple[str, str]] = []
        if on_conflict:
            prefer.append("resolution=ignore-duplicates")
            params.append(("on_conflict", on_conflict))
        response = await self._send(
            "POST",
            table,
            "insert",
            params=params,
            headers=self._headers(write=True, prefer=prefer),
            json=[dict(row) for row in rows],
        )
        inserted = response.json() if response.content else []
        self._probe.rows_inserted(
            table=table, requested=len(rows), inserted=len(inserted)
        )
        return inserted

    async def delete(self, query: Query) -> int:
        params = [p for p in render_params(query.for_count()) if p[0] != "select"]
        response = await self._send(
            "DELETE",
            query.table,
            "delete",
            params=params,
            headers=self._headers(write=True, prefer=("return=representation",)),
        )
        deleted = response.json() if response.content else []
        self._probe.query_executed(
            table=query.table,
            operation="delete",
            row_count=len(deleted),
            query=query.describe(),
        )
        return len(deleted)

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
            self._probe.client_closed()
