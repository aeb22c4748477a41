"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RemoteStoreProbe(Protocol):
    """Domain probe for remote store calls.

    Captures every request the adapters issue, which is what the
    constant-query-count guarantee of the bulk loader is audited against.
    """

    def query_executed(
        self, table: str, operation: str, row_count: int, query: dict[str, Any]
    ) -> None:
        """Record that a store call completed."""
        ...

    def query_failed(
        self,
        table: str,
        operation: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Record that a store call failed."""
        ...

    def rows_inserted(self, table: str, requested: int, inserted: int) -> None:
        """Record an insert; ``inserted < requested`` means duplicates were skipped."""
        ...

    def client_closed(self) -> None:
        """Record that the HTTP client was closed."""
        ...

    def with_context(self, context: ObservationContext) -> RemoteStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRemoteStoreProbe:
    """Default implementation of RemoteStoreProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultRemoteStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultRemoteStoreProbe(logger=self._logger, context=context)

    def query_executed(
        self, table: str, operation: str, row_count: int, query: dict[str, Any]
    ) -> None:
        self._logger.debug(
            "store_query_executed",
            table=table,
            operation=operation,
            row_count=row_count,
            query=query,
            **self._get_context_kwargs(),
        )

    def query_failed(
        self,
        table: str,
        operation: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self._logger.error(
            "store_query_failed",
            table=table,
            operation=operation,
            message=message,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def rows_inserted(self, table: str, requested: int, inserted: int) -> None:
        self._logger.info(
            "store_rows_inserted",
            table=table,
            requested=requested,
            inserted=inserted,
            skipped=requested - inserted,
            **self._get_context_kwargs(),
        )

    def client_closed(self) -> None:
        self._logger.debug("store_client_closed", **self._get_context_kwargs())
