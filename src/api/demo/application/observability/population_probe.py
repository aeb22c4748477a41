"""Protocol for demo population observability.

Reports batch-level progress of demo inserts so that a failed run can be
resumed from the logs alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PopulationProbe(Protocol):
    """Domain probe for demo data population."""

    def batch_committed(
        self, table: str, batch_index: int, sent: int, inserted: int
    ) -> None:
        """Record that one batch was accepted by the store.

        ``inserted`` is lower than ``sent`` when rows already existed.
        """
        ...

    def batch_failed(
        self, table: str, batch_index: int, row_range: tuple[int, int], reason: str
    ) -> None:
        """Record that a batch was rejected; earlier batches stay committed."""
        ...

    def batches_skipped(self, table: str, batch_count: int) -> None:
        """Record batches skipped on a resumed run."""
        ...

    def table_populated(self, table: str, batch_count: int, inserted: int) -> None:
        """Record that every batch for a table was committed."""
        ...

    def demo_client_ready(
        self, client_code: str, client_id: str, created: bool
    ) -> None:
        """Record that the demo client exists (created now or found)."""
        ...

    def demo_data_removed(self, table: str, row_count: int) -> None:
        """Record rows removed by a reset."""
        ...

    def with_context(self, context: ObservationContext) -> PopulationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPopulationProbe:
    """Default implementation of PopulationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPopulationProbe:
        """Create a new probe with observation context bound."""
        return DefaultPopulationProbe(logger=self._logger, context=context)

    def batch_committed(
        self, table: str, batch_index: int, sent: int, inserted: int
    ) -> None:
        self._logger.debug(
            "demo_batch_committed",
            table=table,
            batch_index=batch_index,
            sent=sent,
            inserted=inserted,
            **self._get_context_kwargs(),
        )

    def batch_failed(
        self, table: str, batch_index: int, row_range: tuple[int, int], reason: str
    ) -> None:
        self._logger.error(
            "demo_batch_failed",
            table=table,
            batch_index=batch_index,
            row_start=row_range[0],
            row_end=row_range[1],
            reason=reason,
            **self._get_context_kwargs(),
        )

    def batches_skipped(self, table: str, batch_count: int) -> None:
        self._logger.info(
            "demo_batches_skipped",
            table=table,
            batch_count=batch_count,
            **self._get_context_kwargs(),
        )

    def table_populated(self, table: str, batch_count: int, inserted: int) -> None:
        self._logger.info(
            "demo_table_populated",
            table=table,
            batch_count=batch_count,
            inserted=inserted,
            **self._get_context_kwargs(),
        )

    def demo_client_ready(
        self, client_code: str, client_id: str, created: bool
    ) -> None:
        self._logger.info(
            "demo_client_ready",
            client_code=client_code,
            client_id=client_id,
            created=created,
            **self._get_context_kwargs(),
        )

    def demo_data_removed(self, table: str, row_count: int) -> None:
        self._logger.info(
            "demo_data_removed",
            table=table,
            row_count=row_count,
            **self._get_context_kwargs(),
        )
