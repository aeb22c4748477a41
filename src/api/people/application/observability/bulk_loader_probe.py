"""Protocol for bulk association loader observability.

The loader tolerates data-quality anomalies (duplicate one-to-one rows,
missing enrollments) instead of raising; this probe is where they surface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class BulkLoaderProbe(Protocol):
    """Domain probe for bulk association loading."""

    def collection_loaded(self, table: str, key_count: int, row_count: int) -> None:
        """Record that one related collection was fetched with a single query."""
        ...

    def duplicate_related_row(
        self, table: str, key: str, kept_id: Any, dropped_id: Any
    ) -> None:
        """Record a second one-to-one row for a key; the first row was kept."""
        ...

    def association_completed(
        self, primary_count: int, collection_count: int, query_count: int
    ) -> None:
        """Record that all collections were attached to a page."""
        ...

    def inconsistent_enrollment(
        self, person_id: str, completion_percentage: int, onboarding_completed: bool
    ) -> None:
        """Record an enrollment whose percentage and completed flag disagree."""
        ...

    def with_context(self, context: ObservationContext) -> BulkLoaderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBulkLoaderProbe:
    """Default implementation of BulkLoaderProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultBulkLoaderProbe:
        """Create a new probe with observation context bound."""
        return DefaultBulkLoaderProbe(logger=self._logger, context=context)

    def collection_loaded(self, table: str, key_count: int, row_count: int) -> None:
        self._logger.debug(
            "related_collection_loaded",
            table=table,
            key_count=key_count,
            row_count=row_count,
            **self._get_context_kwargs(),
        )

    def duplicate_related_row(
        self, table: str, key: str, kept_id: Any, dropped_id: Any
    ) -> None:
        self._logger.warning(
            "duplicate_related_row",
            table=table,
            key=key,
            kept_id=kept_id,
            dropped_id=dropped_id,
            **self._get_context_kwargs(),
        )

    def association_completed(
        self, primary_count: int, collection_count: int, query_count: int
    ) -> None:
        self._logger.debug(
            "association_completed",
            primary_count=primary_count,
            collection_count=collection_count,
            query_count=query_count,
            **self._get_context_kwargs(),
        )

    def inconsistent_enrollment(
        self, person_id: str, completion_percentage: int, onboarding_completed: bool
    ) -> None:
        self._logger.warning(
            "inconsistent_enrollment",
            person_id=person_id,
            completion_percentage=completion_percentage,
            onboarding_completed=onboarding_completed,
            **self._get_context_kwargs(),
        )
