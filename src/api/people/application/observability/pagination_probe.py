"""Protocol for pagination controller observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PaginationProbe(Protocol):
    """Domain probe for paginated loading."""

    def page_loaded(
        self, page: int, row_count: int, total_count: int, count_fetched: bool
    ) -> None:
        """Record that a page was loaded and published."""
        ...

    def page_load_failed(self, page: int, message: str) -> None:
        """Record that loading a page failed."""
        ...

    def navigation_ignored(self, target_page: int, reason: str) -> None:
        """Record that a navigation request was a guarded no-op."""
        ...

    def stale_result_discarded(
        self, page: int, generation: int, current_generation: int
    ) -> None:
        """Record that a superseded load finished and its result was dropped."""
        ...

    def pagination_reset(self, generation: int) -> None:
        """Record that pagination state was cleared."""
        ...

    def with_context(self, context: ObservationContext) -> PaginationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPaginationProbe:
    """Default implementation of PaginationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPaginationProbe:
        """Create a new probe with observation context bound."""
        return DefaultPaginationProbe(logger=self._logger, context=context)

    def page_loaded(
        self, page: int, row_count: int, total_count: int, count_fetched: bool
    ) -> None:
        self._logger.info(
            "page_loaded",
            page=page,
            row_count=row_count,
            total_count=total_count,
            count_fetched=count_fetched,
            **self._get_context_kwargs(),
        )

    def page_load_failed(self, page: int, message: str) -> None:
        self._logger.error(
            "page_load_failed",
            page=page,
            message=message,
            **self._get_context_kwargs(),
        )

    def navigation_ignored(self, target_page: int, reason: str) -> None:
        self._logger.debug(
            "navigation_ignored",
            target_page=target_page,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def stale_result_discarded(
        self, page: int, generation: int, current_generation: int
    ) -> None:
        self._logger.info(
            "stale_page_discarded",
            page=page,
            generation=generation,
            current_generation=current_generation,
            **self._get_context_kwargs(),
        )

    def pagination_reset(self, generation: int) -> None:
        self._logger.debug(
            "pagination_reset",
            generation=generation,
            **self._get_context_kwargs(),
        )
