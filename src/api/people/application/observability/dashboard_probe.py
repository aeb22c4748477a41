"""Protocol for the staged dashboard load and tenant resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DashboardLoadProbe(Protocol):
    """Domain probe for the dashboard orchestrator."""

    def stage_started(self, stage: str, current: int, total: int) -> None:
        """Record that a load stage began."""
        ...

    def applications_defaulted(self, tenant_id: str) -> None:
        """Record that the default application pair stood in for missing rows."""
        ...

    def load_completed(
        self, tenant_id: str, people_count: int, total_count: int
    ) -> None:
        """Record that every stage finished."""
        ...

    def load_failed(self, tenant_id: str, stage: str, message: str) -> None:
        """Record that a stage failed and the load stopped."""
        ...

    def stale_load_discarded(self, generation: int, current_generation: int) -> None:
        """Record that a superseded load stopped writing state."""
        ...

    def with_context(self, context: ObservationContext) -> DashboardLoadProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantResolverProbe(Protocol):
    """Domain probe for tenant code resolution."""

    def tenant_resolved(self, code: str, requested: str | None, via: str) -> None:
        """Record which client was chosen and by which rule."""
        ...

    def tenant_fallback(self, requested: str | None) -> None:
        """Record that the requested code did not resolve."""
        ...

    def no_tenants_available(self) -> None:
        """Record that there were no clients at all."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class _ContextProbe:
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

    def with_context(self, context: ObservationContext):
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)


class DefaultDashboardLoadProbe(_ContextProbe):
    """Default implementation of DashboardLoadProbe using structlog."""

    def stage_started(self, stage: str, current: int, total: int) -> None:
        self._logger.debug(
            "dashboard_stage_started",
            stage=stage,
            current=current,
            total=total,
            **self._get_context_kwargs(),
        )

    def applications_defaulted(self, tenant_id: str) -> None:
        self._logger.info(
            "applications_defaulted",
            client_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def load_completed(
        self, tenant_id: str, people_count: int, total_count: int
    ) -> None:
        self._logger.info(
            "dashboard_load_completed",
            client_id=tenant_id,
            people_count=people_count,
            total_count=total_count,
            **self._get_context_kwargs(),
        )

    def load_failed(self, tenant_id: str, stage: str, message: str) -> None:
        self._logger.error(
            "dashboard_load_failed",
            client_id=tenant_id,
            stage=stage,
            message=message,
            **self._get_context_kwargs(),
        )

    def stale_load_discarded(self, generation: int, current_generation: int) -> None:
        self._logger.info(
            "stale_dashboard_load_discarded",
            generation=generation,
            current_generation=current_generation,
            **self._get_context_kwargs(),
        )


class DefaultTenantResolverProbe(_ContextProbe):
    """Default implementation of TenantResolverProbe using structlog."""

    def tenant_resolved(self, code: str, requested: str | None, via: str) -> None:
        self._logger.info(
            "tenant_resolved",
            client_code=code,
            requested=requested,
            via=via,
            **self._get_context_kwargs(),
        )

    def tenant_fallback(self, requested: str | None) -> None:
        self._logger.warning(
            "tenant_fallback",
            requested=requested,
            **self._get_context_kwargs(),
        )

    def no_tenants_available(self) -> None:
        self._logger.error("no_tenants_available", **self._get_context_kwargs())
