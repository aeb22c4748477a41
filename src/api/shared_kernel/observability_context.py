"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures operation-scoped metadata that should be included with all
    instrumentation events, so a page load or a demo population run can be
    followed across the loader, the controller and the store adapter.

    Attributes:
        request_id: Identifier of the current request/operation.
        tenant_id: Client (tenant) the operation is scoped to.
        generation: Load generation token of the operation, if any.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", tenant_id="c-1")
        probe = DefaultPaginationProbe().with_context(context)
    """

    request_id: str | None = None
    tenant_id: str | None = None
    generation: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.generation is not None:
            result["generation"] = self.generation
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str) -> ObservationContext:
        """Create a new context scoped to a tenant."""
        return replace(self, tenant_id=tenant_id)

    def with_generation(self, generation: int) -> ObservationContext:
        """Create a new context carrying a load generation token."""
        return replace(self, generation=generation)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
