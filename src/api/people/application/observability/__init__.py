"""Domain probes for the People application layer."""

from people.application.observability.bulk_loader_probe import (
    BulkLoaderProbe,
    DefaultBulkLoaderProbe,
)
from people.application.observability.dashboard_probe import (
    DashboardLoadProbe,
    DefaultDashboardLoadProbe,
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)
from people.application.observability.pagination_probe import (
    DefaultPaginationProbe,
    PaginationProbe,
)

__all__ = [
    "BulkLoaderProbe",
    "DashboardLoadProbe",
    "DefaultBulkLoaderProbe",
    "DefaultDashboardLoadProbe",
    "DefaultPaginationProbe",
    "DefaultTenantResolverProbe",
    "PaginationProbe",
    "TenantResolverProbe",
]
