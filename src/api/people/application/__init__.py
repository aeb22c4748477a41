"""People application layer.

Contains the loaders that turn tenant-scoped rows into dashboard pages:
bulk association, pagination and the staged dashboard load.
"""

from people.application.bulk_loader import BulkAssociationLoader
from people.application.orchestrator import DashboardOrchestrator
from people.application.pagination import PaginationController

__all__ = ["BulkAssociationLoader", "DashboardOrchestrator", "PaginationController"]
