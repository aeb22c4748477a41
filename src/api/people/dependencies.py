"""Dependency injection for People bounded context.

Composes the infrastructure store with people-specific components
(page sources, controllers, orchestrator). Controllers and the orchestrator
own session state, so they are application-scoped: one dashboard session
per running API.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.dependencies import get_remote_store
from infrastructure.settings import get_pagination_settings
from people.application.orchestrator import DashboardOrchestrator
from people.application.pagination import (
    PaginationController,
    PeoplePageSource,
    ProcessPageSource,
)
from people.application.statistics import PeopleStatisticsService
from people.domain.value_objects import ComposedPerson, ProcessSummary
from shared_kernel.remote_store import IRemoteStore


@lru_cache
def get_people_pagination() -> PaginationController[ComposedPerson]:
    """Get the application-scoped people pagination controller."""
    settings = get_pagination_settings()
    return PaginationController(
        PeoplePageSource(get_remote_store()),
        page_size=settings.people_page_size,
    )


@lru_cache
def get_process_pagination() -> PaginationController[ProcessSummary]:
    """Get the application-scoped offboarding process pagination controller."""
    settings = get_pagination_settings()
    return PaginationController(
        ProcessPageSource(get_remote_store()),
        page_size=settings.processes_page_size,
    )


@lru_cache
def get_dashboard_orchestrator() -> DashboardOrchestrator:
    """Get the application-scoped dashboard orchestrator.

    Seeds the people pagination controller with the first page it loads.
    """
    settings = get_pagination_settings()
    return DashboardOrchestrator(
        get_remote_store(),
        initial_load_size=settings.initial_load_size,
        people_pagination=get_people_pagination(),
    )


def get_statistics_service(
    store: Annotated[IRemoteStore, Depends(get_remote_store)],
) -> PeopleStatisticsService:
    """Get request-scoped PeopleStatisticsService."""
    return PeopleStatisticsService(store)
