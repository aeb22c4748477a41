"""HTTP routes for People bounded context.

Exposes the staged dashboard load and page-at-a-time people and process
listings. Backend failures surface as 502 with a readable message; a
missing tenant id is a 422.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status

from people.application.orchestrator import (
    DashboardOrchestrator,
    DashboardState,
    LoadingProgress,
)
from people.application.pagination import PageOptions, PaginationController
from people.application.queries import ASSOCIATE_FILTER
from people.application.statistics import PeopleStatisticsService
from people.dependencies import (
    get_dashboard_orchestrator,
    get_people_pagination,
    get_process_pagination,
    get_statistics_service,
)
from people.domain.value_objects import ComposedPerson, PeopleStatistics, ProcessSummary
from people.ports.exceptions import InvalidTenantError
from people.presentation.models import (
    DashboardResponse,
    PeoplePageResponse,
    ProcessesPageResponse,
    SearchRequest,
)
from shared_kernel.remote_store import RemoteStoreError

T = TypeVar("T")

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])
people_router = APIRouter(prefix="/people", tags=["people"])
processes_router = APIRouter(prefix="/processes", tags=["processes"])


async def _call(awaitable: Awaitable[T]) -> T:
    """Await a store-backed call, mapping domain errors to HTTP errors."""
    try:
        return await awaitable
    except InvalidTenantError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)
        ) from e
    except RemoteStoreError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message
        ) from e


def _people_filters(
    employment_status: list[str] | None, associates_only: bool
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    if employment_status:
        filters["employment_status"] = employment_status
    if associates_only:
        filters[ASSOCIATE_FILTER] = True
    return filters


def _people_page(
    controller: PaginationController[ComposedPerson],
    items: list[ComposedPerson] | None,
) -> PeoplePageResponse:
    return PeoplePageResponse(
        items=items if items is not None else controller.current_items(),
        pagination=controller.state.get(),
        changed=items is not None,
    )


# --- Dashboard ---


@dashboard_router.post("/load")
async def load_dashboard(
    client_id: str | None = Query(default=None, description="Client id to load"),
    client_code: str | None = Query(
        default=None,
        description="Client code; unknown codes fall back to a demo client",
    ),
    orchestrator: DashboardOrchestrator = Depends(get_dashboard_orchestrator),
) -> DashboardResponse:
    """Run the staged dashboard load.

    Load failures do not produce an error status: the returned state carries
    the message in ``error`` together with whatever loaded before it.
    """
    if client_id is not None:
        state = await _call(orchestrator.load_client_data(client_id))
    else:
        state = await orchestrator.load_demo_data(client_code)
    return DashboardResponse(state=state, progress=orchestrator.progress.get())


@dashboard_router.get("/progress")
def get_progress(
    orchestrator: DashboardOrchestrator = Depends(get_dashboard_orchestrator),
) -> LoadingProgress:
    return orchestrator.progress.get()


@dashboard_router.get("/state")
def get_state(
    orchestrator: DashboardOrchestrator = Depends(get_dashboard_orchestrator),
) -> DashboardState:
    return orchestrator.state.get()


# --- People ---


@people_router.get("")
async def list_people(
    client_id: str = Query(..., description="Client id"),
    page: int = Query(default=0, description="Zero-based page; negatives clamp to 0"),
    search: str | None = Query(default=None),
    employment_status: list[str] | None = Query(default=None),
    associates_only: bool = Query(default=False),
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    """Load one page of people with enrollment, documents and tasks attached."""
    options = PageOptions(
        search=search, filters=_people_filters(employment_status, associates_only)
    )
    items = await _call(controller.load_page(client_id, page, options))
    return _people_page(controller, items)


@people_router.post("/next")
async def next_people_page(
    client_id: str | None = Query(default=None),
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    return _people_page(controller, await _call(controller.next_page(client_id)))


@people_router.post("/previous")
async def previous_people_page(
    client_id: str | None = Query(default=None),
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    return _people_page(controller, await _call(controller.previous_page(client_id)))


@people_router.post("/goto")
async def goto_people_page(
    page: int = Query(...),
    client_id: str | None = Query(default=None),
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    return _people_page(controller, await _call(controller.goto_page(page, client_id)))


@people_router.post("/search")
async def search_people(
    request: SearchRequest,
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    """Start a new search: pagination resets and page 0 is loaded."""
    items = await _call(
        controller.search(request.client_id, request.term, request.filters)
    )
    return _people_page(controller, items)


@people_router.post("/reset")
def reset_people(
    controller: PaginationController[ComposedPerson] = Depends(get_people_pagination),
) -> PeoplePageResponse:
    controller.reset()
    return _people_page(controller, [])


@people_router.get("/statistics")
async def people_statistics(
    client_id: str = Query(...),
    search: str | None = Query(default=None),
    employment_status: list[str] | None = Query(default=None),
    associates_only: bool = Query(default=False),
    service: PeopleStatisticsService = Depends(get_statistics_service),
) -> PeopleStatistics:
    return await _call(
        service.get_statistics(
            client_id, search, _people_filters(employment_status, associates_only)
        )
    )


# --- Processes ---


@processes_router.get("")
async def list_processes(
    client_id: str = Query(...),
    page: int = Query(default=0),
    search: str | None = Query(default=None, description="Matches the process title"),
    process_status: str | None = Query(default=None, alias="status"),
    controller: PaginationController[ProcessSummary] = Depends(get_process_pagination),
) -> ProcessesPageResponse:
    """Load one page of offboarding processes with task progress."""
    options = PageOptions(search=search, filters={"status": process_status})
    items = await _call(controller.load_page(client_id, page, options))
    return ProcessesPageResponse(items=items, pagination=controller.state.get())
