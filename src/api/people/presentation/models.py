"""Request and response models for the People API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from people.application.orchestrator import DashboardState, LoadingProgress
from people.application.pagination import PaginationState
from people.domain.value_objects import ComposedPerson, ProcessSummary


class PeoplePageResponse(BaseModel):
    """One page of people plus pagination metadata.

    ``changed`` is false when a navigation request was a guarded no-op and
    the current page is returned as it was.
    """

    items: list[ComposedPerson]
    pagination: PaginationState
    changed: bool = True


class ProcessesPageResponse(BaseModel):
    items: list[ProcessSummary]
    pagination: PaginationState


class SearchRequest(BaseModel):
    """Body of POST /people/search."""

    client_id: str = Field(description="Client (tenant) id")
    term: str = Field(default="", description="Substring matched across name fields")
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Equality filters; a list value matches any of its items, "
            "_associate_filter=true matches people with an associate status"
        ),
    )


class DashboardResponse(BaseModel):
    state: DashboardState
    progress: LoadingProgress
