"""Pagination controller for tenant-scoped collections.

The controller owns page size, current page, cached total count and the set
of loaded pages for one collection (people or offboarding processes) and
publishes both through ``Observable`` cells. Page data is always written
before the derived counters that describe it.

Counting is lazy: the total is fetched when page 0 is loaded or
when no count is cached, and reused while paging forward and back. A search,
a change of filters, a tenant switch or ``reset()`` clears the cached count.

Each ``reset()``/``search()`` advances a generation counter. A load captures
the generation when it starts and, if the counter has moved on by the time
its store calls return, drops its result instead of writing state.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from people.application.bulk_loader import (
    PERSON_COLLECTIONS,
    BulkAssociationLoader,
    Cardinality,
    RelatedCollection,
    compose_people,
)
from people.application.observability import (
    BulkLoaderProbe,
    DefaultBulkLoaderProbe,
    DefaultPaginationProbe,
    PaginationProbe,
)
from people.application.queries import (
    PEOPLE,
    PROCESS_TASKS,
    people_query,
    processes_query,
)
from people.application.transforms import transform_process
from people.domain.value_objects import (
    ComposedPerson,
    PersonEnrollment,
    ProcessSummary,
)
from people.ports.exceptions import InvalidTenantError
from shared_kernel.remote_store import IRemoteStore, Query, RemoteStoreError, Row
from shared_kernel.state import Observable

T = TypeVar("T")


class PageOptions(BaseModel):
    """Search term and equality filters applied to every page of a listing.

    A blank search term is the same as no search, and filters whose value
    is None are dropped.
    """

    model_config = ConfigDict(frozen=True)

    search: str | None = None
    filters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("filters", mode="before")
    @classmethod
    def drop_none_filters(cls, value: Any) -> dict[str, Any]:
        return {k: v for k, v in (value or {}).items() if v is not None}


class PaginationState(BaseModel):
    """Published pagination metadata."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str | None = None
    current_page: int = 0
    page_size: int
    total_count: int = 0
    count_cached: bool = False
    total_pages: int = 0
    has_next_page: bool = False
    has_previous_page: bool = False
    loaded_pages: frozenset[int] = frozenset()
    is_loading: bool = False
    error: str | None = None
    generation: int = 0
    options: PageOptions = PageOptions()


def page_metadata(page: int, page_size: int, total_count: int) -> dict[str, Any]:
    """Derived counters for ``page`` of a collection of ``total_count`` rows."""
    total_pages = math.ceil(total_count / page_size) if total_count else 0
    return {
        "current_page": page,
        "total_count": total_count,
        "total_pages": total_pages,
        "has_next_page": page < total_pages - 1,
        "has_previous_page": page > 0,
    }


class PageSource(Protocol[T]):
    """What a paginated collection needs to provide."""

    async def count(self, tenant_id: str, options: PageOptions) -> int:
        ...

    async def fetch_rows(
        self, tenant_id: str, options: PageOptions, offset: int, limit: int
    ) -> list[Row]:
        ...

    async def to_entities(self, rows: Sequence[Row]) -> list[T]:
        ...


class PeoplePageSource:
    """People with enrollment, documents and tasks attached in bulk."""

    def __init__(
        self,
        store: IRemoteStore,
        loader: BulkAssociationLoader | None = None,
        probe: BulkLoaderProbe | None = None,
    ):
        self._store = store
        self._probe = probe or DefaultBulkLoaderProbe()
        self._loader = loader or BulkAssociationLoader(
            store, PERSON_COLLECTIONS, probe=self._probe
        )

    def query(self, tenant_id: str, options: PageOptions) -> Query:
        return people_query(tenant_id, options.search, options.filters)

    async def count(self, tenant_id: str, options: PageOptions) -> int:
        return await self._store.count(self.query(tenant_id, options))

    async def fetch_rows(
        self, tenant_id: str, options: PageOptions, offset: int, limit: int
    ) -> list[Row]:
        query = self.query(tenant_id, options).range(offset, offset + limit - 1)
        return await self._store.fetch(query)

    async def to_entities(self, rows: Sequence[Row]) -> list[ComposedPerson]:
        result = await self._loader.load(rows)
        people = compose_people(rows, result)
        for composed in people:
            enrollment = composed.enrollment
            if not isinstance(enrollment, PersonEnrollment):
                continue
            if not enrollment.is_consistent:
                self._probe.inconsistent_enrollment(
                    enrollment.person_id,
                    enrollment.completion_percentage,
                    enrollment.onboarding_completed,
                )
        return people


PROCESS_COLLECTIONS: tuple[RelatedCollection, ...] = (
    RelatedCollection(
        "person",
        PEOPLE,
        remote_key="id",
        local_key="person_id",
        cardinality=Cardinality.ONE,
        columns="id,first_name,last_name,person_code",
    ),
    RelatedCollection(
        "tasks",
        PROCESS_TASKS,
        remote_key="process_id",
        columns="id,process_id,title,status,due_date",
    ),
)


class ProcessPageSource:
    """Offboarding processes with their person and task progress."""

    def __init__(
        self,
        store: IRemoteStore,
        loader: BulkAssociationLoader | None = None,
        probe: BulkLoaderProbe | None = None,
    ):
        self._store = store
        self._loader = loader or BulkAssociationLoader(
            store, PROCESS_COLLECTIONS, probe=probe
        )

    async def count(self, tenant_id: str, options: PageOptions) -> int:
        return await self._store.count(
            processes_query(tenant_id, options.search, options.filters)
        )

    async def fetch_rows(
        self, tenant_id: str, options: PageOptions, offset: int, limit: int
    ) -> list[Row]:
        query = processes_query(tenant_id, options.search, options.filters)
        return await self._store.fetch(query.range(offset, offset + limit - 1))

    async def to_entities(self, rows: Sequence[Row]) -> list[ProcessSummary]:
        result = await self._loader.load(rows)
        return [
            transform_process(
                row,
                result.one("person", row.get("person_id")),
                result.many("tasks", row.get("id")),
            )
            for row in rows
        ]


class PaginationController(Generic[T]):
    """Page-at-a-time access to one tenant-scoped collection.

    Example:
        controller = PaginationController(PeoplePageSource(store), page_size=25)
        people = await controller.load_page("client-1", 0)
        await controller.next_page()
    """

    def __init__(
        self,
        source: PageSource[T],
        page_size: int,
        probe: PaginationProbe | None = None,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._source = source
        self._page_size = page_size
        self._probe = probe or DefaultPaginationProbe()
        self._generation = 0
        self.pages: Observable[dict[int, list[T]]] = Observable({})
        self.state: Observable[PaginationState] = Observable(
            PaginationState(page_size=page_size)
        )

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def generation(self) -> int:
        return self._generation

    def current_items(self) -> list[T]:
        """Entities of the current page (empty when it is not loaded)."""
        return list(self.pages.get().get(self.state.get().current_page, []))

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _prepare(self, tenant_id: str, options: PageOptions) -> None:
        state = self.state.get()
        if state.tenant_id is not None and state.tenant_id != tenant_id:
            self.reset()
        elif state.options != options:
            self.reset()

    async def load_page(
        self,
        tenant_id: str,
        page: int,
        options: PageOptions | Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Load one page, fetching the total count only when needed.

        Args:
            tenant_id: Client id every row is scoped to
            page: Zero-based page index; negative values clamp to 0
            options: Search and filters; None keeps the current ones

        Returns:
            The page's entities. While another load of the same listing is
            in flight this is a no-op returning the cached current page. A
            load for another tenant or other options supersedes the running
            one instead.

        Raises:
            InvalidTenantError: If ``tenant_id`` is empty (before any I/O)
            RemoteStoreError: If the count or a row query fails
        """
        if not tenant_id or not tenant_id.strip():
            raise InvalidTenantError("A tenant id is required to load a page")
        page = max(0, page)

        state = self.state.get()
        if options is None:
            resolved = state.options
        elif isinstance(options, PageOptions):
            resolved = options
        else:
            resolved = PageOptions(**options)

        same_listing = state.tenant_id == tenant_id and state.options == resolved
        if state.is_loading and same_listing:
            self._probe.navigation_ignored(target_page=page, reason="load_in_flight")
            return self.current_items()
        self._prepare(tenant_id, resolved)

        generation = self._generation
        self.state.update(
            lambda s: s.model_copy(
                update={
                    "tenant_id": tenant_id,
                    "options": resolved,
                    "is_loading": True,
                    "error": None,
                }
            )
        )

        try:
            state = self.state.get()
            total_count = state.total_count
            count_fetched = page == 0 or not state.count_cached
            if count_fetched:
                total_count = await self._source.count(tenant_id, resolved)
                if self._is_stale(generation):
                    return self._discard(page, generation, [])

            offset = page * self._page_size
            rows = await self._source.fetch_rows(
                tenant_id, resolved, offset, self._page_size
            )
            if self._is_stale(generation):
                return self._discard(page, generation, [])

            entities = await self._source.to_entities(rows)
            if self._is_stale(generation):
                return self._discard(page, generation, entities)

            self._publish(page, entities, total_count)
            self._probe.page_loaded(
                page=page,
                row_count=len(entities),
                total_count=total_count,
                count_fetched=count_fetched,
            )
            return entities
        except RemoteStoreError as e:
            if not self._is_stale(generation):
                self.state.update(lambda s: s.model_copy(update={"error": e.message}))
            self._probe.page_load_failed(page=page, message=e.message)
            raise
        finally:
            if not self._is_stale(generation) and self.state.get().is_loading:
                self.state.update(lambda s: s.model_copy(update={"is_loading": False}))

    def _discard(self, page: int, generation: int, entities: list[T]) -> list[T]:
        self._probe.stale_result_discarded(
            page=page, generation=generation, current_generation=self._generation
        )
        return entities

    def _publish(self, page: int, entities: list[T], total_count: int) -> None:
        pages = dict(self.pages.get())
        pages[page] = list(entities)
        self.pages.set(pages)

        metadata = page_metadata(page, self._page_size, total_count)
        self.state.update(
            lambda s: s.model_copy(
                update={
                    **metadata,
                    "loaded_pages": s.loaded_pages | {page},
                    "count_cached": True,
                    "is_loading": False,
                    "error": None,
                }
            )
        )

    def seed_page(
        self,
        tenant_id: str,
        page: int,
        entities: Sequence[T],
        total_count: int,
        options: PageOptions | None = None,
    ) -> None:
        """Install a page loaded elsewhere (the dashboard load) as if loaded here.

        Later navigation reuses ``total_count`` instead of counting again.
        """
        if not tenant_id or not tenant_id.strip():
            raise InvalidTenantError("A tenant id is required to seed a page")
        resolved = options or PageOptions()
        self._prepare(tenant_id, resolved)
        self.state.update(
            lambda s: s.model_copy(update={"tenant_id": tenant_id, "options": resolved})
        )
        self._publish(max(0, page), list(entities), total_count)

    async def _navigate(self, target: int, tenant_id: str | None) -> list[T] | None:
        state = self.state.get()
        tenant = tenant_id or state.tenant_id
        if state.is_loading:
            self._probe.navigation_ignored(target_page=target, reason="load_in_flight")
            return None
        if tenant is None:
            self._probe.navigation_ignored(target_page=target, reason="no_tenant")
            return None
        if not 0 <= target < state.total_pages:
            self._probe.navigation_ignored(target_page=target, reason="out_of_range")
            return None
        return await self.load_page(tenant, target)

    async def next_page(self, tenant_id: str | None = None) -> list[T] | None:
        """Load the following page; None when there is none or a load is in flight."""
        return await self._navigate(self.state.get().current_page + 1, tenant_id)

    async def previous_page(self, tenant_id: str | None = None) -> list[T] | None:
        return await self._navigate(self.state.get().current_page - 1, tenant_id)

    async def goto_page(
        self, page: int, tenant_id: str | None = None
    ) -> list[T] | None:
        return await self._navigate(page, tenant_id)

    async def search(
        self,
        tenant_id: str,
        term: str | None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Start a fresh listing: clear pages and count, then load page 0."""
        if not tenant_id or not tenant_id.strip():
            raise InvalidTenantError("A tenant id is required to search")
        options = PageOptions(search=term, filters=dict(filters or {}))
        self.reset()
        self.state.update(lambda s: s.model_copy(update={"options": options}))
        return await self.load_page(tenant_id, 0, options)

    def reset(self) -> None:
        """Clear all pages and counters; in-flight loads become stale."""
        self._generation += 1
        self.pages.set({})
        self.state.set(
            PaginationState(page_size=self._page_size, generation=self._generation)
        )
        self._probe.pagination_reset(generation=self._generation)
