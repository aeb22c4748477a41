"""Staged dashboard load with progress reporting.

Loads everything the dashboard shows for one tenant as a strictly ordered
sequence of stages. Each stage publishes a ``LoadingProgress`` before it
starts; later stages depend on ids produced by earlier ones, so nothing
runs concurrently.

    Client -> Applications -> People Count -> People Data -> Enrollments
    -> Documents & Tasks -> Invitations -> Complete

Failures never propagate to the caller. The first failing stage stops the
sequence, its message goes to ``state.error``, and data published by
earlier stages stays in place. ``state.loading`` is cleared on every exit
path. ``Complete`` is published only when every stage succeeded, including
for a tenant with no people.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from people.application.bulk_loader import (
    PERSON_COLLECTIONS,
    BulkAssociationLoader,
    RelatedCollection,
    compose_people,
)
from people.application.observability import (
    DashboardLoadProbe,
    DefaultDashboardLoadProbe,
)
from people.application.pagination import PaginationController
from people.application.queries import (
    APPLICATIONS,
    CLIENTS,
    INVITATIONS,
    people_query,
)
from people.application.tenant_resolver import TenantResolver
from people.application.transforms import (
    default_applications,
    transform_application,
    transform_client,
    transform_document,
    transform_invitation,
    transform_task,
)
from people.domain.value_objects import (
    Application,
    Client,
    ComposedPerson,
    DocumentStatus,
    Invitation,
    TaskStatus,
)
from people.ports.exceptions import (
    InvalidTenantError,
    NoTenantsAvailableError,
    TenantNotFoundError,
)
from shared_kernel.remote_store import IRemoteStore, Query, RemoteStoreError
from shared_kernel.state import Observable


class LoadStage(str, Enum):
    INITIALIZING = "Initializing"
    CLIENT = "Client"
    APPLICATIONS = "Applications"
    PEOPLE_COUNT = "People Count"
    PEOPLE_DATA = "People Data"
    ENROLLMENTS = "Enrollments"
    DOCUMENTS_AND_TASKS = "Documents & Tasks"
    INVITATIONS = "Invitations"
    COMPLETE = "Complete"


STAGE_COUNT = 7

_COLLECTION_STAGES: dict[str, LoadStage] = {
    "enrollments": LoadStage.ENROLLMENTS,
    "documents": LoadStage.DOCUMENTS_AND_TASKS,
    "tasks": LoadStage.DOCUMENTS_AND_TASKS,
}


class LoadingProgress(BaseModel):
    """Progress of the current dashboard load."""

    model_config = ConfigDict(frozen=True)

    stage: LoadStage = LoadStage.INITIALIZING
    current: int = 0
    total: int = STAGE_COUNT
    message: str = ""


class DashboardState(BaseModel):
    """Everything the dashboard shows for the current tenant."""

    model_config = ConfigDict(frozen=True)

    client: Client | None = None
    applications: tuple[Application, ...] = ()
    people: tuple[ComposedPerson, ...] = ()
    total_people: int = 0
    documents: tuple[DocumentStatus, ...] = ()
    tasks: tuple[TaskStatus, ...] = ()
    invitations: tuple[Invitation, ...] = ()
    loading: bool = False
    error: str | None = None
    generation: int = 0


class _SupersededLoad(Exception):
    """A newer load started; the running one must stop writing state."""


class DashboardOrchestrator:
    """Runs the staged load and owns the dashboard state it publishes."""

    def __init__(
        self,
        store: IRemoteStore,
        *,
        initial_load_size: int = 50,
        people_pagination: PaginationController[ComposedPerson] | None = None,
        loader: BulkAssociationLoader | None = None,
        resolver: TenantResolver | None = None,
        probe: DashboardLoadProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._initial_load_size = initial_load_size
        self._people_pagination = people_pagination
        self._loader = loader or BulkAssociationLoader(store, PERSON_COLLECTIONS)
        self._resolver = resolver or TenantResolver(store)
        self._probe = probe or DefaultDashboardLoadProbe()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._generation = 0
        self.state: Observable[DashboardState] = Observable(DashboardState())
        self.progress: Observable[LoadingProgress] = Observable(LoadingProgress())

    @property
    def generation(self) -> int:
        return self._generation

    def _check(self, generation: int) -> None:
        if generation != self._generation:
            raise _SupersededLoad()

    def _write(self, generation: int, **updates) -> None:
        self._check(generation)
        self.state.update(lambda s: s.model_copy(update=updates))

    def _stage(
        self, generation: int, stage: LoadStage, current: int, message: str
    ) -> None:
        self._check(generation)
        self.progress.set(
            LoadingProgress(
                stage=stage, current=current, total=STAGE_COUNT, message=message
            )
        )
        self._probe.stage_started(stage=stage.value, current=current, total=STAGE_COUNT)

    async def load_client_data(self, tenant_id: str) -> DashboardState:
        """Load all dashboard data for one client id.

        Raises:
            InvalidTenantError: If ``tenant_id`` is empty (before any I/O)

        Returns:
            The published state after the load finished or stopped.
        """
        if not tenant_id or not tenant_id.strip():
            raise InvalidTenantError("A tenant id is required to load dashboard data")

        self._generation += 1
        generation = self._generation
        current = self.state.get()
        if current.client is not None and current.client.id != tenant_id:
            # Tenant switch: another tenant's rows must never be shown alongside.
            self.state.set(DashboardState(loading=True, generation=generation))
        else:
            self.state.set(
                current.model_copy(
                    update={"loading": True, "error": None, "generation": generation}
                )
            )
        self.progress.set(
            LoadingProgress(
                stage=LoadStage.INITIALIZING, current=0, message="Starting data load..."
            )
        )

        stage = LoadStage.CLIENT
        try:
            self._stage(generation, stage, 1, "Loading client information...")
            client_row = await self._store.fetch_one(Query(CLIENTS).eq("id", tenant_id))
            self._check(generation)
            if client_row is None:
                raise TenantNotFoundError(tenant_id)
            client = transform_client(client_row)
            self._write(generation, client=client)

            stage = LoadStage.APPLICATIONS
            self._stage(generation, stage, 2, "Loading applications...")
            app_rows = await self._store.fetch(
                Query(APPLICATIONS).eq("client_id", client.id)
            )
            self._check(generation)
            if app_rows:
                applications = [transform_application(r) for r in app_rows]
            else:
                now = self._clock().isoformat()
                applications = default_applications(client.id, now)
                self._probe.applications_defaulted(tenant_id=client.id)
            self._write(generation, applications=tuple(applications))

            stage = LoadStage.PEOPLE_COUNT
            self._stage(generation, stage, 3, "Getting total people count...")
            total_people = await self._store.count(people_query(client.id))
            self._check(generation)

            stage = LoadStage.PEOPLE_DATA
            first = min(self._initial_load_size, total_people)
            self._stage(
                generation,
                stage,
                4,
                f"Loading first {first} of {total_people} people...",
            )
            person_rows = await self._store.fetch(
                people_query(client.id).range(0, self._initial_load_size - 1)
            )
            self._check(generation)

            def on_collection(collection: RelatedCollection, key_count: int) -> None:
                nonlocal stage
                next_stage = _COLLECTION_STAGES.get(collection.name)
                if next_stage is None or next_stage == stage:
                    return
                stage = next_stage
                if stage is LoadStage.ENROLLMENTS:
                    self._stage(
                        generation,
                        stage,
                        5,
                        f"Loading enrollments for {key_count} people...",
                    )
                else:
                    self._stage(generation, stage, 6, "Loading documents and tasks...")

            association = await self._loader.load(
                person_rows, on_collection=on_collection
            )
            self._check(generation)
            people = compose_people(person_rows, association)
            self._write(
                generation,
                people=tuple(people),
                total_people=total_people,
                documents=tuple(
                    transform_document(r) for r in association.rows("documents")
                ),
                tasks=tuple(transform_task(r) for r in association.rows("tasks")),
            )
            if self._people_pagination is not None:
                self._seed_people_page(client.id, people, total_people)

            stage = LoadStage.INVITATIONS
            self._stage(generation, stage, 7, "Loading invitations...")
            invitation_rows = await self._store.fetch(
                Query(INVITATIONS).eq("client_id", client.id)
            )
            self._check(generation)
            apps_by_id = {app.id: app for app in applications}
            self._write(
                generation,
                invitations=tuple(
                    transform_invitation(r, apps_by_id) for r in invitation_rows
                ),
            )

            self._stage(
                generation, LoadStage.COMPLETE, STAGE_COUNT, "Data loading complete!"
            )
            self._probe.load_completed(
                tenant_id=client.id,
                people_count=len(people),
                total_count=total_people,
            )
        except _SupersededLoad:
            self._probe.stale_load_discarded(
                generation=generation, current_generation=self._generation
            )
        except (RemoteStoreError, TenantNotFoundError) as e:
            self._fail(generation, tenant_id, stage, str(e))
        except Exception as e:
            self._fail(
                generation,
                tenant_id,
                stage,
                "Failed to load dashboard data",
                detail=repr(e),
            )
        finally:
            if generation == self._generation:
                self.state.update(lambda s: s.model_copy(update={"loading": False}))

        return self.state.get()

    def _seed_people_page(
        self, tenant_id: str, people: list[ComposedPerson], total_people: int
    ) -> None:
        """Hand the first page to the people listing when it is complete.

        A partial first page (initial load smaller than the page size) is
        not seeded; the listing loads page 0 itself on first use.
        """
        pagination = self._people_pagination
        page_size = pagination.page_size
        if len(people) < min(page_size, total_people):
            pagination.reset()
            return
        pagination.seed_page(tenant_id, 0, people[:page_size], total_people)

    def _fail(
        self,
        generation: int,
        tenant_id: str,
        stage: LoadStage,
        message: str,
        detail: str | None = None,
    ) -> None:
        if generation != self._generation:
            return
        self.state.update(lambda s: s.model_copy(update={"error": message}))
        self._probe.load_failed(
            tenant_id=tenant_id, stage=stage.value, message=detail or message
        )

    async def load_demo_data(self, preferred_code: str | None = None) -> DashboardState:
        """Resolve a tenant by code (with demo fallbacks) and load it."""
        try:
            resolved = await self._resolver.resolve(preferred_code)
        except (RemoteStoreError, NoTenantsAvailableError) as e:
            self.state.update(
                lambda s: s.model_copy(update={"error": str(e), "loading": False})
            )
            self._probe.load_failed(
                tenant_id=preferred_code or "",
                stage=LoadStage.CLIENT.value,
                message=str(e),
            )
            return self.state.get()
        return await self.load_client_data(resolved.client.id)
