"""Unit tests for the staged dashboard load."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from infrastructure.remote_store import InMemoryRemoteStore
from people.application.orchestrator import (
    STAGE_COUNT,
    DashboardOrchestrator,
    LoadStage,
)
from people.application.pagination import PaginationController, PeoplePageSource
from people.domain.value_objects import InvitationType
from people.ports.exceptions import InvalidTenantError

TENANT = "client-1"
FIXED_NOW = datetime(2025, 1, 6, 12, 0, tzinfo=UTC)

STAGE_ORDER = [
    LoadStage.CLIENT,
    LoadStage.APPLICATIONS,
    LoadStage.PEOPLE_COUNT,
    LoadStage.PEOPLE_DATA,
    LoadStage.ENROLLMENTS,
    LoadStage.DOCUMENTS_AND_TASKS,
    LoadStage.INVITATIONS,
    LoadStage.COMPLETE,
]


class GatedStore(InMemoryRemoteStore):
    """In-memory store whose first ``fetch_one`` waits until the gate opens."""

    def __init__(self, tables=None):
        super().__init__(tables)
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()
        self._gated = 1

    async def fetch_one(self, query):
        if self._gated:
            self._gated -= 1
            self.entered.set()
            await self.gate.wait()
        return await super().fetch_one(query)


def seed_tenant(store, client_row, seeded_people, people=120, apps=True):
    store.seed("clients", [client_row])
    if apps:
        store.seed(
            "client_applications",
            [
                {
                    "id": "app-on",
                    "client_id": client_row["id"],
                    "app_code": "hh-onboarding",
                    "app_name": "Employee Onboarding",
                },
                {
                    "id": "app-off",
                    "client_id": client_row["id"],
                    "app_code": "hh-offboarding",
                    "app_name": "Employee Offboarding",
                },
            ],
        )
    store.seed(
        "invitations",
        [
            {
                "id": "inv-1",
                "client_id": client_row["id"],
                "app_id": "app-on",
                "status": "pending",
                "client_data": {"first_name": "Mette", "last_name": "Kjær"},
            },
            {
                "id": "inv-2",
                "client_id": client_row["id"],
                "app_id": "app-off",
                "status": "sent",
                "client_data": {"first_name": "Lars", "last_name": "Holm"},
            },
        ],
    )
    if people:
        seeded_people(store, people, client_id=client_row["id"])


@pytest.fixture
def mock_probe():
    return Mock()


@pytest.fixture
def pagination(store):
    return PaginationController(PeoplePageSource(store), page_size=25)


@pytest.fixture
def orchestrator(store, pagination, mock_probe):
    return DashboardOrchestrator(
        store,
        initial_load_size=50,
        people_pagination=pagination,
        probe=mock_probe,
        clock=lambda: FIXED_NOW,
    )


def record_stages(orchestrator) -> list:
    stages = []
    orchestrator.progress.subscribe(
        lambda progress: stages.append((progress.stage, progress.current))
    )
    return stages


class TestDashboardLoadStages:
    """Tests for stage ordering and progress reporting."""

    @pytest.mark.asyncio
    async def test_stages_run_in_order(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people)
        stages = record_stages(orchestrator)

        await orchestrator.load_client_data(TENANT)

        reported = [s for s, _ in stages if s is not LoadStage.INITIALIZING]
        assert reported == STAGE_ORDER
        assert [c for s, c in stages if s is not LoadStage.INITIALIZING] == [
            1,
            2,
            3,
            4,
            5,
            6,
            7,
            STAGE_COUNT,
        ]

    @pytest.mark.asyncio
    async def test_progress_messages(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people)
        messages = {}
        orchestrator.progress.subscribe(
            lambda progress: messages.setdefault(progress.stage, progress.message)
        )

        await orchestrator.load_client_data(TENANT)

        assert messages[LoadStage.PEOPLE_DATA] == "Loading first 50 of 120 people..."
        assert messages[LoadStage.ENROLLMENTS] == "Loading enrollments for 50 people..."
        assert messages[LoadStage.COMPLETE] == "Data loading complete!"


class TestDashboardLoadResults:
    """Tests for the state published by a successful load."""

    @pytest.mark.asyncio
    async def test_full_load(
        self, store, client_row, seeded_people, orchestrator, mock_probe
    ):
        seed_tenant(store, client_row, seeded_people)

        state = await orchestrator.load_client_data(TENANT)

        assert state.client.code == "hygge-hvidlog"
        assert len(state.applications) == 2
        assert len(state.people) == 50
        assert state.total_people == 120
        assert len(state.documents) == 50
        assert len(state.tasks) == 50
        assert state.loading is False
        assert state.error is None
        mock_probe.load_completed.assert_called_once_with(
            tenant_id=TENANT, people_count=50, total_count=120
        )

    @pytest.mark.asyncio
    async def test_invitation_type_comes_from_application(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people, people=0)

        state = await orchestrator.load_client_data(TENANT)

        types = {i.id: i.invitation_type for i in state.invitations}
        assert types == {
            "inv-1": InvitationType.ONBOARDING,
            "inv-2": InvitationType.OFFBOARDING,
        }

    @pytest.mark.asyncio
    async def test_first_people_page_is_seeded_into_pagination(
        self, store, client_row, seeded_people, orchestrator, pagination
    ):
        seed_tenant(store, client_row, seeded_people)

        await orchestrator.load_client_data(TENANT)
        store.reset_calls()
        second = await pagination.next_page()

        assert pagination.state.get().total_count == 120
        assert len(second) == 25
        assert store.calls_for("people", "count") == 0

    @pytest.mark.asyncio
    async def test_partial_first_page_is_not_seeded(
        self, store, client_row, seeded_people, mock_probe
    ):
        seed_tenant(store, client_row, seeded_people, people=300)
        pagination = PaginationController(PeoplePageSource(store), page_size=100)
        orchestrator = DashboardOrchestrator(
            store,
            initial_load_size=50,
            people_pagination=pagination,
            probe=mock_probe,
            clock=lambda: FIXED_NOW,
        )

        state = await orchestrator.load_client_data(TENANT)

        assert len(state.people) == 50
        assert pagination.state.get().loaded_pages == frozenset()

        first = await pagination.load_page(TENANT, 0)
        second = await pagination.next_page()

        seen = [item.person.id for item in first + second]
        assert seen == [f"{TENANT}-person-{i:04d}" for i in range(299, 99, -1)]

    @pytest.mark.asyncio
    async def test_tenant_without_people_completes(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people, people=0)
        stages = record_stages(orchestrator)

        state = await orchestrator.load_client_data(TENANT)

        assert state.people == ()
        assert state.total_people == 0
        assert state.error is None
        assert stages[-1][0] is LoadStage.COMPLETE
        assert store.calls_for("people_enrollments") == 0

    @pytest.mark.asyncio
    async def test_default_applications_when_none_exist(
        self, store, client_row, seeded_people, orchestrator, mock_probe
    ):
        seed_tenant(store, client_row, seeded_people, people=0, apps=False)

        state = await orchestrator.load_client_data(TENANT)

        assert {a.code for a in state.applications} == {"onboarding", "offboarding"}
        assert all(a.created_at == FIXED_NOW.isoformat() for a in state.applications)
        mock_probe.applications_defaulted.assert_called_once_with(tenant_id=TENANT)


class TestDashboardLoadFailures:
    """Tests that failures are recorded in state, never raised."""

    @pytest.mark.asyncio
    async def test_failing_stage_keeps_earlier_data(
        self, store, client_row, seeded_people, orchestrator, mock_probe
    ):
        seed_tenant(store, client_row, seeded_people)
        store.fail_on("invitations", "select")

        state = await orchestrator.load_client_data(TENANT)

        assert state.error == "invitations: could not reach the data service"
        assert state.loading is False
        assert len(state.people) == 50
        assert state.invitations == ()
        assert orchestrator.progress.get().stage is LoadStage.INVITATIONS
        mock_probe.load_failed.assert_called_once_with(
            tenant_id=TENANT,
            stage="Invitations",
            message="invitations: could not reach the data service",
        )
        mock_probe.load_completed.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_client(self, orchestrator):
        state = await orchestrator.load_client_data("missing")

        assert state.error == "Client 'missing' was not found"
        assert state.client is None
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_unexpected_error_gets_generic_message(
        self, store, client_row, seeded_people, mock_probe
    ):
        seed_tenant(store, client_row, seeded_people, people=3)
        loader = Mock()
        loader.load = AsyncMock(side_effect=RuntimeError("index out of range"))
        orchestrator = DashboardOrchestrator(store, loader=loader, probe=mock_probe)

        state = await orchestrator.load_client_data(TENANT)

        assert state.error == "Failed to load dashboard data"
        assert state.loading is False
        message = mock_probe.load_failed.call_args.kwargs["message"]
        assert "index out of range" in message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tenant", ["", "  "])
    async def test_missing_tenant_raises(self, store, orchestrator, tenant):
        with pytest.raises(InvalidTenantError):
            await orchestrator.load_client_data(tenant)

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_retry_after_failure_clears_error(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people, people=5)
        store.fail_on("people", "count")
        await orchestrator.load_client_data(TENANT)

        store.clear_failures()
        state = await orchestrator.load_client_data(TENANT)

        assert state.error is None
        assert len(state.people) == 5


class TestDashboardTenantSwitching:
    """Tests for switching tenants and superseded loads."""

    @pytest.mark.asyncio
    async def test_switch_never_shows_previous_tenant_rows(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people, people=5)
        store.seed("clients", [{**client_row, "id": "client-2", "client_code": "b"}])
        await orchestrator.load_client_data(TENANT)
        store.fail_on("people", "count")

        state = await orchestrator.load_client_data("client-2")

        assert state.client.id == "client-2"
        assert state.people == ()
        assert all(a.client_id == "client-2" for a in state.applications)
        assert state.error == "people: could not reach the data service"

    @pytest.mark.asyncio
    async def test_superseded_load_is_discarded(
        self, client_row, seeded_people, mock_probe
    ):
        store = GatedStore()
        seed_tenant(store, client_row, seeded_people, people=4)
        other = {**client_row, "id": "client-2", "client_code": "meridian-brands"}
        seed_tenant(store, other, seeded_people, people=2)
        orchestrator = DashboardOrchestrator(store, probe=mock_probe)

        first = asyncio.create_task(orchestrator.load_client_data(TENANT))
        await store.entered.wait()
        await orchestrator.load_client_data("client-2")
        store.gate.set()
        await first

        state = orchestrator.state.get()
        assert state.client.id == "client-2"
        assert len(state.people) == 2
        assert all(p.person.client_id == "client-2" for p in state.people)
        assert state.loading is False
        mock_probe.stale_load_discarded.assert_called_once_with(
            generation=1, current_generation=2
        )


class TestLoadDemoData:
    """Tests for loading by client code with demo fallbacks."""

    @pytest.mark.asyncio
    async def test_unknown_code_falls_back_to_demo_tenant(
        self, store, client_row, seeded_people, orchestrator
    ):
        seed_tenant(store, client_row, seeded_people, people=3)

        state = await orchestrator.load_demo_data("does-not-exist")

        assert state.client.code == "hygge-hvidlog"
        assert len(state.people) == 3
        assert state.error is None

    @pytest.mark.asyncio
    async def test_no_clients_is_an_error_state(self, orchestrator, mock_probe):
        state = await orchestrator.load_demo_data()

        assert state.error == "No clients found in database"
        assert state.loading is False
        mock_probe.load_failed.assert_called_once()
