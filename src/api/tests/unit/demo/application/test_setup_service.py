"""Unit tests for demo client setup, status and reset."""

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from demo.application.services import DemoSetupService

ISSUED_AT = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)


@pytest.fixture
def mock_probe():
    return Mock()


@pytest.fixture
def service(store, mock_probe):
    return DemoSetupService(store, probe=mock_probe, clock=lambda: ISSUED_AT)


class TestSetup:
    """Tests for creating a demo client."""

    @pytest.mark.asyncio
    async def test_creates_client_applications_and_invitations(self, service, store):
        summary = await service.setup("hygge-hvidlog")

        assert summary.created is True
        assert summary.skipped is False
        assert summary.client["legal_name"] == "Hygge & Hvidløg A/S"
        assert [a["app_code"] for a in summary.applications] == [
            "offboarding",
            "onboarding",
        ]
        assert len(summary.invitations) == 5
        assert len(store.rows("clients")) == 1
        assert len(store.rows("invitations")) == 5

    @pytest.mark.asyncio
    async def test_invitations_point_at_matching_application(self, service):
        summary = await service.setup("hygge-hvidlog")

        app_ids = {a["app_code"]: a["id"] for a in summary.applications}
        for invitation in summary.invitations:
            code = invitation["invitation_code"].removeprefix("inv-")
            assert code.startswith("hh-")
            if "training_access" in invitation["permissions"]:
                assert invitation["app_id"] == app_ids["onboarding"]
            else:
                assert invitation["app_id"] == app_ids["offboarding"]

    @pytest.mark.asyncio
    async def test_invitations_expire_a_week_after_setup(self, service):
        summary = await service.setup("nets-demo")

        assert {i["expires_at"] for i in summary.invitations} == {
            "2025-01-13T09:00:00+00:00"
        }

    @pytest.mark.asyncio
    async def test_existing_client_is_skipped(self, service, store, mock_probe):
        await service.setup("hygge-hvidlog")
        store.reset_calls()

        summary = await service.setup("hygge-hvidlog")

        assert summary.skipped is True
        assert summary.created is False
        assert store.calls_for("clients", "insert") == 0
        assert store.calls_for("client_applications", "insert") == 0
        mock_probe.demo_client_ready.assert_called_with(
            "hygge-hvidlog", summary.client["id"], False
        )

    @pytest.mark.asyncio
    async def test_force_rewrites_without_duplicates(self, service, store):
        first = await service.setup("hygge-hvidlog")

        second = await service.setup("hygge-hvidlog", force=True)

        assert second.created is False
        assert second.skipped is False
        assert second.client["id"] == first.client["id"]
        assert len(second.applications) == 2
        assert len(store.rows("clients")) == 1
        assert len(store.rows("client_applications")) == 2
        assert len(store.rows("invitations")) == 5

    @pytest.mark.asyncio
    async def test_unknown_code_gets_generic_client(self, service):
        summary = await service.setup("acme-corp")

        assert summary.client["legal_name"] == "Acme Corp Demo"
        assert summary.client["domain"] == "acme-corp.example.com"


class TestStatus:
    @pytest.mark.asyncio
    async def test_missing_client(self, service):
        status = await service.status("hygge-hvidlog")

        assert status.exists is False
        assert status.people == 0

    @pytest.mark.asyncio
    async def test_counts(self, service, store, seeded_people):
        summary = await service.setup("hygge-hvidlog")
        seeded_people(store, 12, client_id=summary.client["id"])

        status = await service.status("hygge-hvidlog")

        assert status.exists is True
        assert status.applications == 2
        assert status.invitations == 5
        assert status.people == 12


class TestReset:
    """Tests for removing a demo client."""

    @pytest.mark.asyncio
    async def test_removes_client_and_everything_it_owns(
        self, service, store, seeded_people
    ):
        summary = await service.setup("hygge-hvidlog")
        client_id = summary.client["id"]
        seeded_people(store, 30, client_id=client_id)
        store.seed("offboarding_processes", [{"id": "pr1", "client_id": client_id}])
        store.seed("offboarding_tasks", [{"id": "t1", "process_id": "pr1"}])

        reset = await service.reset("hygge-hvidlog")

        assert reset.removed["clients"] == 1
        assert reset.removed["people"] == 30
        assert reset.removed["people_enrollments"] == 30
        assert reset.removed["invitations"] == 5
        assert reset.removed["offboarding_tasks"] == 1
        for table in (
            "clients",
            "client_applications",
            "invitations",
            "people",
            "people_enrollments",
            "documents",
            "tasks",
            "offboarding_processes",
            "offboarding_tasks",
        ):
            assert store.rows(table) == [], table

    @pytest.mark.asyncio
    async def test_leaves_other_tenants_alone(self, service, store, seeded_people):
        await service.setup("hygge-hvidlog")
        seeded_people(store, 5, client_id="other-client")

        await service.reset("hygge-hvidlog")

        assert len(store.rows("people")) == 5

    @pytest.mark.asyncio
    async def test_missing_client_returns_none(self, service, store):
        assert await service.reset("hygge-hvidlog") is None
        assert store.calls_for("clients", "delete") == 0
