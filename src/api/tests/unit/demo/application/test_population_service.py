"""Unit tests for demo population."""

import pytest

from demo.application.generator import DemoDataGenerator
from demo.application.services import DemoPopulationService
from demo.ports.exceptions import BatchInsertError, DemoClientNotFoundError

CLIENT_ID = "c-hygge"


@pytest.fixture
def demo_store(store):
    store.seed(
        "clients",
        [
            {
                "id": CLIENT_ID,
                "client_code": "hygge-hvidlog",
                "domain": "hygge-hvidlog.dk",
            }
        ],
    )
    return store


@pytest.fixture
def service(demo_store):
    return DemoPopulationService(demo_store, DemoDataGenerator(seed=42), batch_size=100)


class TestPopulate:
    """Tests for a complete population run."""

    @pytest.mark.asyncio
    async def test_inserts_people_in_batches(self, service, demo_store):
        summary = await service.populate("hygge-hvidlog", 250)

        assert summary.client_id == CLIENT_ID
        assert summary.people_sent == 250
        assert summary.people_inserted == 250
        assert summary.people_batches == 3
        assert summary.skipped_batches == 0
        people = demo_store.rows("people")
        assert len(people) == 250
        assert all(p["client_id"] == CLIENT_ID for p in people)
        assert all(p["person_code"].startswith("hh-") for p in people)
        assert all(p["company_email"].endswith("@hygge-hvidlog.dk") for p in people)

    @pytest.mark.asyncio
    async def test_related_rows_reference_stored_people(self, service, demo_store):
        summary = await service.populate("hygge-hvidlog", 120)

        person_ids = {p["id"] for p in demo_store.rows("people")}
        enrollments = demo_store.rows("people_enrollments")
        assert summary.enrollments == len(enrollments)
        assert summary.enrollments + summary.missing_enrollments == 120
        assert summary.missing_enrollments > 0
        assert summary.documents == len(demo_store.rows("documents"))
        assert summary.tasks == len(demo_store.rows("tasks"))
        for table in ("people_enrollments", "documents", "tasks"):
            assert {r["person_id"] for r in demo_store.rows(table)} <= person_ids

    @pytest.mark.asyncio
    async def test_people_are_read_back_one_batch_at_a_time(
        self, service, demo_store
    ):
        await service.populate("hygge-hvidlog", 250, keep_existing=True)

        assert demo_store.calls_for("people", "select") == 3

    @pytest.mark.asyncio
    async def test_progress_reports_both_stages(self, service):
        seen = []

        await service.populate(
            "hygge-hvidlog",
            150,
            progress=lambda stage, done: seen.append((stage, done)),
        )

        assert seen == [
            ("people", 100),
            ("people", 150),
            ("related", 100),
            ("related", 150),
        ]

    @pytest.mark.asyncio
    async def test_missing_client_raises(self, store):
        service = DemoPopulationService(store)

        with pytest.raises(DemoClientNotFoundError) as exc_info:
            await service.populate("hygge-hvidlog", 10)

        assert exc_info.value.client_code == "hygge-hvidlog"
        assert store.calls_for("people") == 0


class TestExistingPeople:
    @pytest.mark.asyncio
    async def test_existing_people_are_removed_first(
        self, service, demo_store, seeded_people
    ):
        seeded_people(demo_store, 10, client_id=CLIENT_ID)

        summary = await service.populate("hygge-hvidlog", 20)

        assert summary.removed == 40
        assert len(demo_store.rows("people")) == 20

    @pytest.mark.asyncio
    async def test_keep_existing(self, service, demo_store, seeded_people):
        seeded_people(demo_store, 10, client_id=CLIENT_ID)

        summary = await service.populate("hygge-hvidlog", 20, keep_existing=True)

        assert summary.removed == 0
        assert len(demo_store.rows("people")) == 30

    @pytest.mark.asyncio
    async def test_other_tenants_are_kept(self, service, demo_store, seeded_people):
        seeded_people(demo_store, 10, client_id="other-client")

        await service.populate("hygge-hvidlog", 20)

        assert len(demo_store.rows("people")) == 30

    @pytest.mark.asyncio
    async def test_rerun_does_not_duplicate(self, service, demo_store):
        await service.populate("hygge-hvidlog", 50)
        first = {
            table: len(demo_store.rows(table))
            for table in ("people", "people_enrollments", "documents", "tasks")
        }

        summary = await service.populate("hygge-hvidlog", 50, keep_existing=True)

        assert summary.people_inserted == 0
        assert summary.enrollments == summary.documents == summary.tasks == 0
        for table, count in first.items():
            assert len(demo_store.rows(table)) == count


class TestFailureAndResume:
    """Tests for a failed run and resuming it."""

    @pytest.mark.asyncio
    async def test_people_failure_reports_resume_batch(self, service, demo_store):
        demo_store.fail_on("people", "insert", after_calls=1)

        with pytest.raises(BatchInsertError) as exc_info:
            await service.populate("hygge-hvidlog", 250)

        assert exc_info.value.table == "people"
        assert exc_info.value.resume_batch == 1
        assert len(demo_store.rows("people")) == 100
        assert demo_store.rows("people_enrollments") == []

    @pytest.mark.asyncio
    async def test_resume_completes_the_run(self, service, demo_store):
        demo_store.fail_on("people", "insert", after_calls=1)
        with pytest.raises(BatchInsertError) as exc_info:
            await service.populate("hygge-hvidlog", 250)
        demo_store.clear_failures()

        summary = await service.populate(
            "hygge-hvidlog", 250, resume_batch=exc_info.value.resume_batch
        )

        assert summary.removed == 0
        assert summary.skipped_batches == 1
        assert summary.people_inserted == 150
        codes = [p["person_code"] for p in demo_store.rows("people")]
        assert len(codes) == len(set(codes)) == 250
        assert summary.enrollments + summary.missing_enrollments == 250

    @pytest.mark.asyncio
    async def test_related_failure_keeps_people(self, service, demo_store):
        demo_store.fail_on("documents", "insert")

        with pytest.raises(BatchInsertError) as exc_info:
            await service.populate("hygge-hvidlog", 150)

        assert exc_info.value.table == "documents"
        assert len(demo_store.rows("people")) == 150

    @pytest.mark.asyncio
    async def test_related_rows_fill_in_on_rerun(self, service, demo_store):
        demo_store.fail_on("documents", "insert")
        with pytest.raises(BatchInsertError):
            await service.populate("hygge-hvidlog", 150)
        demo_store.clear_failures()

        summary = await service.populate("hygge-hvidlog", 150, keep_existing=True)

        assert summary.people_inserted == 0
        assert summary.documents == len(demo_store.rows("documents"))
        person_ids = {p["id"] for p in demo_store.rows("people")}
        assert {d["person_id"] for d in demo_store.rows("documents")} == person_ids
        enrolled = [e["person_id"] for e in demo_store.rows("people_enrollments")]
        assert len(enrolled) == len(set(enrolled))
