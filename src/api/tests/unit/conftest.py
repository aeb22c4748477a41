"""Unit test fixtures with an in-memory remote store."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
import structlog

from infrastructure.remote_store import InMemoryRemoteStore

TENANT_ID = "client-1"
OTHER_TENANT_ID = "client-2"

_CREATED_BASE = datetime(2024, 1, 1, tzinfo=UTC)


def person_row(index: int, client_id: str = TENANT_ID, **overrides) -> dict:
    """Backend ``people`` row; higher indexes are newer."""
    row = {
        "id": f"{client_id}-person-{index:04d}",
        "client_id": client_id,
        "person_code": f"emp-{index + 1:04d}",
        "first_name": f"First{index}",
        "last_name": f"Last{index}",
        "company_email": f"first{index}.last{index}@example.com",
        "department": "Engineering",
        "position": "Engineer",
        "employment_status": "active",
        "associate_status": None,
        "created_at": (_CREATED_BASE + timedelta(minutes=index)).isoformat(),
    }
    row.update(overrides)
    return row


def enrollment_row(person_id: str, percentage: int = 50) -> dict:
    return {
        "id": f"enr-{person_id}",
        "person_id": person_id,
        "onboarding_completed": percentage == 100,
        "completion_percentage": percentage,
        "last_activity": "2025-01-05T10:00:00+00:00",
    }


def seed_people(
    store: InMemoryRemoteStore,
    count: int,
    client_id: str = TENANT_ID,
    without_enrollment: frozenset[int] = frozenset(),
) -> list[dict]:
    """Seed ``count`` people, each with an enrollment, a document and a task.

    People whose index is in ``without_enrollment`` get no enrollment row.
    """
    people = [person_row(i, client_id) for i in range(count)]
    store.seed("people", people)
    store.seed(
        "people_enrollments",
        [
            enrollment_row(p["id"])
            for i, p in enumerate(people)
            if i not in without_enrollment
        ],
    )
    store.seed(
        "documents",
        [
            {"id": f"doc-{p['id']}", "person_id": p["id"], "name": "Contract"}
            for p in people
        ],
    )
    store.seed(
        "tasks",
        [
            {"id": f"task-{p['id']}", "person_id": p["id"], "title": "Sign contract"}
            for p in people
        ],
    )
    return people


@pytest.fixture
def store() -> InMemoryRemoteStore:
    """Provide an empty in-memory remote store."""
    return InMemoryRemoteStore()


@pytest.fixture
def client_row() -> dict:
    return {
        "id": TENANT_ID,
        "client_code": "hygge-hvidlog",
        "legal_name": "Hygge & Hvidløg A/S",
        "domain": "hygge-hvidlog.dk",
        "tier": "enterprise",
        "status": "active",
        "region": "EU",
    }


@pytest.fixture
def mock_logger() -> MagicMock:
    """Provide a mocked structlog logger for probe tests."""
    return MagicMock(spec=structlog.stdlib.BoundLogger)


@pytest.fixture
def make_person_row():
    """Factory for backend ``people`` rows."""
    return person_row


@pytest.fixture
def make_enrollment_row():
    """Factory for backend ``people_enrollments`` rows."""
    return enrollment_row


@pytest.fixture
def seeded_people():
    """Seeds people with related rows into a store (see ``seed_people``)."""
    return seed_people
