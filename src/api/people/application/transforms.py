"""Transform layer: backend rows to domain value objects.

Pure functions, no I/O. Every optional field that is missing or null in the
backend row becomes ``""``, ``None`` or an empty collection on the entity.
Each transform also accepts an already-transformed entity and returns it
unchanged, so transforming twice is the same as transforming once.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, TypeVar

from people.domain.status import normalize_status
from people.domain.value_objects import (
    Application,
    AssociateStatus,
    Client,
    DocumentReviewStatus,
    DocumentStatus,
    DocumentType,
    EmploymentStatus,
    Invitation,
    InvitationStatus,
    InvitationType,
    Person,
    PersonEnrollment,
    Priority,
    ProcessSummary,
    SecurityClearance,
    TaskState,
    TaskStatus,
    WorkLocation,
)

E = TypeVar("E", bound=Enum)

Row = Mapping[str, Any]


def _text(row: Row, key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value)


def _optional_text(row: Row, key: str) -> str | None:
    value = row.get(key)
    return None if value is None or value == "" else str(value)


def _enum(enum_cls: type[E], value: Any, default: E | None = None) -> E | None:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _string_set(value: Any) -> frozenset[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset(part.strip() for part in value.split(",") if part.strip())
    return frozenset(str(item) for item in value)


def transform_person(row: Row | Person) -> Person:
    """Map a ``people`` row (either status generation) to a ``Person``."""
    if isinstance(row, Person):
        return row
    return Person(
        id=str(row["id"]),
        client_id=_text(row, "client_id"),
        person_code=_text(row, "person_code"),
        first_name=_text(row, "first_name"),
        last_name=_text(row, "last_name"),
        email=_text(row, "company_email") or _text(row, "email"),
        department=_text(row, "department"),
        position=_text(row, "position"),
        location=_text(row, "location"),
        manager=_text(row, "manager"),
        phone=_text(row, "phone"),
        start_date=_optional_text(row, "start_date"),
        end_date=_optional_text(row, "end_date"),
        employment_status=_enum(EmploymentStatus, row.get("employment_status")),
        associate_status=_enum(AssociateStatus, row.get("associate_status")),
        status=normalize_status(row),
        security_clearance=_enum(SecurityClearance, row.get("security_clearance")),
        employment_type=_text(row, "employment_type"),
        work_location=_enum(WorkLocation, row.get("work_location")),
        skills=_string_set(row.get("skills")),
        languages=_string_set(row.get("languages")),
        created_at=_optional_text(row, "created_at"),
    )


def transform_document(row: Row | DocumentStatus) -> DocumentStatus:
    if isinstance(row, DocumentStatus):
        return row
    return DocumentStatus(
        id=str(row["id"]),
        person_id=_text(row, "person_id"),
        name=_text(row, "name"),
        type=_enum(DocumentType, row.get("type"), DocumentType.OTHER),
        status=_enum(
            DocumentReviewStatus, row.get("status"), DocumentReviewStatus.PENDING
        ),
        uploaded_at=_optional_text(row, "uploaded_at"),
        reviewed_at=_optional_text(row, "reviewed_at"),
        reviewed_by=_optional_text(row, "reviewed_by"),
        comments=_text(row, "comments"),
    )


def transform_task(row: Row | TaskStatus) -> TaskStatus:
    if isinstance(row, TaskStatus):
        return row
    return TaskStatus(
        id=str(row["id"]),
        person_id=_text(row, "person_id"),
        title=_text(row, "title"),
        description=_text(row, "description"),
        category=_text(row, "category"),
        status=_enum(TaskState, row.get("status"), TaskState.NOT_STARTED),
        priority=_enum(Priority, row.get("priority"), Priority.MEDIUM),
        assigned_at=_optional_text(row, "assigned_at"),
        assigned_by=_optional_text(row, "assigned_by"),
        completed_at=_optional_text(row, "completed_at"),
        due_date=_optional_text(row, "due_date"),
    )


def transform_enrollment(
    row: Row,
    documents: Iterable[Row | DocumentStatus] = (),
    tasks: Iterable[Row | TaskStatus] = (),
) -> PersonEnrollment:
    """Map a ``people_enrollments`` row plus the person's documents and tasks."""
    return PersonEnrollment(
        person_id=_text(row, "person_id"),
        onboarding_completed=bool(row.get("onboarding_completed")),
        completion_percentage=row.get("completion_percentage"),
        last_activity=_optional_text(row, "last_activity"),
        documents_status=tuple(transform_document(d) for d in documents),
        tasks_status=tuple(transform_task(t) for t in tasks),
    )


def application_type(app_code: str | None) -> InvitationType:
    """Applications whose code mentions onboarding are onboarding apps."""
    if app_code and "onboarding" in app_code:
        return InvitationType.ONBOARDING
    return InvitationType.OFFBOARDING


def transform_application(row: Row | Application) -> Application:
    """Map a ``client_applications`` row to an ``Application``."""
    if isinstance(row, Application):
        return row
    code = _text(row, "app_code") or _text(row, "code")
    features = row.get("features")
    return Application(
        id=str(row["id"]),
        client_id=_text(row, "client_id"),
        name=_text(row, "app_name") or _text(row, "name"),
        code=code,
        type=application_type(code),
        status=_text(row, "status") or "active",
        version=_text(row, "app_version") or "1.0.0",
        description=_text(row, "app_description"),
        features=tuple(features) if isinstance(features, (list, tuple)) else (),
        configuration=dict(row.get("configuration") or {}),
        permissions=dict(row.get("permissions") or {}),
        max_concurrent_users=row.get("max_concurrent_users") or 50,
        last_accessed=_optional_text(row, "last_accessed"),
        created_at=_optional_text(row, "created_at"),
    )


def transform_invitation(
    row: Row | Invitation,
    applications: Mapping[str, Application] | None = None,
) -> Invitation:
    """Map an ``invitations`` row to an ``Invitation``.

    Invitee details are denormalized in the row's ``client_data`` object.
    The invitation type comes from the invitation's application when it is
    among ``applications`` (keyed by id), else from an ``app_code`` on the
    row itself.
    """
    if isinstance(row, Invitation):
        return row
    client_data = row.get("client_data") or {}
    app_id = _optional_text(row, "app_id")
    app = (applications or {}).get(app_id) if app_id else None
    invitation_type = app.type if app else application_type(row.get("app_code"))

    return Invitation(
        id=str(row["id"]),
        client_id=_text(row, "client_id"),
        application_id=app_id,
        invitation_code=_text(row, "invitation_code"),
        company_email=_text(client_data, "company_email"),
        private_email=_text(client_data, "private_email"),
        first_name=_text(client_data, "first_name"),
        last_name=_text(client_data, "last_name"),
        department=_text(client_data, "department"),
        position=_text(client_data, "position"),
        invitation_type=invitation_type,
        status=_enum(InvitationStatus, row.get("status"), InvitationStatus.PENDING),
        created_at=_optional_text(row, "created_at"),
        sent_at=_optional_text(row, "first_used_at"),
        expires_at=_optional_text(row, "expires_at"),
        accepted_at=_optional_text(row, "accepted_at"),
        created_by=_optional_text(row, "created_by"),
    )


def transform_client(row: Row | Client) -> Client:
    if isinstance(row, Client):
        return row
    return Client(
        id=str(row["id"]),
        name=_text(row, "legal_name") or _text(row, "client_name"),
        code=_text(row, "client_code"),
        domain=_text(row, "domain"),
        tier=_text(row, "tier"),
        status=_text(row, "status"),
        region=_text(row, "region") or "EU",
    )


def task_progress(tasks: Sequence[Row]) -> int:
    """Rounded percentage of completed tasks; 0 for no tasks."""
    if not tasks:
        return 0
    completed = sum(1 for t in tasks if t.get("status") == "completed")
    return round(completed / len(tasks) * 100)


def transform_process(
    row: Row,
    person: Row | None = None,
    tasks: Sequence[Row] = (),
) -> ProcessSummary:
    """Map an ``offboarding_processes`` row with its person and tasks."""
    person = person or {}
    person_name = f"{_text(person, 'first_name')} {_text(person, 'last_name')}".strip()
    completed = sum(1 for t in tasks if t.get("status") == "completed")
    return ProcessSummary(
        id=str(row["id"]),
        title=_text(row, "title") or f"Process for {person_name}".strip(),
        person_name=person_name,
        person_code=_text(person, "person_code"),
        status=_text(row, "status"),
        progress=task_progress(tasks),
        due_date=_optional_text(row, "target_completion_date"),
        created_at=_optional_text(row, "created_at"),
        tasks_count=len(tasks),
        completed_tasks=completed,
    )


# Mock pair published when a tenant has no application rows.
def default_applications(client_id: str, now: str) -> list[Application]:
    return [
        Application(
            id="app-offboarding-001",
            client_id=client_id,
            name="Employee Offboarding",
            code="offboarding",
            type=InvitationType.OFFBOARDING,
            description="Task-oriented employee offboarding and departure management",
            features=("task-management", "document-upload", "compliance-tracking"),
            last_accessed=now,
            created_at=now,
        ),
        Application(
            id="app-onboarding-001",
            client_id=client_id,
            name="Employee Onboarding",
            code="onboarding",
            type=InvitationType.ONBOARDING,
            description="Streamlined employee onboarding and setup",
            features=(
                "invitation-management",
                "document-collection",
                "task-tracking",
            ),
            last_accessed=now,
            created_at=now,
        ),
    ]
