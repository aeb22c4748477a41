"""Domain value objects for the People bounded context.

These are immutable data structures representing what the dashboard
shows for a tenant: people, their enrollment, documents and tasks,
invitations, applications and offboarding processes. They are produced
only by the transform layer, never built from raw rows elsewhere.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from people.domain.status import PersonStatus


class EmploymentStatus(str, Enum):
    ACTIVE = "active"
    FORMER = "former"
    FUTURE = "future"


class AssociateStatus(str, Enum):
    BOARD_MEMBER = "board_member"
    CONSULTANT = "consultant"
    ADVISOR = "advisor"
    CONTRACTOR = "contractor"
    VOLUNTEER = "volunteer"
    PARTNER = "partner"
    OTHER = "other"


class SecurityClearance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WorkLocation(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    HYBRID = "hybrid"


class DocumentType(str, Enum):
    CONTRACT = "contract"
    ID_VERIFICATION = "id_verification"
    TAX_FORM = "tax_form"
    GDPR_CONSENT = "gdpr_consent"
    FINANCIAL_DISCLOSURE = "financial_disclosure"
    HANDBOOK = "handbook"
    OTHER = "other"


class DocumentReviewStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    VERIFIED = "verified"
    REJECTED = "rejected"


class TaskState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class InvitationType(str, Enum):
    ONBOARDING = "onboarding"
    OFFBOARDING = "offboarding"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


class Person(BaseModel):
    """An employee or associate of one tenant.

    ``status`` is the canonical status resolved from whichever schema
    generation the row came from; ``employment_status`` and
    ``associate_status`` keep the split fields when present.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str = ""
    person_code: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    department: str = ""
    position: str = ""
    location: str = ""
    manager: str = ""
    phone: str = ""
    start_date: str | None = None
    end_date: str | None = None
    employment_status: EmploymentStatus | None = None
    associate_status: AssociateStatus | None = None
    status: PersonStatus = PersonStatus.OTHER
    security_clearance: SecurityClearance | None = None
    employment_type: str = ""
    work_location: WorkLocation | None = None
    skills: frozenset[str] = frozenset()
    languages: frozenset[str] = frozenset()
    created_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_row(self) -> dict[str, Any]:
        """Backend row shape of this person (inverse of ``transform_person``)."""
        return {
            "id": self.id,
            "client_id": self.client_id,
            "person_code": self.person_code,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "company_email": self.email,
            "department": self.department,
            "position": self.position,
            "location": self.location,
            "manager": self.manager,
            "phone": self.phone,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "employment_status": self.employment_status.value
            if self.employment_status
            else None,
            "associate_status": self.associate_status.value
            if self.associate_status
            else None,
            "status": self.status.value,
            "security_clearance": self.security_clearance.value
            if self.security_clearance
            else None,
            "employment_type": self.employment_type,
            "work_location": self.work_location.value if self.work_location else None,
            "skills": sorted(self.skills),
            "languages": sorted(self.languages),
            "created_at": self.created_at,
        }


class DocumentStatus(BaseModel):
    """A document a person has to provide; many per person."""

    model_config = ConfigDict(frozen=True)

    id: str
    person_id: str
    name: str = ""
    type: DocumentType = DocumentType.OTHER
    status: DocumentReviewStatus = DocumentReviewStatus.PENDING
    uploaded_at: str | None = None
    reviewed_at: str | None = None
    reviewed_by: str | None = None
    comments: str = ""


class TaskStatus(BaseModel):
    """A task assigned to a person; many per person."""

    model_config = ConfigDict(frozen=True)

    id: str
    person_id: str
    title: str = ""
    description: str = ""
    category: str = ""
    status: TaskState = TaskState.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    assigned_at: str | None = None
    assigned_by: str | None = None
    completed_at: str | None = None
    due_date: str | None = None


class PersonEnrollment(BaseModel):
    """Onboarding/offboarding progress of one person.

    ``completion_percentage`` is authoritative: ``is_complete`` is derived
    from it alone. ``onboarding_completed`` is kept as stored; rows where it
    disagrees with the percentage are reported through ``is_consistent``,
    never corrected.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["present"] = "present"
    person_id: str
    onboarding_completed: bool = False
    completion_percentage: int = 0
    last_activity: str | None = None
    documents_status: tuple[DocumentStatus, ...] = ()
    tasks_status: tuple[TaskStatus, ...] = ()

    @field_validator("completion_percentage", mode="before")
    @classmethod
    def clamp_percentage(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(round(float(value)))))

    @property
    def is_complete(self) -> bool:
        return self.completion_percentage == 100

    @property
    def is_consistent(self) -> bool:
        return (self.completion_percentage == 100) == self.onboarding_completed


class MissingEnrollment(BaseModel):
    """Explicit marker for a person without an enrollment row.

    Distinct from an enrollment at 0% completion.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["absent"] = "absent"
    person_id: str


Enrollment: TypeAlias = Annotated[
    PersonEnrollment | MissingEnrollment, Field(discriminator="kind")
]


class ComposedPerson(BaseModel):
    """A person with its related rows attached by the bulk loader."""

    model_config = ConfigDict(frozen=True)

    person: Person
    enrollment: Enrollment
    documents: tuple[DocumentStatus, ...] = ()
    tasks: tuple[TaskStatus, ...] = ()

    @property
    def has_enrollment(self) -> bool:
        return isinstance(self.enrollment, PersonEnrollment)


class Invitation(BaseModel):
    """Invitation to an application; invitees may not exist as people yet."""

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str = ""
    application_id: str | None = None
    invitation_code: str = ""
    company_email: str = ""
    private_email: str = ""
    first_name: str = ""
    last_name: str = ""
    department: str = ""
    position: str = ""
    invitation_type: InvitationType = InvitationType.OFFBOARDING
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: str | None = None
    sent_at: str | None = None
    expires_at: str | None = None
    accepted_at: str | None = None
    created_by: str | None = None


class Application(BaseModel):
    """Tenant-scoped onboarding or offboarding application."""

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str
    name: str = ""
    code: str = ""
    type: InvitationType = InvitationType.OFFBOARDING
    status: str = "active"
    version: str = "1.0.0"
    description: str = ""
    features: tuple[str, ...] = ()
    configuration: dict[str, Any] = Field(default_factory=dict)
    permissions: dict[str, Any] = Field(default_factory=dict)
    max_concurrent_users: int = 50
    last_accessed: str | None = None
    created_at: str | None = None


class Client(BaseModel):
    """A tenant: root of the ownership graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    code: str = ""
    domain: str = ""
    tier: str = ""
    status: str = ""
    region: str = "EU"


class ProcessSummary(BaseModel):
    """One offboarding process with progress derived from its tasks."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    person_name: str = ""
    person_code: str = ""
    status: str = ""
    progress: int = 0
    due_date: str | None = None
    created_at: str | None = None
    tasks_count: int = 0
    completed_tasks: int = 0


class PeopleStatistics(BaseModel):
    """Headline counts for a tenant under the current search and filters."""

    model_config = ConfigDict(frozen=True)

    total_people: int = 0
    active_employees: int = 0
    associates: int = 0
    future_employees: int = 0
