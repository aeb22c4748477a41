"""People domain layer: entity value objects and status normalization."""

from people.domain.status import (
    LegacyStatusField,
    NoStatusFields,
    PersonStatus,
    SplitStatusFields,
    StatusFields,
    classify_status_fields,
    normalize_status,
    resolve_status,
)
from people.domain.value_objects import (
    Application,
    Client,
    ComposedPerson,
    DocumentStatus,
    Enrollment,
    Invitation,
    MissingEnrollment,
    Person,
    PersonEnrollment,
    PeopleStatistics,
    ProcessSummary,
    TaskStatus,
)

__all__ = [
    "Application",
    "Client",
    "ComposedPerson",
    "DocumentStatus",
    "Enrollment",
    "Invitation",
    "LegacyStatusField",
    "MissingEnrollment",
    "NoStatusFields",
    "PeopleStatistics",
    "Person",
    "PersonEnrollment",
    "PersonStatus",
    "ProcessSummary",
    "SplitStatusFields",
    "StatusFields",
    "TaskStatus",
    "classify_status_fields",
    "normalize_status",
    "resolve_status",
]
