"""Person status across backend schema generations.

Older rows carry a single ``status`` string; current rows split it into
``employment_status`` and ``associate_status``. A row is classified once
into one of three shapes and resolved to a canonical ``PersonStatus``;
nothing downstream looks at the raw fields again.

Resolution order:
    1. ``employment_status`` exactly ``active``/``former``/``future``
    2. a non-null ``associate_status`` (always ``OTHER``)
    3. the legacy ``status`` string
    4. neither present: ``OTHER``
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias


class PersonStatus(str, Enum):
    """Canonical status shown by the dashboard.

    ``OTHER`` is the bucket for associates and for rows whose status cannot
    be determined.
    """

    ACTIVE = "active"
    PREVIOUS = "previous"
    FUTURE = "future"
    OTHER = "other"


_EMPLOYMENT_STATUS: dict[str, PersonStatus] = {
    "active": PersonStatus.ACTIVE,
    "former": PersonStatus.PREVIOUS,
    "future": PersonStatus.FUTURE,
}

_LEGACY_STATUS: dict[str, PersonStatus] = {
    "active": PersonStatus.ACTIVE,
    "previous": PersonStatus.PREVIOUS,
    "former": PersonStatus.PREVIOUS,
    "offboarded": PersonStatus.PREVIOUS,
    "future": PersonStatus.FUTURE,
}


@dataclass(frozen=True)
class SplitStatusFields:
    """Current schema: separate employment and associate columns."""

    employment_status: str | None
    associate_status: str | None


@dataclass(frozen=True)
class LegacyStatusField:
    """First schema generation: one ``status`` column."""

    status: str


@dataclass(frozen=True)
class NoStatusFields:
    """Row carries no usable status information."""


StatusFields: TypeAlias = SplitStatusFields | LegacyStatusField | NoStatusFields


def _present(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def classify_status_fields(row: Mapping[str, Any]) -> StatusFields:
    """Decide which schema generation a row's status columns belong to.

    Split fields win whenever they are decisive (a recognised employment
    status or any associate status). A legacy ``status`` is consulted only
    when they are not.
    """
    employment = _present(row.get("employment_status"))
    associate = _present(row.get("associate_status"))
    legacy = _present(row.get("status"))

    if employment in _EMPLOYMENT_STATUS or associate is not None:
        return SplitStatusFields(employment, associate)
    if legacy is not None:
        return LegacyStatusField(legacy)
    if employment is not None:
        return SplitStatusFields(employment, None)
    return NoStatusFields()


def resolve_status(fields: StatusFields) -> PersonStatus:
    match fields:
        case SplitStatusFields(employment_status=employment) if (
            employment in _EMPLOYMENT_STATUS
        ):
            return _EMPLOYMENT_STATUS[employment]
        case LegacyStatusField(status=legacy):
            return _LEGACY_STATUS.get(legacy, PersonStatus.OTHER)
        case _:
            return PersonStatus.OTHER


def normalize_status(row: Mapping[str, Any]) -> PersonStatus:
    """Canonical status for a backend person row of either schema generation."""
    return resolve_status(classify_status_fields(row))

