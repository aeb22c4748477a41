"""Deterministic synthetic rows for demo tenants.

Every row is derived from a seed plus a stable natural key (the row index
for people, the ``person_code`` for related rows), never from shared random
state. Regenerating any slice of the sequence therefore yields identical
rows, which is what makes a resumed population run insert exactly the rows
a failed run did not.
"""

from __future__ import annotations

import hashlib
import json
import random
from collections.abc import Iterator, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from demo.application import catalog
from people.domain.value_objects import AssociateStatus, InvitationType

# Generated dates are relative to a fixed day so output does not drift.
REFERENCE_DATE = date(2025, 1, 6)
CREATED_AT_BASE = datetime(2024, 1, 1, tzinfo=UTC)

_ASSOCIATE_STATUSES = (
    AssociateStatus.CONSULTANT,
    AssociateStatus.ADVISOR,
    AssociateStatus.CONTRACTOR,
    AssociateStatus.BOARD_MEMBER,
)


def person_code(code_prefix: str, index: int) -> str:
    """Natural key of the person at zero-based ``index``: ``hh-0001``."""
    return f"{code_prefix}-{index + 1:04d}"


class DemoDataGenerator:
    """Builds people, enrollment, document, task and invitation rows.

    Args:
        seed: Base seed; the same seed always produces the same rows
        missing_enrollment_rate: Share of people generated without an
            enrollment row, so dashboards exercise the absent-enrollment path
    """

    def __init__(self, seed: int = 42, missing_enrollment_rate: float = 0.1):
        if not 0 <= missing_enrollment_rate <= 1:
            raise ValueError("missing_enrollment_rate must be between 0 and 1")
        self._seed = seed
        self._missing_enrollment_rate = missing_enrollment_rate

    @property
    def seed(self) -> int:
        return self._seed

    def _rng(self, *key: Any) -> random.Random:
        # String seeds are hashed with SHA-512, so they are stable across runs.
        return random.Random(":".join(str(part) for part in (self._seed, *key)))

    # --- People ---

    def person_row(
        self,
        client_id: str,
        index: int,
        code_prefix: str = "emp",
        domain: str = "example.com",
    ) -> dict[str, Any]:
        """The person at ``index`` of a tenant's generated sequence."""
        rng = self._rng("person", index)
        first_name = rng.choice(catalog.FIRST_NAMES)
        last_name = rng.choice(catalog.LAST_NAMES)
        department = rng.choice(list(catalog.DEPARTMENTS))
        skills = rng.sample(catalog.SKILLS[department], k=rng.randint(1, 3))
        languages = ["English", *rng.sample(catalog.LANGUAGES[1:], k=rng.randint(0, 2))]

        employment_status: str | None
        associate_status: str | None = None
        end_date: str | None = None
        roll = rng.random()
        if roll < 0.70:
            employment_status = "active"
            start = REFERENCE_DATE - timedelta(days=rng.randint(30, 1800))
        elif roll < 0.82:
            employment_status = "former"
            start = REFERENCE_DATE - timedelta(days=rng.randint(400, 2500))
            end_date = (start + timedelta(days=rng.randint(180, 365))).isoformat()
        elif roll < 0.92:
            employment_status = "future"
            start = REFERENCE_DATE + timedelta(days=rng.randint(7, 120))
        else:
            employment_status = None
            associate_status = rng.choice(_ASSOCIATE_STATUSES).value
            start = REFERENCE_DATE - timedelta(days=rng.randint(30, 900))

        code = person_code(code_prefix, index)
        return {
            "client_id": client_id,
            "person_code": code,
            "first_name": first_name,
            "last_name": last_name,
            "company_email": (
                f"{first_name}.{last_name}.{index + 1:04d}@{domain}".lower()
            ),
            "department": department,
            "position": rng.choice(catalog.DEPARTMENTS[department]),
            "location": rng.choice(catalog.LOCATIONS),
            "manager": rng.choice(catalog.MANAGERS),
            "start_date": start.isoformat(),
            "end_date": end_date,
            "employment_status": employment_status,
            "associate_status": associate_status,
            "security_clearance": rng.choice(("low", "medium", "medium", "high")),
            "employment_type": rng.choice(catalog.EMPLOYMENT_TYPES),
            "work_location": rng.choice(("office", "remote", "hybrid", "hybrid")),
            "skills": sorted(skills),
            "languages": languages,
            "created_at": (CREATED_AT_BASE + timedelta(minutes=index)).isoformat(),
        }

    def generate_people(
        self,
        client_id: str,
        target: int,
        *,
        code_prefix: str = "emp",
        domain: str = "example.com",
        start: int = 0,
    ) -> Iterator[dict[str, Any]]:
        """Lazily yield people rows ``start`` to ``target - 1``.

        Only one row exists at a time; callers batch the iterator.
        """
        for index in range(start, target):
            yield self.person_row(client_id, index, code_prefix, domain)

    # --- Related rows (need the stored person id) ---

    def has_enrollment(self, code: str) -> bool:
        """Whether the person with this code gets an enrollment row."""
        return self._rng(code, "enrollment").random() >= self._missing_enrollment_rate

    def enrollment_row(self, person: Mapping[str, Any]) -> dict[str, Any] | None:
        """Enrollment for a stored person, or None for the deliberate gaps."""
        code = person["person_code"]
        if not self.has_enrollment(code):
            return None
        rng = self._rng(code, "enrollment-data")
        status = person.get("employment_status")
        if status == "former" or (status == "active" and rng.random() < 0.85):
            percentage = 100
        elif status == "future":
            percentage = rng.randint(0, 60)
        else:
            percentage = rng.randint(20, 95)
        last_activity = datetime.combine(
            REFERENCE_DATE, datetime.min.time(), tzinfo=UTC
        ) - timedelta(hours=rng.randint(1, 24 * 60))
        return {
            "person_id": person["id"],
            "onboarding_completed": percentage == 100,
            "completion_percentage": percentage,
            "mentor": rng.choice(catalog.MANAGERS),
            "buddy_program": rng.random() < 0.5,
            "last_activity": last_activity.isoformat(),
        }

    def document_rows(self, person: Mapping[str, Any]) -> list[dict[str, Any]]:
        """A contract plus one to three other documents for a stored person."""
        code = person["person_code"]
        rng = self._rng(code, "documents")
        settled = person.get("employment_status") in ("active", "former")
        templates = [
            ("Employment Contract", "contract"),
            *rng.sample(catalog.DOCUMENT_TEMPLATES, k=rng.randint(1, 3)),
        ]
        uploaded = datetime.combine(
            date.fromisoformat(person.get("start_date") or REFERENCE_DATE.isoformat()),
            datetime.min.time(),
            tzinfo=UTC,
        ) - timedelta(days=rng.randint(3, 14))

        rows = []
        for offset, (name, doc_type) in enumerate(templates):
            status = "verified" if settled else rng.choice(("pending", "uploaded"))
            uploaded_at = uploaded + timedelta(hours=offset)
            rows.append(
                {
                    "person_id": person["id"],
                    "name": name,
                    "type": doc_type,
                    "status": status,
                    "uploaded_at": uploaded_at.isoformat(),
                    "reviewed_at": (
                        (uploaded_at + timedelta(days=2)).isoformat()
                        if status == "verified"
                        else None
                    ),
                    "reviewed_by": (
                        rng.choice(catalog.REVIEWERS) if status == "verified" else None
                    ),
                }
            )
        return rows

    def task_rows(self, person: Mapping[str, Any]) -> list[dict[str, Any]]:
        """One to three onboarding tasks for a stored person."""
        code = person["person_code"]
        rng = self._rng(code, "tasks")
        settled = person.get("employment_status") in ("active", "former")
        start = datetime.combine(
            date.fromisoformat(person.get("start_date") or REFERENCE_DATE.isoformat()),
            datetime.min.time(),
            tzinfo=UTC,
        )

        rows = []
        for title, description, category, priority in rng.sample(
            catalog.TASK_TEMPLATES, k=rng.randint(1, 3)
        ):
            status = (
                "completed" if settled else rng.choice(("not_started", "in_progress"))
            )
            rows.append(
                {
                    "person_id": person["id"],
                    "title": title,
                    "description": description,
                    "category": category,
                    "status": status,
                    "priority": priority,
                    "assigned_by": rng.choice(catalog.REVIEWERS),
                    "assigned_at": start.isoformat(),
                    "completed_at": (
                        (start + timedelta(days=rng.randint(1, 10))).isoformat()
                        if status == "completed"
                        else None
                    ),
                    "due_date": (
                        None
                        if status == "completed"
                        else (start + timedelta(days=14)).isoformat()
                    ),
                }
            )
        return rows

    # --- Invitations ---

    def invitation_candidates(
        self,
        client_id: str,
        count: int,
        code_prefix: str = "emp",
        domain: str = "example.com",
        scan_limit: int = 500,
    ) -> list[tuple[InvitationType, dict[str, Any]]]:
        """First ``count`` generated people who would hold an open invitation.

        Future hires get onboarding invitations, former employees get
        offboarding ones.
        """
        candidates: list[tuple[InvitationType, dict[str, Any]]] = []
        for person in self.generate_people(
            client_id, scan_limit, code_prefix=code_prefix, domain=domain
        ):
            if len(candidates) >= count:
                break
            match person["employment_status"]:
                case "future":
                    candidates.append((InvitationType.ONBOARDING, person))
                case "former":
                    candidates.append((InvitationType.OFFBOARDING, person))
        return candidates

    def invitation_row(
        self,
        client_id: str,
        app_id: str,
        invitation_type: InvitationType,
        person: Mapping[str, Any],
        issued_at: datetime,
        ttl: timedelta = timedelta(days=7),
    ) -> dict[str, Any]:
        """An invitation whose invitee details are denormalized in ``client_data``.

        The token itself is never stored; only the SHA-256 of its claims.
        """
        code = person["person_code"]
        company_email = person["company_email"]
        private_email = company_email.split("@")[0] + "@gmail.com"
        claims = {
            "iss": "api.thepia.com",
            "aud": "flows.thepia.net",
            "sub": f"inv-{code}",
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "invitation": {
                "invitee": {
                    "fullName": f"{person['first_name']} {person['last_name']}",
                    "companyEmail": company_email,
                    "privateEmail": private_email,
                },
                "position": person["position"],
                "department": person["department"],
                "type": invitation_type.value,
            },
        }
        token_hash = hashlib.sha256(
            json.dumps(claims, sort_keys=True).encode("utf-8")
        ).hexdigest()

        onboarding = invitation_type is InvitationType.ONBOARDING
        return {
            "client_id": client_id,
            "app_id": app_id,
            "invitation_code": f"inv-{code}",
            "jwt_token_hash": token_hash,
            "status": "pending",
            "permissions": list(
                catalog.ONBOARDING_PERMISSIONS
                if onboarding
                else catalog.OFFBOARDING_PERMISSIONS
            ),
            "restrictions": {
                "max_sessions": 5,
                "business_hours_only": not onboarding,
            },
            "expires_at": (issued_at + ttl).isoformat(),
            "created_by": "demo-system",
            "client_data": {
                "person_code": code,
                "first_name": person["first_name"],
                "last_name": person["last_name"],
                "company_email": company_email,
                "private_email": private_email,
                "department": person["department"],
                "position": person["position"],
                "demo_invitation": True,
            },
        }
