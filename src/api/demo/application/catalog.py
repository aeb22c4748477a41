"""Static content the demo generator samples from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DemoApplication:
    app_code: str
    app_name: str
    app_version: str
    app_description: str
    features: tuple[str, ...] = ()
    configuration: dict[str, Any] = field(default_factory=dict)
    max_concurrent_users: int = 50

    def to_row(self, client_id: str) -> dict[str, Any]:
        return {
            "client_id": client_id,
            "app_code": self.app_code,
            "app_name": self.app_name,
            "app_version": self.app_version,
            "app_description": self.app_description,
            "status": "active",
            "configuration": dict(self.configuration),
            "features": list(self.features),
            "max_concurrent_users": self.max_concurrent_users,
        }


@dataclass(frozen=True)
class DemoClient:
    client_code: str
    legal_name: str
    domain: str
    region: str
    tier: str = "enterprise"
    applications: tuple[DemoApplication, ...] = ()

    @property
    def code_prefix(self) -> str:
        """Initials of the code parts: ``hygge-hvidlog`` -> ``hh``."""
        return "".join(part[0] for part in self.client_code.split("-") if part)

    def to_row(self) -> dict[str, Any]:
        return {
            "client_code": self.client_code,
            "legal_name": self.legal_name,
            "domain": self.domain,
            "region": self.region,
            "tier": self.tier,
            "status": "active",
            "max_users": 1000 if self.tier in ("pro", "enterprise") else 100,
        }


def _standard_apps(theme: str, locale: str) -> tuple[DemoApplication, ...]:
    configuration = {"theme": theme, "locale": locale}
    return (
        DemoApplication(
            app_code="onboarding",
            app_name="Employee Onboarding",
            app_version="1.0.0",
            app_description="Streamlined employee onboarding and setup",
            features=("invitation-management", "document-collection", "task-tracking"),
            configuration=configuration,
        ),
        DemoApplication(
            app_code="offboarding",
            app_name="Employee Offboarding",
            app_version="1.0.0",
            app_description=(
                "Task-oriented employee offboarding and departure management"
            ),
            features=("task-management", "document-upload", "compliance-tracking"),
            configuration=configuration,
        ),
    )


DEMO_CLIENTS: dict[str, DemoClient] = {
    client.client_code: client
    for client in (
        DemoClient(
            client_code="hygge-hvidlog",
            legal_name="Hygge & Hvidløg A/S",
            domain="hygge-hvidlog.dk",
            region="EU",
            applications=_standard_apps("hygge", "da-DK"),
        ),
        DemoClient(
            client_code="meridian-brands",
            legal_name="Meridian Brands International",
            domain="meridianbrands.com.sg",
            region="APAC",
            applications=_standard_apps("meridian", "en-SG"),
        ),
        DemoClient(
            client_code="nets-demo",
            legal_name="Nets Demo Company",
            domain="nets-demo.com",
            region="EU",
            applications=_standard_apps("corporate", "en-GB"),
        ),
    )
}


def demo_client(client_code: str) -> DemoClient:
    """Catalog entry for a code; unknown codes get a generic demo client."""
    if client_code in DEMO_CLIENTS:
        return DEMO_CLIENTS[client_code]
    name = " ".join(part.capitalize() for part in client_code.split("-"))
    return DemoClient(
        client_code=client_code,
        legal_name=f"{name} Demo",
        domain=f"{client_code}.example.com",
        region="EU",
        applications=_standard_apps("default", "en-US"),
    )


FIRST_NAMES = tuple(
    "Anna Erik Sofia Magnus Freja Lars Ida Mikkel Emma Oliver Clara Noah Astrid "
    "William Maja Oscar Wei Priya Hiroshi Aisha Mateo Lena Tariq Nora".split()
)

LAST_NAMES = tuple(
    "Hansen Larsen Berg Johansson Nielsen Andersen Olsen Pedersen Christensen "
    "Lindqvist Tan Lim Wong Sharma Nakamura Rahman Garcia Fischer Virtanen "
    "Moreau".split()
)

DEPARTMENTS: dict[str, tuple[str, ...]] = {
    "Engineering": (
        "Software Engineer",
        "Senior Software Engineer",
        "DevOps Engineer",
        "Engineering Manager",
    ),
    "Product": ("Product Manager", "Product Owner", "Business Analyst"),
    "Design": ("UX Designer", "Visual Designer", "Design Lead"),
    "Sales": ("Account Executive", "Sales Manager", "Sales Engineer"),
    "People": ("HR Partner", "Recruiter", "People Operations Lead"),
    "Finance": ("Accountant", "Financial Controller", "Payroll Specialist"),
    "Operations": ("Operations Coordinator", "Supply Chain Analyst"),
}

SKILLS: dict[str, tuple[str, ...]] = {
    "Engineering": ("Python", "TypeScript", "Kubernetes", "PostgreSQL", "AWS"),
    "Product": ("Product Strategy", "Agile", "Data Analysis", "User Research"),
    "Design": ("Figma", "Prototyping", "Accessibility", "User Research"),
    "Sales": ("Negotiation", "CRM", "Account Planning"),
    "People": ("Recruiting", "Employment Law", "Coaching"),
    "Finance": ("Budgeting", "IFRS", "Excel", "Forecasting"),
    "Operations": ("Logistics", "Lean", "Vendor Management"),
}

LOCATIONS = (
    "Copenhagen, Denmark",
    "Aarhus, Denmark",
    "Stockholm, Sweden",
    "Oslo, Norway",
    "Singapore",
    "London, United Kingdom",
)

LANGUAGES = ("English", "Danish", "Swedish", "Norwegian", "German", "Mandarin")

MANAGERS = ("Lars Nielsen", "Maria Andersen", "Peter Olsen", "Mei Tan")

EMPLOYMENT_TYPES = ("full_time", "full_time", "full_time", "part_time", "contract")

# (name, type) pairs; every person gets a contract plus a sample of the rest.
DOCUMENT_TEMPLATES = (
    ("ID Verification", "id_verification"),
    ("Tax Forms", "tax_form"),
    ("GDPR Consent", "gdpr_consent"),
    ("Financial Disclosure", "financial_disclosure"),
    ("Company Handbook", "handbook"),
)

# (title, description, category, priority)
TASK_TEMPLATES = (
    (
        "Complete IT Setup",
        "Set up laptop, email and access credentials",
        "equipment",
        "high",
    ),
    (
        "Security Training",
        "Complete the security awareness course",
        "training",
        "high",
    ),
    (
        "Complete Company Handbook",
        "Read and acknowledge company policies",
        "compliance",
        "medium",
    ),
    (
        "Stakeholder Introductions",
        "Meet key internal stakeholders",
        "networking",
        "medium",
    ),
    (
        "Benefits Enrollment",
        "Choose pension and insurance options",
        "administration",
        "low",
    ),
)

REVIEWERS = ("HR Team", "Compliance Team", "IT Department")

ONBOARDING_PERMISSIONS = ("document_upload", "task_completion", "training_access")
OFFBOARDING_PERMISSIONS = ("document_upload", "equipment_return", "exit_interview")
