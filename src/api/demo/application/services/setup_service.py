"""Demo setup service.

Creates a demo client with its onboarding/offboarding applications and a
handful of open invitations, reports on what exists, and removes it all
again.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from demo.application.catalog import demo_client
from demo.application.cleanup import DemoDataCleaner
from demo.application.generator import DemoDataGenerator
from demo.application.observability import DefaultPopulationProbe, PopulationProbe
from people.application.queries import APPLICATIONS, CLIENTS, INVITATIONS, PEOPLE
from people.application.transforms import application_type
from shared_kernel.remote_store import IRemoteStore, Query, Row

INVITATION_COUNT = 5


@dataclass(frozen=True)
class SetupSummary:
    """Outcome of ``setup``.

    ``created`` is false when the client already existed; ``skipped`` is true
    when it existed and nothing was written because ``force`` was not set.
    """

    client: Row
    created: bool
    skipped: bool = False
    applications: list[Row] = field(default_factory=list)
    invitations: list[Row] = field(default_factory=list)


@dataclass(frozen=True)
class DemoStatus:
    client_code: str
    client: Row | None
    applications: int = 0
    invitations: int = 0
    people: int = 0

    @property
    def exists(self) -> bool:
        return self.client is not None


@dataclass(frozen=True)
class ResetSummary:
    client: Row
    removed: Counter[str]

    @property
    def removed_count(self) -> int:
        return sum(self.removed.values())


class DemoSetupService:
    """Sets up, inspects and removes a demo tenant."""

    def __init__(
        self,
        store: IRemoteStore,
        generator: DemoDataGenerator | None = None,
        probe: PopulationProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._generator = generator or DemoDataGenerator()
        self._probe = probe or DefaultPopulationProbe()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._cleaner = DemoDataCleaner(store, probe=self._probe)

    async def find_client(self, client_code: str) -> Row | None:
        return await self._store.fetch_one(
            Query(CLIENTS).eq("client_code", client_code)
        )

    async def setup(self, client_code: str, *, force: bool = False) -> SetupSummary:
        """Create the demo client, its applications and open invitations.

        An existing client is left untouched unless ``force`` is set; with
        ``force`` its applications and invitations are written again, and rows
        that already exist are skipped by their natural keys.
        """
        definition = demo_client(client_code)
        client = await self.find_client(client_code)
        created = client is None

        if client is not None and not force:
            self._probe.demo_client_ready(client_code, str(client["id"]), False)
            return SetupSummary(client=client, created=False, skipped=True)

        if client is None:
            await self._store.insert(
                CLIENTS, [definition.to_row()], on_conflict="client_code"
            )
            client = await self.find_client(client_code)
            if client is None:
                raise RuntimeError(f"Client '{client_code}' was not stored")
        client_id = str(client["id"])
        self._probe.demo_client_ready(client_code, client_id, created)

        await self._store.insert(
            APPLICATIONS,
            [app.to_row(client_id) for app in definition.applications],
            on_conflict="client_id,app_code",
        )
        applications = await self._store.fetch(
            Query(APPLICATIONS).eq("client_id", client_id).order("app_code")
        )
        invitations = await self._create_invitations(
            client_id, definition.code_prefix, definition.domain, applications
        )
        return SetupSummary(
            client=client,
            created=created,
            applications=applications,
            invitations=invitations,
        )

    async def _create_invitations(
        self,
        client_id: str,
        code_prefix: str,
        domain: str,
        applications: list[Row],
    ) -> list[Row]:
        apps_by_type = {
            application_type(app.get("app_code")): app for app in applications
        }
        issued_at = self._clock()
        rows = [
            self._generator.invitation_row(
                client_id, str(app["id"]), invitation_type, person, issued_at
            )
            for invitation_type, person in self._generator.invitation_candidates(
                client_id, INVITATION_COUNT, code_prefix, domain
            )
            if (app := apps_by_type.get(invitation_type)) is not None
        ]
        return await self._store.insert(
            INVITATIONS, rows, on_conflict="invitation_code"
        )

    async def status(self, client_code: str) -> DemoStatus:
        """Report whether the demo client exists and how much data it holds."""
        client = await self.find_client(client_code)
        if client is None:
            return DemoStatus(client_code=client_code, client=None)
        client_id = str(client["id"])
        return DemoStatus(
            client_code=client_code,
            client=client,
            applications=await self._store.count(
                Query(APPLICATIONS).eq("client_id", client_id)
            ),
            invitations=await self._store.count(
                Query(INVITATIONS).eq("client_id", client_id)
            ),
            people=await self._store.count(Query(PEOPLE).eq("client_id", client_id)),
        )

    async def reset(self, client_code: str) -> ResetSummary | None:
        """Delete the demo client and everything it owns.

        Returns None when there is no such client.
        """
        client = await self.find_client(client_code)
        if client is None:
            return None
        client_id = str(client["id"])
        removed = await self._cleaner.remove_client_data(client_id)
        removed[CLIENTS] += await self._store.delete(Query(CLIENTS).eq("id", client_id))
        self._probe.demo_data_removed(CLIENTS, removed[CLIENTS])
        return ResetSummary(client=client, removed=removed)
