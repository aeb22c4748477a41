"""Tenant code resolution with demo fallbacks.

A requested client code that does not exist is not an error for the demo
dashboard: resolution falls back through a fixed priority list of demo
tenants, then any client whose code mentions "demo", then the first
client at all. Only an empty clients table is an error.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from people.application.observability import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)
from people.application.queries import CLIENTS
from people.application.transforms import transform_client
from people.domain.value_objects import Client
from people.ports.exceptions import NoTenantsAvailableError, TenantNotFoundError
from shared_kernel.remote_store import IRemoteStore, Query

DEMO_PRIORITIES: tuple[str, ...] = ("hygge-hvidlog", "meridian-brands", "nets-demo")


@dataclass(frozen=True)
class ResolvedTenant:
    """The chosen client and the rule that chose it.

    ``via`` is one of "requested", "priority", "demo_match", "first_available".
    """

    client: Client
    via: str

    @property
    def is_fallback(self) -> bool:
        return self.via != "requested"


class TenantResolver:
    def __init__(
        self,
        store: IRemoteStore,
        priorities: Sequence[str] = DEMO_PRIORITIES,
        probe: TenantResolverProbe | None = None,
    ):
        self._store = store
        self._priorities = tuple(priorities)
        self._probe = probe or DefaultTenantResolverProbe()

    async def _by_code(self, code: str) -> Client | None:
        row = await self._store.fetch_one(Query(CLIENTS).eq("client_code", code))
        return transform_client(row) if row is not None else None

    async def get_client(self, client_id: str) -> Client:
        """Load a client by id.

        Raises:
            TenantNotFoundError: If no client has this id
        """
        row = await self._store.fetch_one(Query(CLIENTS).eq("id", client_id))
        if row is None:
            raise TenantNotFoundError(client_id)
        return transform_client(row)

    async def resolve(self, preferred_code: str | None = None) -> ResolvedTenant:
        """Pick the client to show.

        Raises:
            NoTenantsAvailableError: If there are no clients
            RemoteStoreError: If a lookup fails (a missing row is not a failure)
        """
        if preferred_code:
            client = await self._by_code(preferred_code)
            if client is not None:
                return self._resolved(client, preferred_code, "requested")
            self._probe.tenant_fallback(requested=preferred_code)

        for code in self._priorities:
            if code == preferred_code:
                continue
            client = await self._by_code(code)
            if client is not None:
                return self._resolved(client, preferred_code, "priority")

        row = await self._store.fetch_one(Query(CLIENTS).ilike("client_code", "%demo%"))
        if row is not None:
            return self._resolved(transform_client(row), preferred_code, "demo_match")

        row = await self._store.fetch_one(Query(CLIENTS))
        if row is not None:
            return self._resolved(
                transform_client(row), preferred_code, "first_available"
            )

        self._probe.no_tenants_available()
        raise NoTenantsAvailableError()

    def _resolved(
        self, client: Client, requested: str | None, via: str
    ) -> ResolvedTenant:
        self._probe.tenant_resolved(code=client.code, requested=requested, via=via)
        return ResolvedTenant(client=client, via=via)
