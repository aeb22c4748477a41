"""Headline people counts for the dashboard."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from people.application.queries import people_query
from people.domain.value_objects import PeopleStatistics
from people.ports.exceptions import InvalidTenantError
from shared_kernel.remote_store import IRemoteStore


class PeopleStatisticsService:
    """Counts people by status under the same search and filters as the listing.

    Issues four count queries and transfers no rows.
    """

    def __init__(self, store: IRemoteStore):
        self._store = store

    async def get_statistics(
        self,
        tenant_id: str,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> PeopleStatistics:
        if not tenant_id or not tenant_id.strip():
            raise InvalidTenantError("A tenant id is required for statistics")
        base = people_query(tenant_id, search, filters).for_count()
        return PeopleStatistics(
            total_people=await self._store.count(base),
            active_employees=await self._store.count(
                base.eq("employment_status", "active")
            ),
            associates=await self._store.count(base.is_not_null("associate_status")),
            future_employees=await self._store.count(
                base.eq("employment_status", "future")
            ),
        )
