"""Removal of demo tenant data.

Related rows reference people and processes by id, so they are deleted
before their parents. People are removed one chunk of ids at a time;
each chunk is re-read from offset 0 since deletes shift later offsets.
"""

from __future__ import annotations

from collections import Counter

from demo.application.observability import DefaultPopulationProbe, PopulationProbe
from people.application.queries import (
    APPLICATIONS,
    DOCUMENTS,
    ENROLLMENTS,
    INVITATIONS,
    PEOPLE,
    PROCESS_TASKS,
    PROCESSES,
    TASKS,
)
from shared_kernel.remote_store import IRemoteStore, Query


class DemoDataCleaner:
    def __init__(
        self,
        store: IRemoteStore,
        chunk_size: int = 100,
        probe: PopulationProbe | None = None,
    ):
        self._store = store
        self._chunk_size = chunk_size
        self._probe = probe or DefaultPopulationProbe()

    async def _delete(self, query: Query, removed: Counter[str]) -> int:
        count = await self._store.delete(query)
        removed[query.table] += count
        return count

    async def _ids(self, table: str, column: str, value: str) -> list[str]:
        query = Query(table).select("id").eq(column, value).order("id")
        rows = await self._store.fetch(query.range(0, self._chunk_size - 1))
        return [row["id"] for row in rows]

    async def remove_people(self, client_id: str) -> Counter[str]:
        """Delete a tenant's people with their enrollments, documents and tasks."""
        removed: Counter[str] = Counter()
        while ids := await self._ids(PEOPLE, "client_id", client_id):
            for table in (ENROLLMENTS, DOCUMENTS, TASKS):
                await self._delete(Query(table).in_("person_id", ids), removed)
            if not await self._delete(Query(PEOPLE).in_("id", ids), removed):
                break
        self._report(removed)
        return removed

    async def remove_client_data(self, client_id: str) -> Counter[str]:
        """Delete everything a tenant owns, leaving the client row itself."""
        removed: Counter[str] = Counter()
        await self._delete(Query(INVITATIONS).eq("client_id", client_id), removed)
        while ids := await self._ids(PROCESSES, "client_id", client_id):
            await self._delete(Query(PROCESS_TASKS).in_("process_id", ids), removed)
            if not await self._delete(Query(PROCESSES).in_("id", ids), removed):
                break
        await self._delete(Query(APPLICATIONS).eq("client_id", client_id), removed)
        self._report(removed)
        removed.update(await self.remove_people(client_id))
        return removed

    def _report(self, removed: Counter[str]) -> None:
        for table, count in removed.items():
            self._probe.demo_data_removed(table, count)
