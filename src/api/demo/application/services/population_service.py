"""Demo population service.

Fills an existing demo tenant with generated people and their enrollments,
documents and tasks.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass

from demo.application.batch_inserter import BatchInserter, batched
from demo.application.catalog import demo_client
from demo.application.cleanup import DemoDataCleaner
from demo.application.generator import DemoDataGenerator, person_code
from demo.application.observability import DefaultPopulationProbe, PopulationProbe
from demo.ports.exceptions import DemoClientNotFoundError
from people.application.queries import CLIENTS, DOCUMENTS, ENROLLMENTS, PEOPLE, TASKS
from shared_kernel.remote_store import IRemoteStore, Query, Row

# Natural keys; a retried insert skips rows that already exist.
PEOPLE_KEY = "client_id,person_code"
ENROLLMENT_KEY = "person_id"
DOCUMENT_KEY = "person_id,name"
TASK_KEY = "person_id,title"

# Columns the related-row builders read from a stored person.
_PERSON_COLUMNS = "id,person_code,employment_status,associate_status,start_date"

# Called with (stage, rows done) as people and related rows are committed.
PopulationProgress = Callable[[str, int], None]


@dataclass(frozen=True)
class PopulationSummary:
    """Outcome of one population run."""

    client_code: str
    client_id: str
    people_sent: int
    people_inserted: int
    people_batches: int
    skipped_batches: int
    enrollments: int
    documents: int
    tasks: int
    missing_enrollments: int
    removed: int = 0


class DemoPopulationService:
    """Generates and inserts demo people for a tenant.

    People go in first, in resumable batches keyed by ``person_code``. Related
    rows need the stored person ids, so people are then read back by code,
    one batch at a time, and each batch's enrollments, documents and tasks
    are inserted before the next batch is read.
    """

    def __init__(
        self,
        store: IRemoteStore,
        generator: DemoDataGenerator | None = None,
        batch_size: int = 100,
        probe: PopulationProbe | None = None,
    ):
        self._store = store
        self._generator = generator or DemoDataGenerator()
        self._batch_size = batch_size
        self._probe = probe or DefaultPopulationProbe()
        self._inserter = BatchInserter(store, batch_size, self._probe)
        self._cleaner = DemoDataCleaner(store, batch_size, self._probe)

    async def get_client(self, client_code: str) -> Row:
        """Load the demo client row.

        Raises:
            DemoClientNotFoundError: The client has not been set up
        """
        client = await self._store.fetch_one(
            Query(CLIENTS).eq("client_code", client_code)
        )
        if client is None:
            raise DemoClientNotFoundError(client_code)
        return client

    async def populate(
        self,
        client_code: str,
        target: int,
        *,
        keep_existing: bool = False,
        resume_batch: int = 0,
        progress: PopulationProgress | None = None,
    ) -> PopulationSummary:
        """Generate ``target`` people for the tenant and insert them.

        Args:
            client_code: Code of an existing demo client
            target: Number of people in the generated sequence
            keep_existing: Keep the tenant's current people. Existing people
                are otherwise removed first, unless the run is resumed.
            resume_batch: First people batch to send, from a previous
                ``BatchInsertError.resume_batch``
            progress: Called as rows are committed

        Raises:
            DemoClientNotFoundError: The client has not been set up
            BatchInsertError: A batch failed; earlier batches stay committed
        """
        client = await self.get_client(client_code)
        client_id = str(client["id"])
        prefix = demo_client(client_code).code_prefix
        domain = client.get("domain") or demo_client(client_code).domain

        removed = 0
        if not keep_existing and resume_batch == 0:
            removed = sum((await self._cleaner.remove_people(client_id)).values())

        people = await self._inserter.insert(
            PEOPLE,
            self._generator.generate_people(
                client_id, target, code_prefix=prefix, domain=domain
            ),
            on_conflict=PEOPLE_KEY,
            start_batch=resume_batch,
            progress=(
                (lambda _batch, done: progress(PEOPLE, done)) if progress else None
            ),
        )

        related, missing = await self._insert_related(
            client_id, prefix, target, progress
        )

        return PopulationSummary(
            client_code=client_code,
            client_id=client_id,
            people_sent=people.sent_count,
            people_inserted=people.inserted_count,
            people_batches=people.batch_count,
            skipped_batches=people.skipped_batches,
            enrollments=related[ENROLLMENTS],
            documents=related[DOCUMENTS],
            tasks=related[TASKS],
            missing_enrollments=missing,
            removed=removed,
        )

    async def _insert_related(
        self,
        client_id: str,
        prefix: str,
        target: int,
        progress: PopulationProgress | None,
    ) -> tuple[Counter[str], int]:
        generator = self._generator
        inserted: Counter[str] = Counter()
        missing = 0
        done = 0

        codes = (person_code(prefix, index) for index in range(target))
        for chunk in batched(codes, self._batch_size):
            people = await self._store.fetch(
                Query(PEOPLE)
                .select(_PERSON_COLUMNS)
                .eq("client_id", client_id)
                .in_("person_code", chunk)
            )
            enrollments = [
                row
                for person in people
                if (row := generator.enrollment_row(person)) is not None
            ]
            documents = [row for p in people for row in generator.document_rows(p)]
            tasks = [row for p in people for row in generator.task_rows(p)]
            missing += len(people) - len(enrollments)

            for table, rows, key in (
                (ENROLLMENTS, enrollments, ENROLLMENT_KEY),
                (DOCUMENTS, documents, DOCUMENT_KEY),
                (TASKS, tasks, TASK_KEY),
            ):
                result = await self._inserter.insert(table, rows, on_conflict=key)
                inserted[table] += result.inserted_count

            done += len(chunk)
            if progress is not None:
                progress("related", done)

        return inserted, missing
