"""Bulk association loading.

Attaches related rows to a page of primary rows with one batched
``in(remote_key, keys)`` query per related collection, never one query per
primary row. For a page of k rows and m collections the loader issues at
most m queries, whatever k is, and none at all for an empty page.

Results are indexed in a single pass per collection:

- ``MANY`` collections map key -> rows in result order.
- ``ONE`` collections map key -> row. When the backend returns more than one
  row for a key (a data-quality violation) the first row in result order is
  kept and the duplicate is reported through the probe; it is never raised.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from people.application.observability import BulkLoaderProbe, DefaultBulkLoaderProbe
from people.application.queries import DOCUMENTS, ENROLLMENTS, TASKS
from people.application.transforms import (
    transform_document,
    transform_enrollment,
    transform_person,
    transform_task,
)
from people.domain.value_objects import ComposedPerson, MissingEnrollment
from shared_kernel.remote_store import IRemoteStore, Query, Row


class Cardinality(str, Enum):
    ONE = "one"
    MANY = "many"


@dataclass(frozen=True)
class RelatedCollection:
    """A table related to the primary rows by a foreign key.

    Attributes:
        name: Lookup name used with ``AssociationResult.one``/``many``
        table: Related table
        remote_key: Foreign key column on the related table
        local_key: Column on the primary row the foreign key points at
        cardinality: ``ONE`` for one-to-one, ``MANY`` for one-to-many
        columns: Columns to select
    """

    name: str
    table: str
    remote_key: str
    local_key: str = "id"
    cardinality: Cardinality = Cardinality.MANY
    columns: str = "*"


ENROLLMENT_COLLECTION = RelatedCollection(
    "enrollments", ENROLLMENTS, "person_id", cardinality=Cardinality.ONE
)
DOCUMENT_COLLECTION = RelatedCollection("documents", DOCUMENTS, "person_id")
TASK_COLLECTION = RelatedCollection("tasks", TASKS, "person_id")

PERSON_COLLECTIONS: tuple[RelatedCollection, ...] = (
    ENROLLMENT_COLLECTION,
    DOCUMENT_COLLECTION,
    TASK_COLLECTION,
)


def distinct_keys(rows: Iterable[Mapping[str, Any]], column: str) -> list[Any]:
    """Non-null values of ``column`` in first-seen order."""
    seen: set[Any] = set()
    keys: list[Any] = []
    for row in rows:
        key = row.get(column)
        if key is None or key in seen:
            continue
        seen.add(key)
        keys.append(key)
    return keys


class AssociationResult:
    """Lookup maps produced by one ``BulkAssociationLoader.load`` call."""

    def __init__(self) -> None:
        self._one: dict[str, dict[Any, Row]] = {}
        self._many: dict[str, dict[Any, list[Row]]] = {}
        self._rows: dict[str, list[Row]] = {}
        self.query_count = 0

    def add_collection(
        self, collection: RelatedCollection, rows: list[Row], index: Any
    ) -> None:
        self._rows[collection.name] = rows
        if collection.cardinality is Cardinality.ONE:
            self._one[collection.name] = index
        else:
            self._many[collection.name] = index

    def one(self, collection: str, key: Any) -> Row | None:
        """The single related row for ``key``, or None when it has none."""
        return self._one[collection].get(key)

    def many(self, collection: str, key: Any) -> list[Row]:
        """All related rows for ``key`` in result order (empty when none)."""
        return self._many[collection].get(key, [])

    def rows(self, collection: str) -> list[Row]:
        """Every row fetched for a collection."""
        return self._rows[collection]


class BulkAssociationLoader:
    """Loads related collections for a page of primary rows in batches."""

    def __init__(
        self,
        store: IRemoteStore,
        collections: Sequence[RelatedCollection] = PERSON_COLLECTIONS,
        probe: BulkLoaderProbe | None = None,
    ):
        names = [c.name for c in collections]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate collection names: {names}")
        self._store = store
        self._collections = tuple(collections)
        self._probe = probe or DefaultBulkLoaderProbe()

    @property
    def collections(self) -> tuple[RelatedCollection, ...]:
        return self._collections

    async def load(
        self,
        primary_rows: Sequence[Mapping[str, Any]],
        on_collection: Callable[[RelatedCollection, int], None] | None = None,
    ) -> AssociationResult:
        """Fetch every related collection for ``primary_rows``.

        Args:
            primary_rows: One page of primary rows, in page order
            on_collection: Called before each collection is fetched with the
                collection and the number of keys it will be looked up by

        Raises:
            RemoteStoreError: If any collection query fails
        """
        result = AssociationResult()

        for collection in self._collections:
            keys = distinct_keys(primary_rows, collection.local_key)
            if on_collection is not None:
                on_collection(collection, len(keys))

            rows: list[Row] = []
            if keys:
                query = (
                    Query(collection.table)
                    .select(collection.columns)
                    .in_(collection.remote_key, keys)
                )
                rows = await self._store.fetch(query)
                result.query_count += 1

            result.add_collection(collection, rows, self._index(collection, rows))
            self._probe.collection_loaded(
                table=collection.table, key_count=len(keys), row_count=len(rows)
            )

        self._probe.association_completed(
            primary_count=len(primary_rows),
            collection_count=len(self._collections),
            query_count=result.query_count,
        )
        return result

    def _index(self, collection: RelatedCollection, rows: list[Row]) -> Any:
        if collection.cardinality is Cardinality.MANY:
            grouped: dict[Any, list[Row]] = {}
            for row in rows:
                grouped.setdefault(row.get(collection.remote_key), []).append(row)
            return grouped

        single: dict[Any, Row] = {}
        for row in rows:
            key = row.get(collection.remote_key)
            kept = single.get(key)
            if kept is None:
                single[key] = row
            else:
                self._probe.duplicate_related_row(
                    table=collection.table,
                    key=str(key),
                    kept_id=kept.get("id"),
                    dropped_id=row.get("id"),
                )
        return single


def compose_people(
    person_rows: Sequence[Mapping[str, Any]],
    result: AssociationResult,
) -> list[ComposedPerson]:
    """Attach enrollment, documents and tasks to each person, in page order.

    A person without an enrollment row gets an explicit ``MissingEnrollment``.
    """
    composed: list[ComposedPerson] = []
    for row in person_rows:
        person = transform_person(row)
        key = row.get("id")
        documents = tuple(
            transform_document(d) for d in result.many(DOCUMENT_COLLECTION.name, key)
        )
        tasks = tuple(transform_task(t) for t in result.many(TASK_COLLECTION.name, key))
        enrollment_row = result.one(ENROLLMENT_COLLECTION.name, key)
        enrollment = (
            transform_enrollment(enrollment_row, documents, tasks)
            if enrollment_row is not None
            else MissingEnrollment(person_id=person.id)
        )
        composed.append(
            ComposedPerson(
                person=person, enrollment=enrollment, documents=documents, tasks=tasks
            )
        )
    return composed
