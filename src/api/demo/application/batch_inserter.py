"""Fixed-size batched inserts.

Rows are pulled from an iterator one batch at a time, so a target of any
size is never held in memory as a single payload. Batches are sent strictly
in sequence; batch *i* is only sent after batch *i - 1* was committed.

Retrying is safe when rows carry a natural key passed as ``on_conflict``:
rows that a previous attempt already committed are skipped by the store
instead of duplicated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from itertools import islice
from typing import Any

from demo.application.observability import DefaultPopulationProbe, PopulationProbe
from demo.ports.exceptions import BatchInsertError
from shared_kernel.remote_store import IRemoteStore, RemoteStoreError, Row

# Called after each committed batch with (batch_index, rows committed so far).
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class BatchInsertResult:
    """Outcome of a completed multi-batch insert.

    Attributes:
        table: Target table
        batch_count: Batches sent by this run
        sent_count: Rows sent by this run
        inserted: Rows the store reported as newly inserted
        skipped_batches: Leading batches skipped because of ``start_batch``
    """

    table: str
    batch_count: int
    sent_count: int
    inserted: list[Row]
    skipped_batches: int = 0

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)


def batched(rows: Iterable[Any], size: int) -> Iterator[list[Any]]:
    """Yield lists of at most ``size`` items, consuming ``rows`` lazily."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    iterator = iter(rows)
    while batch := list(islice(iterator, size)):
        yield batch


class BatchInserter:
    """Inserts an iterator of rows into one table in fixed-size batches.

    Example:
        inserter = BatchInserter(store, batch_size=100)
        result = await inserter.insert(
            "people", generator.generate_people(client_id, 1200),
            on_conflict="person_code",
        )
        assert result.batch_count == 12
    """

    def __init__(
        self,
        store: IRemoteStore,
        batch_size: int = 100,
        probe: PopulationProbe | None = None,
    ):
        if batch_size < 1:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self._store = store
        self._batch_size = batch_size
        self._probe = probe or DefaultPopulationProbe()

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def batch_count(self, row_count: int) -> int:
        """Number of batches ``row_count`` rows are split into."""
        return -(-row_count // self._batch_size)

    async def insert(
        self,
        table: str,
        rows: Iterable[Mapping[str, Any]],
        on_conflict: str | None = None,
        start_batch: int = 0,
        progress: ProgressCallback | None = None,
    ) -> BatchInsertResult:
        """Insert ``rows`` batch by batch.

        Args:
            table: Target table
            rows: Rows in a stable order; only one batch is materialized at a time
            on_conflict: Natural key column(s); colliding rows are skipped
            start_batch: Batches to skip, as reported by
                ``BatchInsertError.resume_batch`` of a failed run. The skipped
                rows are still consumed from ``rows`` so indexes stay aligned.
            progress: Called after every committed batch

        Returns:
            Counts and rows of the completed insert

        Raises:
            BatchInsertError: A batch failed. Earlier batches stay committed.
        """
        if start_batch < 0:
            raise ValueError(f"start_batch must not be negative, got {start_batch}")

        iterator = iter(rows)
        skipped = sum(1 for _ in islice(iterator, start_batch * self._batch_size))
        skipped_batches = self.batch_count(skipped)
        if skipped_batches:
            self._probe.batches_skipped(table, skipped_batches)

        offset = skipped
        sent = 0
        batch_index = skipped_batches
        inserted: list[Row] = []

        for batch in batched(iterator, self._batch_size):
            row_range = (offset, offset + len(batch))
            try:
                committed = await self._store.insert(table, batch, on_conflict)
            except RemoteStoreError as e:
                self._probe.batch_failed(table, batch_index, row_range, e.message)
                raise BatchInsertError(
                    table=table,
                    batch_index=batch_index,
                    failed_range=row_range,
                    committed_count=sent,
                    committed_range=(0, offset),
                    reason=e.message,
                ) from e

            inserted.extend(committed)
            sent += len(batch)
            offset += len(batch)
            self._probe.batch_committed(
                table, batch_index, sent=len(batch), inserted=len(committed)
            )
            if progress is not None:
                progress(batch_index, offset)
            batch_index += 1

        self._probe.table_populated(
            table, batch_count=batch_index - skipped_batches, inserted=len(inserted)
        )
        return BatchInsertResult(
            table=table,
            batch_count=batch_index - skipped_batches,
            sent_count=sent,
            inserted=inserted,
            skipped_batches=skipped_batches,
        )
