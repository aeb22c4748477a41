"""Domain exceptions for demo data generation."""

from __future__ import annotations


class BatchInsertError(Exception):
    """Raised when one batch of a multi-batch insert fails.

    Every batch before the failed one stays committed. Ranges are half-open
    ``(start, end)`` row indexes into the full generated sequence, so a caller
    can resume with ``start_batch=resume_batch`` instead of starting over.

    Attributes:
        table: Table the batches were inserted into
        batch_index: Zero-based index of the failed batch
        failed_range: Row range the failed batch covered
        committed_count: Rows committed by this run before the failure
        committed_range: Row range known to be committed, including batches
            skipped because a previous run committed them
        resume_batch: Batch to pass as ``start_batch`` on the next run
        reason: Readable description of the underlying failure
    """

    def __init__(
        self,
        *,
        table: str,
        batch_index: int,
        failed_range: tuple[int, int],
        committed_count: int,
        committed_range: tuple[int, int],
        reason: str,
    ) -> None:
        self.table = table
        self.batch_index = batch_index
        self.failed_range = failed_range
        self.committed_count = committed_count
        self.committed_range = committed_range
        self.resume_batch = batch_index
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        start, end = self.failed_range
        message = (
            f"{self.table}: batch {self.batch_index + 1} "
            f"(rows {start}-{end - 1}) failed: {self.reason}."
        )
        first, last = self.committed_range
        if last <= first:
            return f"{message} No rows were committed"
        return (
            f"{message} Rows {first}-{last - 1} are committed; "
            f"resume from batch {self.resume_batch}"
        )


class DemoClientNotFoundError(Exception):
    """Raised when the demo client has not been set up yet."""

    def __init__(self, client_code: str):
        self.client_code = client_code
        super().__init__(
            f"Demo client '{client_code}' not found. Run 'flows-demo setup run' first."
        )
