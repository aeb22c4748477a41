"""Demo application layer."""

from demo.application.batch_inserter import BatchInserter, BatchInsertResult
from demo.application.generator import DemoDataGenerator

__all__ = ["BatchInsertResult", "BatchInserter", "DemoDataGenerator"]
