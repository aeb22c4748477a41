"""Ports for the Demo bounded context."""

from demo.ports.exceptions import BatchInsertError, DemoClientNotFoundError

__all__ = ["BatchInsertError", "DemoClientNotFoundError"]
