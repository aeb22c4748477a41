"""Errors raised by remote store adapters.

Adapters translate every failure form of the hosted backend (error payloads
in a response body, HTTP status codes, transport exceptions) into a single
``RemoteStoreError`` whose message is safe to show to an end user.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class RemoteStoreError(Exception):
    """Raised when a store call fails.

    Attributes:
        message: Human-readable description (never a raw backend payload)
        table: Table the call targeted
        operation: "select", "count", "insert" or "delete"
        status_code: HTTP status, or None for transport failures
        code: Backend error code when one was reported
    """

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.table = table
        self.operation = operation
        self.status_code = status_code
        self.code = code

    @property
    def is_transient(self) -> bool:
        """Transport failures and 5xx responses may succeed on retry."""
        return self.status_code is None or self.status_code >= 500


def describe_error(error: Any) -> str:
    """Reduce any backend error shape to one readable sentence.

    Accepts a PostgREST error object (``{"message", "details", "hint",
    "code"}``), an exception, or a plain string.
    """
    if isinstance(error, RemoteStoreError):
        return error.message
    if isinstance(error, Mapping):
        message = str(error.get("message") or "").strip()
        details = str(error.get("details") or "").strip()
        if message and details:
            return f"{message} ({details})"
        if message or details:
            return message or details
        return "the data service reported an unspecified error"
    if isinstance(error, BaseException):
        text = str(error).strip()
        return text or type(error).__name__
    text = str(error).strip() if error is not None else ""
    return text or "the data service reported an unspecified error"
