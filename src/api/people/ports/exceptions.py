"""Domain exceptions for the People bounded context.

Backend failures arrive as ``RemoteStoreError`` from the shared kernel;
the exceptions here cover tenant resolution and caller mistakes.
"""


class InvalidTenantError(ValueError):
    """Raised when an operation is called without a tenant id.

    Raised synchronously, before any store call is made.
    """

    pass


class TenantNotFoundError(Exception):
    """Raised when a tenant id or code does not resolve to a client row."""

    def __init__(self, identifier: str):
        super().__init__(f"Client {identifier!r} was not found")
        self.identifier = identifier


class NoTenantsAvailableError(Exception):
    """Raised when tenant fallback resolution finds no clients at all."""

    def __init__(self) -> None:
        super().__init__("No clients found in database")
