"""Ports for the People bounded context."""

from people.ports.exceptions import (
    InvalidTenantError,
    NoTenantsAvailableError,
    TenantNotFoundError,
)

__all__ = ["InvalidTenantError", "NoTenantsAvailableError", "TenantNotFoundError"]
