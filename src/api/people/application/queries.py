"""Table names and query construction for the People context."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from shared_kernel.remote_store import Query

CLIENTS = "clients"
APPLICATIONS = "client_applications"
PEOPLE = "people"
ENROLLMENTS = "people_enrollments"
DOCUMENTS = "documents"
TASKS = "tasks"
INVITATIONS = "invitations"
PROCESSES = "offboarding_processes"
PROCESS_TASKS = "offboarding_tasks"

PEOPLE_SEARCH_COLUMNS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "company_email",
    "department",
    "position",
    "person_code",
)

# Filter key meaning "associate_status is not null".
ASSOCIATE_FILTER = "_associate_filter"


def apply_filters(query: Query, filters: Mapping[str, Any] | None) -> Query:
    """Apply equality filters; a list or tuple value means ``in``, None is skipped."""
    for key, value in (filters or {}).items():
        if value is None:
            continue
        if key == ASSOCIATE_FILTER:
            if value is True:
                query = query.is_not_null("associate_status")
        elif isinstance(value, (list, tuple, set, frozenset)):
            query = query.in_(key, value)
        else:
            query = query.eq(key, value)
    return query


def people_query(
    tenant_id: str,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
) -> Query:
    """People of one tenant, newest first, with search and filters applied."""
    query = Query(PEOPLE).eq("client_id", tenant_id)
    query = query.search(PEOPLE_SEARCH_COLUMNS, search)
    query = apply_filters(query, filters)
    return query.order("created_at", ascending=False).order("id", ascending=False)


def processes_query(
    tenant_id: str,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
) -> Query:
    """Offboarding processes of one tenant, newest first.

    Search matches the process title.
    """
    query = Query(PROCESSES).eq("client_id", tenant_id)
    query = query.search(("title",), search)
    query = apply_filters(query, filters)
    return query.order("created_at", ascending=False).order("id", ascending=False)
