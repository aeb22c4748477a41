"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI

from infrastructure.dependencies import close_remote_store, get_remote_store
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from people.presentation import routes as people_routes
from shared_kernel.remote_store import IRemoteStore, Query, RemoteStoreError


@asynccontextmanager
async def flows_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - structlog configuration
    - Remote store HTTP client lifecycle (created lazily, closed on shutdown)
    """
    configure_logging(get_settings().log_level)

    yield

    await close_remote_store()


app = FastAPI(
    title="Flows Admin API",
    description="Paginated people, enrollment and process data for the admin dashboard",
    version=__version__,
    lifespan=flows_lifespan,
)

app.include_router(people_routes.dashboard_router)
app.include_router(people_routes.people_router)
app.include_router(people_routes.processes_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/store")
async def health_store(
    store: Annotated[IRemoteStore, Depends(get_remote_store)],
) -> dict:
    """Check that the remote store answers a count query.

    Returns the store status and the number of clients it holds.
    """
    try:
        clients = await store.count(Query("clients"))
    except RemoteStoreError as e:
        return {"status": "error", "connected": False, "error": e.message}
    return {"status": "ok", "connected": True, "clients": clients}
