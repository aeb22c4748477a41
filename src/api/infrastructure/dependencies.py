"""Shared infrastructure dependencies.

Provides ONLY the raw remote store resource.
Does NOT import from bounded contexts to maintain DDD boundaries.
"""

from functools import lru_cache

from infrastructure.remote_store import PostgrestRemoteStore
from infrastructure.settings import get_remote_store_settings
from shared_kernel.remote_store import IRemoteStore


@lru_cache
def get_remote_store() -> IRemoteStore:
    """Get application-scoped remote store (singleton).

    The underlying httpx client pools connections and is shared across
    all requests. It is closed by ``close_remote_store`` on shutdown.

    Returns:
        PostgrestRemoteStore configured from FLOWS_STORE_* settings.
    """
    return PostgrestRemoteStore(get_remote_store_settings())


async def close_remote_store() -> None:
    """Close the store's HTTP client if it was ever created."""
    if get_remote_store.cache_info().currsize == 0:
        return
    store = get_remote_store()
    if isinstance(store, PostgrestRemoteStore):
        await store.aclose()
    get_remote_store.cache_clear()
