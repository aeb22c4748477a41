"""Remote store adapters."""

from infrastructure.remote_store.in_memory import InMemoryRemoteStore, StoreCall
from infrastructure.remote_store.postgrest import PostgrestRemoteStore

__all__ = ["InMemoryRemoteStore", "PostgrestRemoteStore", "StoreCall"]
