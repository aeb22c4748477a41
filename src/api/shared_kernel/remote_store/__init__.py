"""Remote store contract shared by the people and demo contexts."""

from shared_kernel.remote_store.exceptions import RemoteStoreError, describe_error
from shared_kernel.remote_store.protocols import (
    IRemoteStore,
    Row,
    StoreResult,
    unwrap_result,
)
from shared_kernel.remote_store.query import (
    Filter,
    FilterOperator,
    Ordering,
    Query,
    SearchClause,
)

__all__ = [
    "Filter",
    "FilterOperator",
    "IRemoteStore",
    "Ordering",
    "Query",
    "RemoteStoreError",
    "Row",
    "SearchClause",
    "StoreResult",
    "describe_error",
    "unwrap_result",
]
