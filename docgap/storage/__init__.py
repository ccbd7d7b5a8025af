"""Object storage layer."""

from docgap.storage.object_store import (
    ObjectStore,
    ObjectStoreError,
    SupabaseObjectStore,
    read_json,
    write_json_best_effort,
)
from docgap.storage.timing import timed_operation

__all__ = [
    "ObjectStore",
    "ObjectStoreError",
    "SupabaseObjectStore",
    "read_json",
    "write_json_best_effort",
    "timed_operation",
]
