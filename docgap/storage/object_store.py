"""JSON blob storage for embedding caches, health caches and reports.

Objects are addressed by string key inside one Supabase Storage bucket.
A missing object reads as ``None``; any other storage failure raises
:class:`ObjectStoreError`.
"""

import asyncio
import json
from typing import Any, Protocol

import httpx
import logfire
from storage3.exceptions import StorageApiError
from storage3.utils import StorageException
from supabase import Client

from docgap.storage.timing import timed_operation


class ObjectStoreError(Exception):
    """Raised when the object store cannot complete an operation."""


class ObjectStore(Protocol):
    """Key/value blob store."""

    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None when the key does not exist."""
        ...

    async def put(self, key: str, data: bytes) -> None:
        """Store bytes under key, replacing any previous value."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""
        ...


def _is_not_found(error: StorageApiError) -> bool:
    return (
        str(error.status) == "404"
        or str(error.code).lower() in ("not_found", "nosuchkey")
        or "not found" in str(error.message).lower()
    )


class SupabaseObjectStore:
    """ObjectStore backed by a Supabase Storage bucket.

    The Supabase client is synchronous, so calls run in a worker thread.
    """

    def __init__(self, client: Client, bucket: str):
        self._client = client
        self._bucket = bucket

    def _files(self):
        return self._client.storage.from_(self._bucket)

    async def get(self, key: str) -> bytes | None:
        with timed_operation("object_store_get", key=key, bucket=self._bucket):
            try:
                return await asyncio.to_thread(self._files().download, key)
            except StorageApiError as e:
                if _is_not_found(e):
                    return None
                raise ObjectStoreError(f"Failed to read {key}: {e.message}") from e
            except (StorageException, httpx.HTTPError) as e:
                raise ObjectStoreError(f"Failed to read {key}: {e}") from e

    async def put(self, key: str, data: bytes) -> None:
        with timed_operation(
            "object_store_put", key=key, bucket=self._bucket, size_bytes=len(data)
        ):
            try:
                await asyncio.to_thread(
                    self._files().upload,
                    key,
                    data,
                    {"content-type": "application/json", "upsert": "true"},
                )
            except (StorageException, httpx.HTTPError) as e:
                raise ObjectStoreError(f"Failed to write {key}: {e}") from e

    async def delete(self, key: str) -> None:
        with timed_operation("object_store_delete", key=key, bucket=self._bucket):
            try:
                await asyncio.to_thread(self._files().remove, [key])
            except StorageApiError as e:
                if _is_not_found(e):
                    return
                raise ObjectStoreError(f"Failed to delete {key}: {e.message}") from e
            except (StorageException, httpx.HTTPError) as e:
                raise ObjectStoreError(f"Failed to delete {key}: {e}") from e


async def read_json(store: ObjectStore, key: str) -> Any | None:
    """Read and decode a JSON object. Returns None on a miss.

    Raises:
        ObjectStoreError: if the store fails or the object is not valid JSON
    """
    data = await store.get(key)
    if data is None:
        return None
    try:
        return json.loads(data)
    except ValueError as e:
        raise ObjectStoreError(f"Object {key} is not valid JSON: {e}") from e


async def write_json_best_effort(store: ObjectStore, key: str, payload: Any) -> bool:
    """Encode and store a JSON payload. Failures are logged, never raised.

    Returns:
        True if the object was stored
    """
    try:
        await store.put(key, json.dumps(payload, indent=2).encode("utf-8"))
        return True
    except Exception as e:
        logfire.error(
            "Failed to persist object",
            key=key,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
