"""Tests for the Supabase-backed object store and JSON helpers."""

import json
from unittest.mock import MagicMock, patch

import pytest
from storage3.exceptions import StorageApiError

from docgap.storage import (
    ObjectStoreError,
    SupabaseObjectStore,
    read_json,
    write_json_best_effort,
)
from docgap.storage.client import get_supabase_client


@pytest.fixture
def bucket():
    return MagicMock()


@pytest.fixture
def store(bucket):
    client = MagicMock()
    client.storage.from_.return_value = bucket
    return SupabaseObjectStore(client, "doc-gap-validator")


class TestSupabaseObjectStore:
    """Test get/put/delete error mapping."""

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, store, bucket):
        bucket.download.return_value = b'{"ok": true}'

        assert await store.get("a.json") == b'{"ok": true}'
        bucket.download.assert_called_once_with("a.json")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store, bucket):
        bucket.download.side_effect = StorageApiError("Object not found", "not_found", 404)

        assert await store.get("missing.json") is None

    @pytest.mark.asyncio
    async def test_get_other_error_raises(self, store, bucket):
        bucket.download.side_effect = StorageApiError("Internal error", "internal", 500)

        with pytest.raises(ObjectStoreError, match="Failed to read a.json"):
            await store.get("a.json")

    @pytest.mark.asyncio
    async def test_put_upserts_json(self, store, bucket):
        await store.put("a.json", b"{}")

        key, data, options = bucket.upload.call_args.args
        assert (key, data) == ("a.json", b"{}")
        assert options["upsert"] == "true"
        assert options["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_put_error_raises(self, store, bucket):
        bucket.upload.side_effect = StorageApiError("Payload too large", "too_large", 413)

        with pytest.raises(ObjectStoreError):
            await store.put("a.json", b"{}")

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, store, bucket):
        bucket.remove.side_effect = StorageApiError("Object not found", "not_found", 404)

        await store.delete("missing.json")

        bucket.remove.assert_called_once_with(["missing.json"])


class TestJsonHelpers:
    """Test read_json and write_json_best_effort."""

    @pytest.mark.asyncio
    async def test_read_json_miss(self, fake_store):
        assert await read_json(fake_store, "missing.json") is None

    @pytest.mark.asyncio
    async def test_read_json_rejects_invalid_json(self, fake_store):
        fake_store.objects["broken.json"] = b"{not json"

        with pytest.raises(ObjectStoreError, match="not valid JSON"):
            await read_json(fake_store, "broken.json")

    @pytest.mark.asyncio
    async def test_write_json_best_effort(self, fake_store):
        assert await write_json_best_effort(fake_store, "a.json", {"n": 1}) is True
        assert json.loads(fake_store.objects["a.json"]) == {"n": 1}

    @pytest.mark.asyncio
    async def test_write_json_best_effort_swallows_failure(self, fake_store):
        fake_store.fail_puts = True

        assert await write_json_best_effort(fake_store, "a.json", {"n": 1}) is False
        assert "a.json" not in fake_store.objects


class TestGetSupabaseClient:
    def test_uses_service_key_from_given_settings(self, mock_settings):
        with patch("docgap.storage.client.create_client") as create_client:
            client = get_supabase_client(mock_settings)

        create_client.assert_called_once_with("https://test.supabase.co", "test-service-key")
        assert client is create_client.return_value
