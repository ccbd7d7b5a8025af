"""Tests for progress notification publishing."""

import json

import httpx
import pytest

from docgap.services.progress import ProgressPublisher

WEBHOOK = "https://dashboard.example.dev/hooks/progress"


class TestProgressPublisher:
    """Test publish() and its helpers."""

    @pytest.mark.asyncio
    async def test_posts_event_to_webhook(self, respx_mock):
        route = respx_mock.post(WEBHOOK).mock(return_value=httpx.Response(204))

        await ProgressPublisher(WEBHOOK).progress(
            "session-1", "Embedding pages", phase="embeddings", pages=12
        )

        body = json.loads(route.calls.last.request.content)
        assert body["sessionId"] == "session-1"
        assert body["type"] == "progress"
        assert body["message"] == "Embedding pages"
        assert body["phase"] == "embeddings"
        assert body["metadata"] == {"pages": 12}
        assert isinstance(body["timestamp"], int)

    @pytest.mark.asyncio
    async def test_omits_empty_fields(self, respx_mock):
        route = respx_mock.post(WEBHOOK).mock(return_value=httpx.Response(200))

        await ProgressPublisher(WEBHOOK).success("session-1", "Done")

        body = json.loads(route.calls.last.request.content)
        assert "phase" not in body
        assert "metadata" not in body

    @pytest.mark.asyncio
    async def test_webhook_failure_is_swallowed(self, respx_mock):
        respx_mock.post(WEBHOOK).mock(return_value=httpx.Response(503))

        await ProgressPublisher(WEBHOOK).error("session-1", "Something broke")

    @pytest.mark.asyncio
    async def test_connection_error_is_swallowed(self, respx_mock):
        respx_mock.post(WEBHOOK).mock(side_effect=httpx.ConnectError("refused"))

        await ProgressPublisher(WEBHOOK).info("session-1", "Starting")

    @pytest.mark.asyncio
    async def test_without_webhook_makes_no_requests(self, respx_mock):
        await ProgressPublisher().info("session-1", "Starting")

        assert not respx_mock.calls
