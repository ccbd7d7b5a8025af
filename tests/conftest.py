"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Infrastructure: respx_mock, fake_store, mock_settings, mock_logfire
2. Model Fixtures: sample_issue, email_issue, sample_evidence
3. Mock Clients: mock_fetcher, mock_embedder, mock_generation_client
4. Validator: mock_validator, test_client
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

try:
    import respx
except ImportError:
    respx = None

from docgap.models.issue_models import Issue
from docgap.models.validation_models import Evidence


class FakeObjectStore:
    """In-memory ObjectStore recording every call."""

    def __init__(self, objects: dict[str, bytes] | None = None):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.gets: list[str] = []
        self.puts: list[str] = []
        self.deletes: list[str] = []
        self.fail_puts = False

    async def get(self, key: str) -> bytes | None:
        self.gets.append(key)
        return self.objects.get(key)

    async def put(self, key: str, data: bytes) -> None:
        self.puts.append(key)
        if self.fail_puts:
            from docgap.storage import ObjectStoreError

            raise ObjectStoreError(f"Failed to write {key}")
        self.objects[key] = data

    async def delete(self, key: str) -> None:
        self.deletes.append(key)
        self.objects.pop(key, None)

    def json(self, key: str):
        return json.loads(self.objects[key])


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    if respx is None:
        pytest.skip("respx not available")
    with respx.mock:
        yield respx


@pytest.fixture
def fake_store():
    """Empty in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def store_factory():
    """Build an in-memory object store pre-populated with JSON objects."""

    def factory(objects: dict | None = None) -> FakeObjectStore:
        return FakeObjectStore(
            {key: json.dumps(value).encode("utf-8") for key, value in (objects or {}).items()}
        )

    return factory


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_issue():
    """Deployment issue naming a hosting platform."""
    return Issue(
        id="issue-1",
        title="Emails fail after deploying to Vercel",
        category="deployment",
        description="Sending works locally but fails in production on Vercel",
        frequency=12,
        sources=["https://stackoverflow.com/q/123"],
        last_seen="2025-01-15",
        severity="high",
    )


@pytest.fixture
def email_issue():
    """Email deliverability issue."""
    return Issue(
        id="issue-2",
        title="Messages landing in spam folder",
        category="email-delivery",
        description="Gmail marks transactional messages as spam",
        frequency=4,
        sources=["https://github.com/acme/sdk/issues/9"],
        last_seen="2025-02-01",
    )


@pytest.fixture
def sample_evidence():
    """Evidence with a strong semantic match and no gaps."""
    return Evidence(
        page_url="/docs/deploy/vercel",
        page_title="Deploy to Vercel",
        has_relevant_content=True,
        content_gaps=[],
        code_examples=3,
        production_guidance=True,
        semantic_score=0.9,
    )


# =============================================================================
# Mock Clients
# =============================================================================


@pytest.fixture
def mock_fetcher():
    """PageFetcher double resolving paths against https://{domain}."""
    fetcher = MagicMock()

    def resolve_url(domain, path_or_url):
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"https://{domain}{path_or_url}"

    fetcher.resolve_url = Mock(side_effect=resolve_url)
    fetcher.fetch = AsyncMock(return_value="")
    fetcher.fetch_strict = AsyncMock(return_value="")
    return fetcher


@pytest.fixture
def mock_embedder():
    """EmbeddingClient double returning fixed vectors."""
    embedder = MagicMock()
    embedder.embed_document = AsyncMock(return_value=[1.0, 0.0, 0.0])
    embedder.embed_query = AsyncMock(return_value=[1.0, 0.0, 0.0])
    return embedder


@pytest.fixture
def mock_generation_client():
    """TextGenerationClient double; configure generate.side_effect per test."""
    client = MagicMock()
    client.generate = AsyncMock()
    return client


# =============================================================================
# Settings / Logging
# =============================================================================


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings."""
    from docgap.config import Settings

    settings = Settings(
        supabase_url="https://test.supabase.co",
        supabase_service_key="test-service-key",
        pydantic_ai_gateway_api_key="paig_test_key",
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )

    monkeypatch.setattr("docgap.config.get_settings", lambda: settings)
    monkeypatch.setattr("docgap.main.get_settings", lambda: settings)
    monkeypatch.setattr("docgap.logging_config.get_settings", lambda: settings)
    return settings


@pytest.fixture
def mock_logfire(monkeypatch):
    """Mock Logfire configuration and instrumentation calls."""

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.span = mock_span

    monkeypatch.setattr("docgap.logging_config.logfire", mock_logfire_module)
    monkeypatch.setattr("docgap.main.logfire", mock_logfire_module)
    return mock_logfire_module


# =============================================================================
# Validator / App
# =============================================================================


@pytest.fixture
def mock_validator():
    """IssueValidator double with async run() and invalidate_caches()."""
    validator = MagicMock()
    validator.run = AsyncMock()
    validator.invalidate_caches = AsyncMock()
    validator.clients = MagicMock()
    validator.clients.health.check = AsyncMock(return_value=None)
    return validator


@pytest.fixture
def test_client(mock_settings, mock_logfire, mock_validator):
    """FastAPI TestClient with the validator dependency overridden.

    The lifespan does not run, so no real clients are built.
    """
    from fastapi.testclient import TestClient

    from docgap.api.validate import get_validator
    from docgap.main import app

    app.dependency_overrides[get_validator] = lambda: mock_validator
    yield TestClient(app)
    app.dependency_overrides.clear()
