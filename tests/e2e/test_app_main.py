"""End-to-end tests for main application."""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from docgap.main import APP_VERSION, app


class TestMainApplication:
    """Test FastAPI application initialization."""

    def test_app_metadata(self):
        assert app.title == "Documentation Gap Validator"
        assert app.description is not None
        assert app.version == APP_VERSION

    def test_app_routes(self):
        routes = [route.path for route in app.routes]

        assert "/" in routes
        assert "/health" in routes
        assert "/validate" in routes
        assert "/cache/invalidate" in routes

    def test_root_endpoint(self, test_client, mock_settings):
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Documentation Gap Validator API",
            "model": mock_settings.default_model,
            "version": APP_VERSION,
        }

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_correlation_id_is_generated(self, test_client):
        response = test_client.get("/health")

        assert response.headers["X-Correlation-ID"]

    def test_correlation_id_is_echoed(self, test_client):
        response = test_client.get("/health", headers={"X-Correlation-ID": "trace-123"})

        assert response.headers["X-Correlation-ID"] == "trace-123"


class TestLifespan:
    """Test application startup and shutdown."""

    def test_startup_builds_shared_validator(self, mock_settings, mock_logfire):
        validator = MagicMock()
        with (
            patch("docgap.main.setup_logfire") as mock_setup,
            patch("docgap.main.build_validator", return_value=validator) as mock_build,
            patch("docgap.main.sentry_sdk") as mock_sentry,
        ):
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
                assert app.state.validator is validator

        mock_setup.assert_called_once_with(app)
        mock_build.assert_called_once_with(mock_settings)
        mock_sentry.init.assert_not_called()
        messages = [c.args[0] for c in mock_logfire.info.call_args_list]
        assert "Application startup complete" in messages
        assert "Application shutdown complete" in messages

    def test_sentry_initialized_when_dsn_set(self, mock_settings, mock_logfire):
        mock_settings.sentry_dsn = "https://key@sentry.example.dev/1"
        with (
            patch("docgap.main.setup_logfire"),
            patch("docgap.main.build_validator", return_value=MagicMock()),
            patch("docgap.main.sentry_sdk") as mock_sentry,
        ):
            with TestClient(app):
                pass

        assert mock_sentry.init.call_args.kwargs["dsn"] == "https://key@sentry.example.dev/1"
