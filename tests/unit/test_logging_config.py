"""Tests for Logfire and Python logging setup."""

from unittest.mock import MagicMock, patch

from docgap.logging_config import setup_cli_logging, setup_logfire


class TestSetupLogfire:
    def test_configures_and_instruments_app(self, mock_settings, mock_logfire):
        app = MagicMock()

        setup_logfire(app)

        mock_logfire.configure.assert_called_once_with(
            environment="local", send_to_logfire="if-token-present"
        )
        mock_logfire.instrument_pydantic.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_pydantic_ai.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app)

    def test_token_is_passed_when_set(self, mock_settings, mock_logfire):
        mock_settings.logfire_token = "lf_token"

        setup_logfire(MagicMock())

        assert mock_logfire.configure.call_args.kwargs["token"] == "lf_token"


class TestSetupCliLogging:
    def test_does_not_instrument_fastapi(self, mock_settings, mock_logfire):
        with patch("docgap.logging_config.logging.basicConfig") as basic_config:
            setup_cli_logging()

        mock_logfire.configure.assert_called_once()
        mock_logfire.instrument_fastapi.assert_not_called()
        assert "%(name)s" in basic_config.call_args.kwargs["format"]

    def test_deployed_format_is_bare_message(self, mock_settings, mock_logfire):
        mock_settings.env = "prod"

        with patch("docgap.logging_config.logging.basicConfig") as basic_config:
            setup_cli_logging()

        assert basic_config.call_args.kwargs["format"] == "%(message)s"
