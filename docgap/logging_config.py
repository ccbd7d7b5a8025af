"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from docgap.config import Settings, get_settings


def _configure_logfire(settings: Settings) -> None:
    """Configure Logfire and the PydanticAI/httpx/Pydantic instrumentation."""
    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "send_to_logfire": "if-token-present",
    }

    # Cloud export only when a token is configured
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)
    logfire.instrument_pydantic()
    logfire.instrument_httpx()

    # Embedding and generation calls are traced through PydanticAI
    logfire.instrument_pydantic_ai()


def _configure_python_logging(settings: Settings) -> None:
    log_level = settings.log_level.upper()

    if settings.env == "local":
        # Console format with logger names for local runs
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Deployed: Logfire handles structured formatting
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(message)s",
        )


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for the API process.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic, httpx and PydanticAI instrumentation
    - Environment-aware Python logging
    """
    settings = get_settings()
    _configure_logfire(settings)
    logfire.instrument_fastapi(app)
    _configure_python_logging(settings)


def setup_cli_logging() -> None:
    """Configure Logfire and Python logging for command-line runs (no app)."""
    settings = get_settings()
    _configure_logfire(settings)
    _configure_python_logging(settings)
