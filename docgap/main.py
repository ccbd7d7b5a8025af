"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from docgap.api import health, validate
from docgap.config import get_settings
from docgap.logging_config import setup_logfire
from docgap.middleware.correlation_id import CorrelationIDMiddleware
from docgap.services.validator import build_validator

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: observability setup and the shared validator."""
    settings = get_settings()

    # Tracing for the app, PydanticAI, httpx and Pydantic
    setup_logfire(app)

    # Error reporting is opt-in
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    # Clients are built once and shared by every request
    app.state.validator = build_validator(settings)

    logfire.info(
        "Application startup complete",
        model=settings.default_model,
        embedding_model=settings.embedding_model,
        environment=settings.env,
    )

    yield

    logfire.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Documentation Gap Validator",
    description="Validates developer issues against a documentation site and recommends fixes",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Every request and its log lines carry a correlation ID
app.add_middleware(CorrelationIDMiddleware)

# CORS for the dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(validate.router, tags=["validation"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Documentation Gap Validator API",
        "model": settings.default_model,
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "docgap.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
