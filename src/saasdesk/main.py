"""
Main FastAPI application entry point for SaaSDesk.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from saasdesk.billing.exceptions import BillingError
from saasdesk.communications.email_service import EmailSender, get_email_sender
from saasdesk.domain import EntityNotFoundError
from saasdesk.logging import setup_logging
from saasdesk.routers import register_routers
from saasdesk.settings import get_settings
from saasdesk.store import create_data_store
from saasdesk.store.interfaces import DataStore

logger = structlog.get_logger(__name__)


def billing_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render billing errors with their own status code and payload."""
    if not isinstance(exc, BillingError):
        raise exc
    logger.info(
        "api.billing_error",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "NOT_FOUND", "message": str(exc)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Create the data store and email sender unless they were injected."""
    settings = get_settings()
    logger.info(
        "service.startup.begin",
        version=settings.app_version,
        environment=settings.environment.value,
    )

    owns_store = getattr(app.state, "data_store", None) is None
    if owns_store:
        app.state.data_store = await create_data_store(settings)
    if getattr(app.state, "email_sender", None) is None:
        app.state.email_sender = get_email_sender(app.state.data_store, settings)

    logger.info("service.startup.complete")
    try:
        yield
    finally:
        if owns_store:
            await app.state.data_store.close()
            app.state.data_store = None
        logger.info("service.shutdown.complete")


def create_application(
    data_store: DataStore | None = None,
    email_sender: EmailSender | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    A store or sender passed in is used as is and never closed by the app.
    """
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title="SaaSDesk",
        description="Subscription billing back end for the admin console and subscriber portal",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.data_store = data_store
    app.state.email_sender = email_sender

    app.add_exception_handler(BillingError, billing_error_handler)
    app.add_exception_handler(EntityNotFoundError, not_found_handler)

    register_routers(app, settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment.value,
            "store": settings.store.backend,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


app = create_application()
