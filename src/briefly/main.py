"""Application factory for the briefly FastAPI app."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from briefly.core.errors import (
    AppError,
    app_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from briefly.core.logging import setup_logging
from briefly.core.resources import Resources
from briefly.core.settings import get_settings
from briefly.routers import health as health_router
from briefly.routers import jobs as jobs_router
from briefly.services.query import QueryService
from briefly.services.submission import SubmissionService

logger = logging.getLogger(__name__)


def bind_services(app: FastAPI, resources: Resources) -> None:
    """Expose the resources and the services built on them to the routers."""
    session_factory = resources.database.session_factory
    app.state.resources = resources
    app.state.submission_service = SubmissionService(session_factory, resources.queue)
    app.state.query_service = QueryService(session_factory, resources.cache)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"briefly API starting | environment={settings.environment}")

    resources = Resources.open(settings)
    await resources.database.init_models(drop=False)
    bind_services(app, resources)
    try:
        yield
    finally:
        logger.info("briefly API shutting down")
        await resources.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="briefly API",
        version="0.1.0",
        description="Asynchronous text and URL summarization jobs",
        lifespan=lifespan,
    )

    app.include_router(jobs_router.router)
    app.include_router(health_router.router)

    # Error handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    return app


app = create_app()
