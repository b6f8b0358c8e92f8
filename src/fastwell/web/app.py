"""FastAPI application for the fastwell HTTP API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..ai.client import Completer, CompletionClient
from ..auth import IdentityProvider
from ..config import Settings
from ..db.engine import init_db
from ..db.store import DocumentStore
from ..exceptions import (
    ActiveFastExistsError,
    AuthenticationError,
    CompletionError,
    DailyLimitExceededError,
    DocumentNotFoundError,
    FastwellError,
    InvalidInputError,
)
from ..services.ai_requests import AIRequestService
from .routers import ai, auth, challenges, fasting, profile, weight

logger = logging.getLogger(__name__)

# Most specific first; the first matching class decides the status code
ERROR_STATUS_CODES: list[tuple[type[FastwellError], int]] = [
    (ActiveFastExistsError, 409),
    (InvalidInputError, 400),
    (DocumentNotFoundError, 404),
    (AuthenticationError, 401),
    (DailyLimitExceededError, 429),
    (CompletionError, 502),
]


def status_code_for(error: FastwellError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    await init_db(app.state.settings.db_path)
    yield
    # Let in-flight AI requests reach a terminal status
    await app.state.ai_service.drain()


def create_app(settings: Settings | None = None, completer: Completer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    `completer` replaces the Gemini client, which is how tests run the
    AI request flow without network access.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="fastwell",
        description="Intermittent fasting tracker with AI suggestions and meal plans",
        version=__version__,
        lifespan=lifespan,
    )

    store = DocumentStore(settings.db_path)
    app.state.settings = settings
    app.state.store = store
    app.state.identity = IdentityProvider.from_settings(store, settings)
    app.state.ai_service = AIRequestService(
        store,
        completer or CompletionClient.from_settings(settings),
        meal_plan_daily_limit=settings.meal_plan_daily_limit,
    )

    @app.exception_handler(FastwellError)
    async def fastwell_error_handler(request: Request, exc: FastwellError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(fasting.router)
    app.include_router(weight.router)
    app.include_router(challenges.router)
    app.include_router(ai.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
