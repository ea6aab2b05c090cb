"""FastAPI application factory.

Main entry point for the learning plan Web API. Services (store, LLM
client, search client, plan generator) are created once per app and kept on
``app.state``; tests pass their own instances to ``create_app``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnplan import __version__
from learnplan.config import AppConfig, load_app_config
from learnplan.core.plan_generator import PlanGenerator
from learnplan.errors import InternalError, LearnPlanError
from learnplan.llm.client import LLMClient, LLMConfig
from learnplan.search.client import ResourceSearchClient
from learnplan.store.base import ProfileStore
from learnplan.store.factory import create_profile_store
from learnplan.web.routes import (
    consultations_router,
    health_router,
    plans_router,
    profiles_router,
    resources_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config: AppConfig = app.state.config
    logger.info(
        "api_startup",
        llm_configured=config.llm.configured,
        search_configured=config.search.configured,
        store_backend=app.state.store.backend,
        mock_mode=config.mock_mode,
    )
    yield
    app.state.search_client.close()
    app.state.store.close()
    if app.state.plan_generator.llm_client is not None:
        app.state.plan_generator.llm_client.close()


def _error_body(message: str, error: str | None = None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def _register_exception_handlers(app: FastAPI, config: AppConfig) -> None:
    @app.exception_handler(LearnPlanError)
    async def handle_app_error(request: Request, exc: LearnPlanError) -> JSONResponse:
        logger.warning("request_failed", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(message))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
        internal = InternalError()
        return JSONResponse(
            status_code=internal.status_code,
            content=_error_body(
                internal.message,
                str(exc) if config.is_development else None,
            ),
        )


def create_app(
    config: AppConfig | None = None,
    store: ProfileStore | None = None,
    llm_client: LLMClient | None = None,
    search_client: ResourceSearchClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application config (loaded from YAML/env if not provided)
        store: Profile store (selected from config if not provided)
        llm_client: Completion client (built from config if not provided)
        search_client: Search client (built from config if not provided)

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()

    app = FastAPI(
        title="Learning Plan API",
        description="Personalized 7-day learning plans for neurodiverse students",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store if store is not None else create_profile_store(config)
    app.state.search_client = (
        search_client if search_client is not None else ResourceSearchClient(config.search)
    )
    if llm_client is None and config.llm.configured and not config.mock_mode:
        llm_client = LLMClient(LLMConfig.from_settings(config.llm))
    app.state.plan_generator = PlanGenerator(
        llm_client=llm_client,
        search_client=app.state.search_client,
        mock_mode=config.mock_mode,
    )

    # CORS middleware for the browser UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, config)

    app.include_router(health_router)
    app.include_router(plans_router)
    app.include_router(profiles_router)
    app.include_router(consultations_router)
    app.include_router(resources_router)

    return app
