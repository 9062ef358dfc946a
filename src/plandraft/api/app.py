"""
FastAPI Application Factory & Configuration.

This module initializes the plan API. It is responsible for:
1.  **Middleware Setup**: CORS for browser editors on other origins.
2.  **Exception Handling**: Global handlers so every error returns JSON.
3.  **Routing**: Mounting the plan and template routers.
4.  **Lifecycle**: Creating the plan repository before the first request.

Design Pattern
--------------
An **Application Factory** (`create_app`) keeps tests independent: each test
builds its own app after installing the store it wants to inspect.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plandraft import __version__
from plandraft.api.plan_store import PlanRepository
from plandraft.api.routers import plans, templates
from plandraft.api.schemas import HealthPayload
from plandraft.core.settings import get_logger, load_settings
from plandraft.core.store.base import StoreError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    ASGI Lifespan context manager.

    - **Startup**: Initialize the plan repository singleton.
    - **Shutdown**: Nothing to release; file writes are synchronous per request.
    """
    logger.info("Plan API starting up")
    repository = PlanRepository.get_instance()
    logger.info("Plan repository ready (%s)", type(repository.store).__name__)

    yield

    logger.info("Plan API shutting down")


def create_app() -> FastAPI:
    """
    Construct and configure the plandraft FastAPI application.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    app = FastAPI(
        title="plandraft API",
        description="Lesson plan snapshots and step templates",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Global Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler so unhandled exceptions still return structured JSON."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request",
                "detail": str(exc),
            },
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        """The backing store failed; the request may be retried."""
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={
                "error": "Storage Unavailable",
                "detail": str(exc),
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(plans.router)
    app.include_router(templates.router)

    @app.get("/health", tags=["System"], response_model=HealthPayload)
    async def health_check() -> HealthPayload:
        """Simple liveness probe."""
        return HealthPayload(
            status="ok",
            environment=load_settings().environment,
            version=__version__,
        )

    return app


def get_app() -> FastAPI:
    """Alias of :func:`create_app` for ASGI servers started with ``--factory``."""
    return create_app()


__all__ = ["create_app", "get_app"]
