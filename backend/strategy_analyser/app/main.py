"""FastAPI application factory for the strategy analyser service."""
from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..db.base import create_engine, create_schema, dispose_engine
from .config import settings
from .logging import bind_contextvars, clear_contextvars, get_logger, setup_logging
from .routes import merge, parse, runs, strategies, system

setup_logging(level=settings.log_level)

logger = get_logger("strategy_analyser.app")

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def _lifespan(app: FastAPI):  # pragma: no cover - exercised via integration tests
    """Initialise and tear down shared application resources."""

    create_engine(settings.database_url, echo=settings.sqlalchemy_echo)
    if settings.storage.auto_create_schema:
        await create_schema()
    logger.info("app_started", env=settings.env)
    try:
        yield
    finally:
        await dispose_engine()


async def _bind_request_id(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    clear_contextvars()
    bind_contextvars(request_id=request_id, path=request.url.path, method=request.method)
    try:
        response = await call_next(request)
    finally:
        clear_contextvars()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error",
        path=request.url.path,
        method=request.method,
        error=repr(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(*, api_prefix: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Parameters
    ----------
    api_prefix:
        Optional path prefix under which the API routers should be mounted.
        When ``None`` the routers are mounted at the application root, which
        keeps the tests independent of the deployment prefix.
    """

    app = FastAPI(title="Strategy Analyser", version="1.0", lifespan=_lifespan)

    if settings.env == "dev":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.middleware("http")(_bind_request_id)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    router_prefix = api_prefix.rstrip("/") if api_prefix else ""
    if router_prefix and not router_prefix.startswith("/"):
        router_prefix = f"/{router_prefix}"

    # Merge routes go first so that ``/runs/merge`` is never read as a run id.
    for module in (merge, runs, strategies, parse, system):
        app.include_router(module.router, prefix=router_prefix)

    return app


app = create_app(api_prefix="/api")
