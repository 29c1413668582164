"""Application factory for the FastAPI backend."""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from .. import logging_manager as log_mgr
from ..config import ServerSettings
from ..database import Database, configure_database, utcnow
from .auth_routes import router as auth_router
from .dependencies import build_services
from .errors import register_exception_handlers
from .middleware import SessionMiddleware
from .routers import books_router, users_router

LOGGER = logging.getLogger(__name__)

RANGE_REQUEST_HEADERS = ("Range",)
RANGE_RESPONSE_HEADERS = ("Accept-Ranges", "Content-Length", "Content-Range")


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return [], False

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI, settings: ServerSettings) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(settings.cors_origins)
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"] + list(RANGE_REQUEST_HEADERS),
        expose_headers=list(RANGE_RESPONSE_HEADERS),
    )


def create_app(
    settings: Optional[ServerSettings] = None,
    *,
    database: Optional[Database] = None,
    clock: Callable[[], datetime] = utcnow,
    renewal_executor: Optional[ThreadPoolExecutor] = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    ``settings`` defaults to :meth:`ServerSettings.from_env`. Without an
    explicit ``database`` the process-wide one is configured from
    ``settings.database_url`` and its tables are created.
    """

    settings = settings or ServerSettings.from_env()
    log_mgr.configure_logging_level(log_level=settings.log_level)

    if database is None:
        database = configure_database(settings.database_url)
    else:
        database.create_all()

    services = build_services(
        settings,
        database,
        clock=clock,
        renewal_executor=renewal_executor,
    )

    @asynccontextmanager
    async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await run_in_threadpool(services.sessions.shutdown)
        LOGGER.info("Session renewals drained", extra={"event": "server.shutdown"})

    app = FastAPI(title="audioshelf API", version="0.1.0", lifespan=_lifespan)
    app.state.services = services

    register_exception_handlers(app)

    app.add_middleware(SessionMiddleware, sessions=services.sessions)

    @app.middleware("http")
    async def _request_log_context(request: Request, call_next):
        correlation_id = request.headers.get("x-request-id") or uuid4().hex
        started = time.perf_counter()
        with log_mgr.log_context(correlation_id=correlation_id):
            response = await call_next(request)
            LOGGER.debug(
                "%s %s",
                request.method,
                request.url.path,
                extra={
                    "event": "http.request.completed",
                    "status": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response

    _configure_cors(app, settings)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(books_router, prefix="/api")
    app.include_router(users_router, prefix="/api")

    return app


__all__ = ["create_app"]
