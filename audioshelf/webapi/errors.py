"""Map :class:`~audioshelf.errors.ApiError` onto the JSON error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import ApiError
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
            extra={"event": "http.request.failed", "status": exc.status_code},
        )
    else:
        logger.debug(
            "Request rejected with %s",
            exc.error_code,
            extra={"event": "http.request.rejected", "status": exc.status_code},
        )
    body = ErrorResponse(error_code=exc.error_code, value=exc.value)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Register the handler rendering every ``ApiError`` subclass."""

    app.add_exception_handler(ApiError, _handle_api_error)


__all__ = ["register_exception_handlers"]
