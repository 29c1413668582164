"""Session cookie attributes shared by the auth routes and the middleware."""

from __future__ import annotations

from datetime import datetime

from starlette.responses import Response

from ..config import ServerSettings


def set_session_cookie(
    response: Response, settings: ServerSettings, token: str, expires: datetime
) -> None:
    response.set_cookie(
        settings.cookie_name,
        token,
        expires=expires,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: ServerSettings) -> None:
    response.delete_cookie(
        settings.cookie_name,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def session_cookie_header(settings: ServerSettings, token: str, expires: datetime) -> str:
    """Return the raw ``Set-Cookie`` value issuing ``token`` until ``expires``."""

    response = Response()
    set_session_cookie(response, settings, token, expires)
    return response.headers["set-cookie"]


def clear_cookie_header(settings: ServerSettings) -> str:
    response = Response()
    clear_session_cookie(response, settings)
    return response.headers["set-cookie"]


__all__ = [
    "clear_cookie_header",
    "clear_session_cookie",
    "session_cookie_header",
    "set_session_cookie",
]
