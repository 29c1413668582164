"""ASGI middleware resolving the session cookie on every HTTP request."""

from __future__ import annotations

import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..user_management import ResolvedSession, SessionLifecycleManager
from .cookies import clear_cookie_header, session_cookie_header

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "session"


class SessionMiddleware:
    """Attach the resolved :class:`SessionContext` (or ``None``) to ``scope["state"]``.

    Renewed sessions get a fresh cookie on the response. A presented token
    that no longer resolves is cleared so the browser stops sending it. A
    cookie already written by the route (login, logout) always wins.
    """

    def __init__(self, app: ASGIApp, *, sessions: SessionLifecycleManager) -> None:
        self.app = app
        self._sessions = sessions

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        settings = self._sessions.settings
        token = HTTPConnection(scope).cookies.get(settings.cookie_name)
        resolved: Optional[ResolvedSession] = None
        if token:
            resolved = await run_in_threadpool(self._sessions.resolve, token)

        state = scope.setdefault("state", {})
        state[SESSION_STATE_KEY] = resolved.context if resolved is not None else None

        cookie_header: Optional[str] = None
        if resolved is not None and resolved.renewed:
            cookie_header = session_cookie_header(settings, token, resolved.cookie_expires)
        elif token and resolved is None:
            logger.debug(
                "Clearing stale session cookie",
                extra={"event": "session.cookie.cleared"},
            )
            cookie_header = clear_cookie_header(settings)

        if cookie_header is None:
            await self.app(scope, receive, send)
            return

        cookie_prefix = f"{settings.cookie_name}="

        async def send_with_cookie(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                existing = headers.getlist("set-cookie")
                if not any(value.startswith(cookie_prefix) for value in existing):
                    headers.append("set-cookie", cookie_header)
            await send(message)

        await self.app(scope, receive, send_with_cookie)


__all__ = ["SESSION_STATE_KEY", "SessionMiddleware"]
