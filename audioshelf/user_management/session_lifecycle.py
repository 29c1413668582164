"""Session token issue, expiry and sliding renewal.

A session is valid while ``now - last_accessed`` stays within the configured
lifetime. Once a session is older than the renewal threshold, the next
resolve refreshes ``last_accessed``. The database write runs on a background
executor so the request never waits for it, while the caller receives the new
cookie expiry immediately.
"""

from __future__ import annotations

import logging
import re
import secrets
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Set

from ..config import ServerSettings
from ..database import utcnow
from ..errors import StorageFailure
from .session_store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)

# Bytes of entropy in a session token.
SESSION_TOKEN_ENTROPY = 32

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def create_session_token() -> str:
    """Return a fresh URL-safe token carrying 32 random bytes."""

    return secrets.token_urlsafe(SESSION_TOKEN_ENTROPY)


@dataclass(frozen=True)
class SessionContext:
    """Identity attached to an authenticated request."""

    token: str
    user_id: int
    username: str
    admin: bool
    last_accessed: datetime


@dataclass(frozen=True)
class IssuedSession:
    """A freshly stored session; ``cookie_expires`` derives from ``issued_at``."""

    token: str
    user_id: int
    issued_at: datetime
    cookie_expires: datetime


@dataclass(frozen=True)
class ResolvedSession:
    """Outcome of a successful resolve.

    ``renewed`` tells the transport layer to re-issue the cookie with
    ``cookie_expires``.
    """

    context: SessionContext
    renewed: bool
    cookie_expires: datetime


class SessionLifecycleManager:
    """Apply expiry and renewal policy on top of :class:`SessionStore`."""

    def __init__(
        self,
        store: SessionStore,
        settings: ServerSettings,
        *,
        clock: Callable[[], datetime] = utcnow,
        renewal_executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock
        self._executor = renewal_executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="session-renewal"
        )
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    def cookie_expiry(self, last_accessed: datetime) -> datetime:
        return last_accessed + self._settings.session_lifetime

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_session(self, user_id: int) -> IssuedSession:
        """Persist a new session for ``user_id``.

        The stored ``last_accessed`` and the returned cookie expiry come from
        the same clock reading.
        """

        token = create_session_token()
        issued_at = self._clock()
        self._store.create(token, user_id, issued_at)
        logger.info(
            "Session created",
            extra={"event": "session.created", "user_id": user_id},
        )
        return IssuedSession(
            token=token,
            user_id=user_id,
            issued_at=issued_at,
            cookie_expires=self.cookie_expiry(issued_at),
        )

    def end_session(self, token: str) -> bool:
        """Delete the session behind ``token``; return whether it existed."""

        return self._store.delete(token)

    def resolve(self, token: Optional[str]) -> Optional[ResolvedSession]:
        """Resolve ``token`` into a session, or ``None`` for anonymous access.

        Missing, malformed, unknown and expired tokens all resolve to
        ``None``. Expired sessions are deleted before returning.
        """

        if not token or not _TOKEN_PATTERN.match(token):
            return None

        try:
            record = self._store.get(token)
        except StorageFailure:
            logger.warning(
                "Session lookup failed; continuing unauthenticated",
                extra={"event": "session.resolve.storage_failed"},
            )
            return None
        if record is None:
            return None

        now = self._clock()
        age = now - record.last_accessed
        if age > self._settings.session_lifetime:
            self._delete_expired(record)
            return None

        if age > self._settings.renewal_threshold:
            self._schedule_renewal(record.token, now)
            return ResolvedSession(
                context=_to_context(record, last_accessed=now),
                renewed=True,
                cookie_expires=self.cookie_expiry(now),
            )

        return ResolvedSession(
            context=_to_context(record, last_accessed=record.last_accessed),
            renewed=False,
            cookie_expires=self.cookie_expiry(record.last_accessed),
        )

    # ------------------------------------------------------------------
    # Background renewal
    # ------------------------------------------------------------------
    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for pending renewal writes; return ``True`` when all finished."""

        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        """Finish outstanding renewals and stop the executor."""

        self.drain()
        self._executor.shutdown(wait=True)

    def _schedule_renewal(self, token: str, now: datetime) -> None:
        future = self._executor.submit(self._store.touch, token, now)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._on_renewal_done)

    def _on_renewal_done(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)
        if future.cancelled():
            logger.warning(
                "Session renewal was cancelled before it ran",
                extra={"event": "session.renewal.cancelled"},
            )
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Could not update session last access time",
                exc_info=exc,
                extra={"event": "session.renewal.failed"},
            )

    def _delete_expired(self, record: SessionRecord) -> None:
        try:
            self._store.delete(record.token)
        except StorageFailure as exc:
            # The row is re-checked on every resolve, so a failed delete only
            # leaves a row that keeps resolving as expired.
            logger.error(
                "Could not delete expired session",
                exc_info=exc,
                extra={"event": "session.expire.delete_failed", "user_id": record.user_id},
            )
            return
        logger.info(
            "Expired session removed",
            extra={"event": "session.expired", "user_id": record.user_id},
        )


def _to_context(record: SessionRecord, *, last_accessed: datetime) -> SessionContext:
    return SessionContext(
        token=record.token,
        user_id=record.user_id,
        username=record.username,
        admin=record.admin,
        last_accessed=last_accessed,
    )


__all__ = [
    "IssuedSession",
    "ResolvedSession",
    "SESSION_TOKEN_ENTROPY",
    "SessionContext",
    "SessionLifecycleManager",
    "create_session_token",
]
