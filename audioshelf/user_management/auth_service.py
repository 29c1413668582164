"""Authentication utilities built on top of the user store."""
from __future__ import annotations

import logging
from typing import Tuple

from ..errors import InvalidCredentials
from .session_lifecycle import IssuedSession, SessionLifecycleManager
from .user_store_base import UserRecord, UserStoreBase, normalize_username

logger = logging.getLogger(__name__)


class AuthService:
    """Coordinate credential checks and session issue/teardown."""

    def __init__(self, user_store: UserStoreBase, sessions: SessionLifecycleManager) -> None:
        self._user_store = user_store
        self._sessions = sessions

    def login(self, username: str, password: str) -> Tuple[IssuedSession, UserRecord]:
        """Validate credentials and return the new session with the user."""

        name = normalize_username(username or "")
        if not name or not (password or "").strip():
            raise InvalidCredentials()

        record = self._user_store.verify_credentials(name, password)
        if record is None:
            logger.info(
                "Rejected login attempt",
                extra={"event": "auth.login.rejected"},
            )
            raise InvalidCredentials()

        issued = self._sessions.create_session(record.id)
        return issued, record

    def logout(self, session_token: str) -> bool:
        """Terminate a session token if present."""

        removed = self._sessions.end_session(session_token)
        logger.info(
            "Session ended",
            extra={"event": "auth.logout", "status": "removed" if removed else "missing"},
        )
        return removed

    @property
    def sessions(self) -> SessionLifecycleManager:
        return self._sessions

    @property
    def user_store(self) -> UserStoreBase:
        return self._user_store
