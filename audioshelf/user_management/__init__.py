"""User management utilities for audioshelf."""
from .auth_service import AuthService
from .session_lifecycle import (
    IssuedSession,
    ResolvedSession,
    SessionContext,
    SessionLifecycleManager,
    create_session_token,
)
from .session_store import SessionRecord, SessionStore
from .sql_user_store import SqlUserStore
from .user_store_base import UserRecord, UserStoreBase, normalize_username

__all__ = [
    "AuthService",
    "IssuedSession",
    "ResolvedSession",
    "SessionContext",
    "SessionLifecycleManager",
    "SessionRecord",
    "SessionStore",
    "SqlUserStore",
    "UserRecord",
    "UserStoreBase",
    "create_session_token",
    "normalize_username",
]
