"""SQLAlchemy database layer for audioshelf.

Provides the shared engine, session factory, and declarative base used by
the session, catalog and library stores.
"""

from .base import Base, ensure_utc, utcnow
from .engine import (
    Database,
    configure_database,
    dispose_engine,
    get_database,
    get_db_session,
    storage_errors,
)

__all__ = [
    "Base",
    "Database",
    "configure_database",
    "dispose_engine",
    "ensure_utc",
    "get_database",
    "get_db_session",
    "storage_errors",
    "utcnow",
]
