"""SQLAlchemy engine singleton and session helpers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..config import ServerSettings
from ..errors import StorageFailure

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # Sync routes run in the threadpool and renewals run on a worker
        # thread, so one connection may be used from several threads.
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:  # pragma: no cover - driver hook
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
    )


class Database:
    """Own one engine and the session factory bound to it."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine = _build_engine(url)
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create every registered table that does not exist yet."""

        from . import models  # noqa: F401  - registers tables on Base.metadata
        from .base import Base

        Base.metadata.create_all(self._engine)
        logger.info(
            "Database schema ready",
            extra={"event": "database.schema.ready", "dialect": self.dialect_name},
        )

    def dispose(self) -> None:
        self._engine.dispose()


_database: Database | None = None


def configure_database(url: Optional[str] = None, *, create_tables: bool = True) -> Database:
    """Replace the process-wide database, creating tables when requested."""

    global _database
    if _database is not None:
        _database.dispose()
    _database = Database(url or ServerSettings.from_env().database_url)
    if create_tables:
        _database.create_all()
    return _database


def get_database() -> Database:
    global _database
    if _database is None:
        _database = configure_database()
    return _database


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Provide a transactional scope on the process-wide database."""
    with get_database().session() as session:
        yield session


def dispose_engine() -> None:
    """Dispose the global engine and clear the singleton."""
    global _database
    if _database is not None:
        _database.dispose()
    _database = None


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate driver errors raised inside the block into ``StorageFailure``."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            "Storage operation failed: %s",
            operation,
            exc_info=exc,
            extra={"event": "storage.failed", "operation": operation},
        )
        raise StorageFailure(f"{operation} failed") from exc
