from __future__ import annotations

import os
import tempfile

# The package logger writes a rotating file on first import; keep it out of the tree.
os.environ.setdefault("AUDIOSHELF_LOG_DIR", tempfile.mkdtemp(prefix="audioshelf-logs-"))

from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from audioshelf.config import ServerSettings
from audioshelf.database import Database, utcnow
from audioshelf.library import CatalogRepository, FileRecord, NewFile, ProgressAccountant
from audioshelf.user_management import SessionLifecycleManager, SessionStore, SqlUserStore
from audioshelf.webapi.application import create_app


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    # Starts at the real time so cookie expiries stay in the future for HTTP clients.
    return FakeClock(utcnow().replace(microsecond=0))


@pytest.fixture
def database(tmp_path: Path) -> Iterator[Database]:
    db = Database(f"sqlite:///{tmp_path / 'audioshelf.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> ServerSettings:
    return ServerSettings(database_url=f"sqlite:///{tmp_path / 'audioshelf.db'}")


@pytest.fixture
def user_store(database: Database) -> SqlUserStore:
    return SqlUserStore(database)


@pytest.fixture
def session_store(database: Database) -> SessionStore:
    return SessionStore(database)


@pytest.fixture
def lifecycle(session_store, settings, clock) -> Iterator[SessionLifecycleManager]:
    manager = SessionLifecycleManager(session_store, settings, clock=clock)
    yield manager
    manager.shutdown()


@pytest.fixture
def catalog(database: Database) -> CatalogRepository:
    return CatalogRepository(database)


@pytest.fixture
def accountant(database, catalog, clock) -> ProgressAccountant:
    return ProgressAccountant(database, catalog, clock=clock)


@pytest.fixture
def audio_book(tmp_path: Path, catalog: CatalogRepository):
    """A two-file book; durations 100s and 50s, contents on disk."""

    media_dir = tmp_path / "media"
    media_dir.mkdir()
    first = media_dir / "01-intro.mp3"
    second = media_dir / "02-chapter.mp3"
    first.write_bytes(b"0123456789")
    second.write_bytes(bytes(range(256)) * 600)

    book = catalog.add_book(
        "The Long Walk",
        "Jane Doe",
        [NewFile(path=str(second), duration=50), NewFile(path=str(first), duration=100)],
    )
    files: List[FileRecord] = catalog.list_files(book.id)
    return book, files


@pytest.fixture
def app(settings, database, clock):
    application = create_app(settings, database=database, clock=clock)
    yield application
    application.state.services.sessions.shutdown()


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(user_store: SqlUserStore):
    def _make(name: str = "alice", password: str = "secret", admin: bool = False):
        return user_store.create_user(name, password, admin=admin)

    return _make


@pytest.fixture
def logged_in(client: TestClient, make_user):
    """Log ``alice`` in on the shared client and return her user record."""

    record = make_user()
    response = client.post("/api/login", json={"username": "alice", "password": "secret"})
    assert response.status_code == 200
    return record
