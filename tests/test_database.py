from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from audioshelf.database import (
    configure_database,
    dispose_engine,
    get_database,
    get_db_session,
    storage_errors,
)
from audioshelf.database.models import UserModel
from audioshelf.errors import StorageFailure


@pytest.fixture
def process_database(tmp_path):
    database = configure_database(f"sqlite:///{tmp_path / 'global.db'}")
    yield database
    dispose_engine()


def test_get_db_session_commits_on_success(process_database):
    assert get_database() is process_database

    with get_db_session() as session:
        session.add(UserModel(name="dana", password_hash="x"))

    with get_db_session() as session:
        assert session.query(UserModel).count() == 1


def test_get_db_session_rolls_back_on_error(process_database):
    with pytest.raises(RuntimeError):
        with get_db_session() as session:
            session.add(UserModel(name="dana", password_hash="x"))
            session.flush()
            raise RuntimeError("boom")

    with get_db_session() as session:
        assert session.query(UserModel).count() == 0


def test_foreign_keys_are_enforced_on_sqlite(process_database):
    with get_db_session() as session:
        assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_storage_errors_wrap_driver_failures(process_database):
    with pytest.raises(StorageFailure) as excinfo:
        with storage_errors("probe"):
            with get_db_session() as session:
                session.execute(text("SELECT * FROM missing_table"))

    assert excinfo.value.value == "probe failed"
    assert isinstance(excinfo.value.__cause__, OperationalError)
