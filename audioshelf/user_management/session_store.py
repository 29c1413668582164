"""Data access for session rows. Holds no expiry or renewal policy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update

from ..database import Database, ensure_utc, storage_errors
from ..database.models.user import SessionModel, UserModel


@dataclass(frozen=True)
class SessionRecord:
    """A session row joined with the owning user's current name and role."""

    token: str
    user_id: int
    username: str
    admin: bool
    last_accessed: datetime


class SessionStore:
    """Manage session rows in the relational store."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def create(self, token: str, user_id: int, now: datetime) -> None:
        with storage_errors("session create"):
            with self._database.session() as session:
                session.add(
                    SessionModel(
                        token=token,
                        user_id=user_id,
                        created=now,
                        last_accessed=now,
                    )
                )

    def get(self, token: str) -> Optional[SessionRecord]:
        statement = (
            select(
                SessionModel.token,
                SessionModel.user_id,
                SessionModel.last_accessed,
                UserModel.name,
                UserModel.admin,
            )
            .join(UserModel, SessionModel.user_id == UserModel.id)
            .where(SessionModel.token == token)
        )
        with storage_errors("session get"):
            with self._database.session() as session:
                row = session.execute(statement).one_or_none()
        if row is None:
            return None
        return SessionRecord(
            token=row.token,
            user_id=row.user_id,
            username=row.name,
            admin=bool(row.admin),
            last_accessed=ensure_utc(row.last_accessed),
        )

    def touch(self, token: str, now: datetime) -> bool:
        """Set ``last_accessed`` to ``now``; return whether a row was updated."""
        with storage_errors("session touch"):
            with self._database.session() as session:
                result = session.execute(
                    update(SessionModel)
                    .where(SessionModel.token == token)
                    .values(last_accessed=now)
                )
                return bool(result.rowcount)

    def delete(self, token: str) -> bool:
        with storage_errors("session delete"):
            with self._database.session() as session:
                result = session.execute(
                    delete(SessionModel).where(SessionModel.token == token)
                )
                return bool(result.rowcount)

    def delete_for_user(self, user_id: int) -> int:
        with storage_errors("session delete_for_user"):
            with self._database.session() as session:
                result = session.execute(
                    delete(SessionModel).where(SessionModel.user_id == user_id)
                )
                return int(result.rowcount or 0)
