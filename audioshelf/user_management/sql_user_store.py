"""SQL-backed user store implementation."""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..database import Database, storage_errors
from ..database.models.user import UserModel
from .user_store_base import UserRecord, UserStoreBase, normalize_username

_log = logging.getLogger(__name__)


class SqlUserStore(UserStoreBase):
    """Persist users in the relational store using bcrypt password hashing."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def create_user(self, username: str, password: str, *, admin: bool = False) -> UserRecord:
        name = normalize_username(username)
        if not name or not password:
            raise ValueError("Username and password are required")
        password_hash = self._hash_password(password)
        with storage_errors("user create"):
            try:
                with self._database.session() as session:
                    model = UserModel(name=name, password_hash=password_hash, admin=admin)
                    session.add(model)
                    session.flush()
                    return self._model_to_record(model)
            except IntegrityError as exc:
                raise ValueError(f"User '{name}' already exists") from exc

    def get_user(self, username: str) -> Optional[UserRecord]:
        name = normalize_username(username)
        return self._fetch_one(select(UserModel).where(UserModel.name == name))

    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self._fetch_one(select(UserModel).where(UserModel.id == user_id))

    def verify_credentials(self, username: str, password: str) -> Optional[UserRecord]:
        record = self.get_user(username)
        if record is None:
            return None
        try:
            matches = bcrypt.checkpw(
                password.encode("utf-8"), record.password_hash.encode("utf-8")
            )
        except ValueError:
            # Malformed stored hash or an over-long password.
            _log.warning(
                "Password could not be checked against the stored hash",
                extra={"event": "users.password.check_failed", "user_id": record.id},
            )
            return None
        return record if matches else None

    def _fetch_one(self, statement) -> Optional[UserRecord]:
        with storage_errors("user load"):
            with self._database.session() as session:
                model = session.execute(statement).scalar_one_or_none()
                if model is None:
                    return None
                return self._model_to_record(model)

    @staticmethod
    def _hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def _model_to_record(model: UserModel) -> UserRecord:
        return UserRecord(
            id=model.id,
            username=model.name,
            password_hash=model.password_hash,
            admin=bool(model.admin),
        )
