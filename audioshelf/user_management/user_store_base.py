"""Base abstractions for user persistence layers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserRecord:
    """Representation of an account as seen by the auth layer.

    Attributes:
        id: Database identifier for the user.
        username: Unique, lower-cased login name.
        password_hash: The bcrypt hash used for credential validation.
        admin: Whether the account may use admin-only routes.
    """

    id: int
    username: str
    password_hash: str
    admin: bool = False


class UserStoreBase(ABC):
    """Abstract base class for user store implementations."""

    @abstractmethod
    def create_user(self, username: str, password: str, *, admin: bool = False) -> UserRecord:
        """Create a new user in the store."""

    @abstractmethod
    def get_user(self, username: str) -> Optional[UserRecord]:
        """Retrieve a user record by username."""

    @abstractmethod
    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Retrieve a user record by identifier."""

    @abstractmethod
    def verify_credentials(self, username: str, password: str) -> Optional[UserRecord]:
        """Return the matching record when ``password`` is valid for ``username``."""


def normalize_username(username: str) -> str:
    """Usernames are matched case-insensitively and without surrounding spaces."""

    return username.strip().lower()
