"""Schemas for authentication/session endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .common import CamelModel


class LoginRequestPayload(BaseModel):
    """Incoming payload for the login endpoint."""

    username: str
    password: str


class SessionInfoPayload(CamelModel):
    """Description of the session attached to the current request."""

    user_id: int
    username: str
    admin: bool
    last_accessed: datetime
