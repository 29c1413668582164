"""Schemas for user administration."""

from __future__ import annotations

from pydantic import BaseModel


class CreateUserPayload(BaseModel):
    name: str
    password: str
    admin: bool = False
