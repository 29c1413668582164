"""Schemas for library membership and playback progress."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ...library import LibraryList
from .common import CamelModel


class LibraryUpdatePayload(CamelModel):
    list: LibraryList
    file_id: Optional[int] = None
    progress: Optional[float] = Field(default=None, ge=0)


class ProgressUpdatePayload(CamelModel):
    file_id: int
    progress: float = Field(ge=0)


class LibraryItemPayload(CamelModel):
    """One book in a user's library; ``progress`` is the completion fraction."""

    id: int
    title: str
    author: str
    list: LibraryList
    progress: float


class LibraryEntryPayload(CamelModel):
    """Raw entry; ``progress`` is the offset in seconds inside ``file_id``."""

    id: int
    file_id: Optional[int] = None
    progress: float
    list: LibraryList
    created: datetime
    modified: datetime


class BookFilePayload(CamelModel):
    id: int
    book_id: int
    name: str
    position: int
    duration: float
