"""Per-user library state: list membership, playback position, completion.

A library entry stores the current file and an absolute offset *inside* that
file. The book-wide completion fraction is derived on every read from the
ordered file list, because the catalog can change file durations at any time.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import case, or_, select, update

from ..database import Database, ensure_utc, storage_errors, utcnow
from ..database.models.catalog import BookModel, FileModel
from ..database.models.library import LibraryEntryModel
from ..errors import InvalidProgress, NotFound, StorageFailure
from .catalog import CatalogRepository, FileRecord, to_file_record

logger = logging.getLogger(__name__)


class LibraryList(str, Enum):
    LISTENING = "listening"
    WANT_TO_LISTEN = "want_to_listen"
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class LibraryEntry:
    id: int
    user_id: int
    book_id: int
    current_file_id: Optional[int]
    offset_seconds: float
    list: LibraryList
    created: datetime
    modified: datetime


@dataclass(frozen=True)
class LibraryItem:
    """One row of a user's library listing."""

    book_id: int
    title: str
    author: str
    list: LibraryList
    progress: float


def completion_fraction(
    files: Iterable[FileRecord],
    current_file_id: Optional[int],
    offset_seconds: float,
) -> float:
    """Return elapsed book time over total book time.

    Elapsed time is the duration of every file positioned before the current
    file plus the in-file offset. A book with no audio (zero total duration)
    reports ``0.0``.
    """

    ordered = list(files)
    total = sum(item.duration for item in ordered)
    if total <= 0:
        return 0.0

    current = next((item for item in ordered if item.id == current_file_id), None)
    elapsed = 0.0
    if current is not None:
        elapsed = sum(item.duration for item in ordered if item.position < current.position)
    return (elapsed + offset_seconds) / total


class ProgressAccountant:
    """Own the invariants of library entries for every user."""

    def __init__(
        self,
        database: Database,
        catalog: CatalogRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._database = database
        self._catalog = catalog
        self._clock = clock

    def set_list_and_position(
        self,
        user_id: int,
        book_id: int,
        list_name: LibraryList,
        file_id: Optional[int] = None,
        offset_seconds: Optional[float] = None,
    ) -> LibraryEntry:
        """Create or update the entry for ``(user_id, book_id)``.

        * New entry: ``file_id`` defaults to the first file of the book and
          ``offset_seconds`` to ``0``.
        * Existing entry with a different ``file_id``: the offset resets to
          ``0`` even when ``offset_seconds`` is supplied.
        * Otherwise a supplied ``offset_seconds`` replaces the stored one.

        The list is always overwritten and ``modified`` always moves to now.
        """

        list_name = LibraryList(list_name)
        _check_offset(offset_seconds)
        if self._catalog.get_book(book_id) is None:
            raise NotFound("book")
        if file_id is not None and self._catalog.get_file(book_id, file_id) is None:
            raise NotFound("file")

        now = self._clock()
        entry = LibraryEntryModel
        first_file = (
            select(FileModel.id)
            .where(FileModel.book_id == book_id)
            .order_by(FileModel.position.asc(), FileModel.id.asc())
            .limit(1)
            .scalar_subquery()
        )

        if file_id is not None:
            kept_offset = offset_seconds if offset_seconds is not None else entry.offset_seconds
            on_conflict_values = {
                "current_file_id": file_id,
                "offset_seconds": case(
                    (
                        or_(entry.current_file_id.is_(None), entry.current_file_id != file_id),
                        0.0,
                    ),
                    else_=kept_offset,
                ),
            }
        else:
            on_conflict_values = {
                "current_file_id": entry.current_file_id,
                "offset_seconds": (
                    offset_seconds if offset_seconds is not None else entry.offset_seconds
                ),
            }
        on_conflict_values.update(list=list_name.value, modified=now)

        insert = self._dialect_insert()
        statement = insert(entry).values(
            user_id=user_id,
            book_id=book_id,
            current_file_id=file_id if file_id is not None else first_file,
            offset_seconds=offset_seconds if offset_seconds is not None else 0.0,
            list=list_name.value,
            created=now,
            modified=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["user_id", "book_id"],
            set_=on_conflict_values,
        )

        with storage_errors("library upsert"):
            with self._database.session() as session:
                session.execute(statement)
                model = session.execute(
                    select(entry).where(entry.user_id == user_id, entry.book_id == book_id)
                ).scalar_one()
                result = _to_entry(model)

        logger.info(
            "Library entry updated",
            extra={
                "event": "library.entry.upserted",
                "user_id": user_id,
                "book_id": book_id,
                "status": result.list.value,
            },
        )
        return result

    def set_progress(
        self,
        user_id: int,
        book_id: int,
        file_id: int,
        offset_seconds: float,
    ) -> None:
        """Overwrite the current file and offset of an existing entry.

        This is the high-frequency playback path: one ``UPDATE``, no list
        handling and no file-change reset. Concurrent calls are last write wins.
        """

        _check_offset(offset_seconds)
        now = self._clock()
        statement = (
            update(LibraryEntryModel)
            .where(
                LibraryEntryModel.user_id == user_id,
                LibraryEntryModel.book_id == book_id,
            )
            .values(current_file_id=file_id, offset_seconds=offset_seconds, modified=now)
        )
        with storage_errors("library set_progress"):
            with self._database.session() as session:
                result = session.execute(statement)
                updated = result.rowcount
        if not updated:
            raise NotFound("library entry")

    def get_entry(self, user_id: int, book_id: int) -> Optional[LibraryEntry]:
        statement = select(LibraryEntryModel).where(
            LibraryEntryModel.user_id == user_id,
            LibraryEntryModel.book_id == book_id,
        )
        with storage_errors("library get_entry"):
            with self._database.session() as session:
                model = session.execute(statement).scalar_one_or_none()
                return _to_entry(model) if model is not None else None

    def read_library(self, user_id: int) -> List[LibraryItem]:
        """Return the user's books, most recently touched first."""

        entries_statement = (
            select(LibraryEntryModel, BookModel.title, BookModel.author)
            .join(BookModel, LibraryEntryModel.book_id == BookModel.id)
            .where(LibraryEntryModel.user_id == user_id)
            .order_by(LibraryEntryModel.modified.desc(), LibraryEntryModel.id.desc())
        )
        with storage_errors("library read"):
            with self._database.session() as session:
                rows = session.execute(entries_statement).all()
                book_ids = {row[0].book_id for row in rows}
                files_by_book: Dict[int, List[FileRecord]] = defaultdict(list)
                if book_ids:
                    files_statement = select(FileModel).where(FileModel.book_id.in_(book_ids))
                    for model in session.execute(files_statement).scalars():
                        files_by_book[model.book_id].append(to_file_record(model))

        return [
            LibraryItem(
                book_id=model.book_id,
                title=title,
                author=author,
                list=LibraryList(model.list),
                progress=completion_fraction(
                    files_by_book.get(model.book_id, []),
                    model.current_file_id,
                    float(model.offset_seconds or 0.0),
                ),
            )
            for model, title, author in rows
        ]

    def _dialect_insert(self):
        dialect = self._database.dialect_name
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            raise StorageFailure(f"Upsert is not supported on dialect '{dialect}'")
        return insert


def _check_offset(offset_seconds: Optional[float]) -> None:
    if offset_seconds is not None and offset_seconds < 0:
        raise InvalidProgress("offset_seconds must be zero or positive")


def _to_entry(model: LibraryEntryModel) -> LibraryEntry:
    return LibraryEntry(
        id=model.id,
        user_id=model.user_id,
        book_id=model.book_id,
        current_file_id=model.current_file_id,
        offset_seconds=float(model.offset_seconds or 0.0),
        list=LibraryList(model.list),
        created=ensure_utc(model.created),
        modified=ensure_utc(model.modified),
    )


__all__ = [
    "LibraryEntry",
    "LibraryItem",
    "LibraryList",
    "ProgressAccountant",
    "completion_fraction",
]
