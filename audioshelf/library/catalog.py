"""Read access to books and their ordered audio files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from sqlalchemy import select

from ..database import Database, storage_errors
from ..database.models.catalog import BookModel, FileModel


@dataclass(frozen=True)
class BookRecord:
    id: int
    title: str
    author: str


@dataclass(frozen=True)
class FileRecord:
    """An audio file of a book; ``position`` orders playback from 1."""

    id: int
    book_id: int
    path: str
    name: str
    position: int
    duration: float


@dataclass(frozen=True)
class NewFile:
    """Input for :meth:`CatalogRepository.add_book`; ``duration`` comes from probing."""

    path: str
    duration: float
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or Path(self.path).name


class CatalogRepository:
    """Catalog queries needed by streaming and progress accounting."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def add_book(self, title: str, author: str, files: Sequence[NewFile]) -> BookRecord:
        """Insert a book and its files, numbering positions by file name."""

        ordered = sorted(files, key=lambda item: item.display_name)
        with storage_errors("catalog add_book"):
            with self._database.session() as session:
                book = BookModel(title=title.strip(), author=author.strip())
                book.files = [
                    FileModel(
                        path=item.path,
                        name=item.display_name,
                        position=index,
                        duration=max(float(item.duration), 0.0),
                    )
                    for index, item in enumerate(ordered, start=1)
                ]
                session.add(book)
                session.flush()
                return BookRecord(id=book.id, title=book.title, author=book.author)

    def get_book(self, book_id: int) -> Optional[BookRecord]:
        with storage_errors("catalog get_book"):
            with self._database.session() as session:
                book = session.get(BookModel, book_id)
                if book is None:
                    return None
                return BookRecord(id=book.id, title=book.title, author=book.author)

    def list_files(self, book_id: int) -> List[FileRecord]:
        statement = (
            select(FileModel)
            .where(FileModel.book_id == book_id)
            .order_by(FileModel.position.asc(), FileModel.id.asc())
        )
        with storage_errors("catalog list_files"):
            with self._database.session() as session:
                return [to_file_record(model) for model in session.execute(statement).scalars()]

    def get_file(self, book_id: int, file_id: int) -> Optional[FileRecord]:
        statement = select(FileModel).where(
            FileModel.id == file_id, FileModel.book_id == book_id
        )
        with storage_errors("catalog get_file"):
            with self._database.session() as session:
                model = session.execute(statement).scalar_one_or_none()
                return to_file_record(model) if model is not None else None


def to_file_record(model: FileModel) -> FileRecord:
    return FileRecord(
        id=model.id,
        book_id=model.book_id,
        path=model.path,
        name=model.name,
        position=model.position,
        duration=float(model.duration or 0.0),
    )
