"""SQLAlchemy models; importing this package registers every table on Base.metadata."""

from .user import UserModel, SessionModel
from .catalog import BookModel, FileModel
from .library import LibraryEntryModel

__all__ = [
    "UserModel",
    "SessionModel",
    "BookModel",
    "FileModel",
    "LibraryEntryModel",
]
