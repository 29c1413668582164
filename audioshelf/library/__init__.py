"""Catalog reads and per-user library/progress accounting."""

from .catalog import BookRecord, CatalogRepository, FileRecord, NewFile
from .progress import (
    LibraryEntry,
    LibraryItem,
    LibraryList,
    ProgressAccountant,
    completion_fraction,
)

__all__ = [
    "BookRecord",
    "CatalogRepository",
    "FileRecord",
    "LibraryEntry",
    "LibraryItem",
    "LibraryList",
    "NewFile",
    "ProgressAccountant",
    "completion_fraction",
]
