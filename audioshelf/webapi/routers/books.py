"""Audio delivery and per-book library endpoints."""

from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Header
from fastapi.responses import StreamingResponse

from ...errors import NotFound
from ...library import LibraryEntry
from ...logging_manager import log_context
from ...media import stream_file
from ..dependencies import CatalogDep, ProgressDep, SessionDep
from ..schemas import (
    BookFilePayload,
    DataResponse,
    LibraryEntryPayload,
    LibraryUpdatePayload,
    ProgressUpdatePayload,
    SuccessResponse,
)

router = APIRouter(prefix="/book", tags=["books"])

RangeHeader = Annotated[Optional[str], Header(alias="Range")]


@router.get("/{book_id}/audio/{file_id}", response_class=StreamingResponse)
def stream_book_audio(
    book_id: int,
    file_id: int,
    session: SessionDep,
    catalog: CatalogDep,
    range_header: RangeHeader = None,
) -> StreamingResponse:
    """Stream one audio file of a book, honouring a single ``Range`` header."""

    record = catalog.get_file(book_id, file_id)
    if record is None:
        raise NotFound("file")
    with log_context(user_id=session.user_id, book_id=book_id):
        return stream_file(record.path, range_header)


@router.get("/{book_id}/files", response_model=DataResponse[List[BookFilePayload]])
def list_book_files(
    book_id: int,
    _session: SessionDep,
    catalog: CatalogDep,
) -> DataResponse[List[BookFilePayload]]:
    if catalog.get_book(book_id) is None:
        raise NotFound("book")
    files = [
        BookFilePayload(
            id=item.id,
            book_id=item.book_id,
            name=item.name,
            position=item.position,
            duration=item.duration,
        )
        for item in catalog.list_files(book_id)
    ]
    return DataResponse[List[BookFilePayload]](data=files)


@router.get(
    "/{book_id}/library",
    response_model=DataResponse[Optional[LibraryEntryPayload]],
)
def get_library_entry(
    book_id: int,
    session: SessionDep,
    progress: ProgressDep,
) -> DataResponse[Optional[LibraryEntryPayload]]:
    """Return the caller's library entry for the book, or ``null``."""

    entry = progress.get_entry(session.user_id, book_id)
    payload = _entry_payload(entry) if entry is not None else None
    return DataResponse[Optional[LibraryEntryPayload]](data=payload)


@router.post("/{book_id}/library", response_model=SuccessResponse)
def update_library_entry(
    book_id: int,
    payload: LibraryUpdatePayload,
    session: SessionDep,
    progress: ProgressDep,
) -> SuccessResponse:
    """Put the book on one of the caller's lists, optionally moving the position."""

    with log_context(user_id=session.user_id, book_id=book_id):
        progress.set_list_and_position(
            session.user_id,
            book_id,
            payload.list,
            file_id=payload.file_id,
            offset_seconds=payload.progress,
        )
    return SuccessResponse(message="library-update--success")


@router.post("/{book_id}/progress", response_model=SuccessResponse)
def update_progress(
    book_id: int,
    payload: ProgressUpdatePayload,
    session: SessionDep,
    catalog: CatalogDep,
    progress: ProgressDep,
) -> SuccessResponse:
    if catalog.get_file(book_id, payload.file_id) is None:
        raise NotFound("file")
    progress.set_progress(session.user_id, book_id, payload.file_id, payload.progress)
    return SuccessResponse(message="progress-update--success")


def _entry_payload(entry: LibraryEntry) -> LibraryEntryPayload:
    return LibraryEntryPayload(
        id=entry.id,
        file_id=entry.current_file_id,
        progress=entry.offset_seconds,
        list=entry.list,
        created=entry.created,
        modified=entry.modified,
    )


__all__ = ["router"]
