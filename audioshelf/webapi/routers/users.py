"""User library listing and user administration."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, status

from ...errors import DataMissing, NotAdmin, UserExists
from ...user_management import normalize_username
from ..dependencies import AdminSessionDep, ProgressDep, SessionDep, UserStoreDep
from ..schemas import CreateUserPayload, LibraryItemPayload, SuccessResponse

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/{user_id}/library", response_model=List[LibraryItemPayload])
def read_user_library(
    user_id: int,
    session: SessionDep,
    progress: ProgressDep,
) -> List[LibraryItemPayload]:
    """List a user's books, most recently touched first.

    Users may read their own library; admins may read anyone's.
    """

    if session.user_id != user_id and not session.admin:
        raise NotAdmin()
    return [
        LibraryItemPayload(
            id=item.book_id,
            title=item.title,
            author=item.author,
            list=item.list,
            progress=item.progress,
        )
        for item in progress.read_library(user_id)
    ]


@router.post("", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: CreateUserPayload,
    _admin: AdminSessionDep,
    users: UserStoreDep,
) -> SuccessResponse:
    name = normalize_username(payload.name)
    if not name or not payload.password:
        raise DataMissing()
    if users.get_user(name) is not None:
        raise UserExists(name)
    try:
        users.create_user(name, payload.password, admin=payload.admin)
    except ValueError as exc:
        if users.get_user(name) is not None:
            raise UserExists(name) from exc
        raise DataMissing(str(exc)) from exc
    return SuccessResponse(message="user-create--success")


__all__ = ["router"]
