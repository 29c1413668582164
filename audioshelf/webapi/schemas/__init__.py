"""Pydantic request and response models for the HTTP API."""

from .auth import LoginRequestPayload, SessionInfoPayload
from .common import CamelModel, DataResponse, ErrorResponse, SuccessResponse
from .library import (
    BookFilePayload,
    LibraryEntryPayload,
    LibraryItemPayload,
    LibraryUpdatePayload,
    ProgressUpdatePayload,
)
from .users import CreateUserPayload

__all__ = [
    "BookFilePayload",
    "CamelModel",
    "CreateUserPayload",
    "DataResponse",
    "ErrorResponse",
    "LibraryEntryPayload",
    "LibraryItemPayload",
    "LibraryUpdatePayload",
    "LoginRequestPayload",
    "ProgressUpdatePayload",
    "SessionInfoPayload",
    "SuccessResponse",
]
