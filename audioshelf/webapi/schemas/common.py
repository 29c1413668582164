"""Response envelopes shared by every route."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model that serializes to camelCase for frontend compatibility."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class SuccessResponse(BaseModel):
    success: bool = True
    message: str
    value: Optional[str] = None


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    """Body returned for every :class:`~audioshelf.errors.ApiError`."""

    success: bool = False
    error_code: str
    value: Optional[str] = None
