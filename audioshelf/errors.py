"""Error taxonomy surfaced at the HTTP boundary.

Every error carries a fixed HTTP status and a stable, machine-readable
``error_code`` so clients never need to parse messages or stack traces.
"""

from __future__ import annotations

from typing import Optional


class ApiError(RuntimeError):
    """Base class for errors that map onto a fixed HTTP response."""

    status_code: int = 500
    error_code: str = "server-internal-error"

    def __init__(self, value: Optional[str] = None) -> None:
        super().__init__(value or self.error_code)
        self.value = value


class NotLoggedIn(ApiError):
    """Raised when a route requires a session and none was resolved."""

    status_code = 401
    error_code = "server-authentication--not-logged-in"


class NotAdmin(ApiError):
    """Raised when an authenticated, non-admin session hits an admin-only route."""

    status_code = 403
    error_code = "server-authentication--not-admin"


class InvalidCredentials(ApiError):
    status_code = 400
    error_code = "server-authentication--invalid-credentials"


class AlreadyLoggedIn(ApiError):
    status_code = 400
    error_code = "server-authentication--already-logged-in"


class NotFound(ApiError):
    """Raised when a file path, book, file record or library entry is missing."""

    status_code = 404
    error_code = "server-not-found"


class DataMissing(ApiError):
    status_code = 400
    error_code = "server-data--missing"


class InvalidProgress(ApiError):
    """Raised when a playback offset is negative."""

    status_code = 400
    error_code = "server-library--invalid-progress"


class UserExists(ApiError):
    status_code = 409
    error_code = "server-user--already-exists"


class StorageFailure(ApiError):
    """Raised when the database is unreachable or a write fails."""

    status_code = 500
    error_code = "server-storage--failure"


__all__ = [
    "AlreadyLoggedIn",
    "ApiError",
    "DataMissing",
    "InvalidCredentials",
    "InvalidProgress",
    "NotAdmin",
    "NotFound",
    "NotLoggedIn",
    "StorageFailure",
    "UserExists",
]
