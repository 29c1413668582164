"""Authentication endpoints for the FastAPI backend."""

from __future__ import annotations

from fastapi import APIRouter, Response

from ..errors import AlreadyLoggedIn
from .cookies import clear_session_cookie, set_session_cookie
from .dependencies import AuthServiceDep, OptionalSessionDep, SessionDep, SettingsDep
from .schemas import DataResponse, LoginRequestPayload, SessionInfoPayload, SuccessResponse

router = APIRouter()


@router.post("/login", response_model=SuccessResponse)
def login(
    payload: LoginRequestPayload,
    response: Response,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
    current: OptionalSessionDep,
) -> SuccessResponse:
    """Check credentials and issue the session cookie."""

    if current is not None:
        raise AlreadyLoggedIn()

    issued, _user = auth_service.login(payload.username, payload.password)
    set_session_cookie(response, settings, issued.token, issued.cookie_expires)
    return SuccessResponse(message="login--success")


@router.delete("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    session: SessionDep,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
) -> SuccessResponse:
    auth_service.logout(session.token)
    clear_session_cookie(response, settings)
    return SuccessResponse(message="logout--success")


@router.get("/session/info", response_model=DataResponse[SessionInfoPayload])
def session_info(session: SessionDep) -> DataResponse[SessionInfoPayload]:
    """Describe the session attached to the current request."""

    return DataResponse[SessionInfoPayload](
        data=SessionInfoPayload(
            user_id=session.user_id,
            username=session.username,
            admin=session.admin,
            last_accessed=session.last_accessed,
        )
    )


__all__ = ["router"]
