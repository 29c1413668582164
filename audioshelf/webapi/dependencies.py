"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request

from ..config import ServerSettings
from ..database import Database, utcnow
from ..errors import NotAdmin, NotLoggedIn
from ..library import CatalogRepository, ProgressAccountant
from ..user_management import (
    AuthService,
    SessionContext,
    SessionLifecycleManager,
    SessionStore,
    SqlUserStore,
)
from .middleware import SESSION_STATE_KEY


@dataclass(frozen=True)
class AppServices:
    """Service graph built once per application and stored on ``app.state``."""

    settings: ServerSettings
    database: Database
    users: SqlUserStore
    sessions: SessionLifecycleManager
    auth: AuthService
    catalog: CatalogRepository
    progress: ProgressAccountant


def build_services(
    settings: ServerSettings,
    database: Database,
    *,
    clock: Callable[[], datetime] = utcnow,
    renewal_executor: Optional[ThreadPoolExecutor] = None,
) -> AppServices:
    users = SqlUserStore(database)
    sessions = SessionLifecycleManager(
        SessionStore(database),
        settings,
        clock=clock,
        renewal_executor=renewal_executor,
    )
    catalog = CatalogRepository(database)
    return AppServices(
        settings=settings,
        database=database,
        users=users,
        sessions=sessions,
        auth=AuthService(users, sessions),
        catalog=catalog,
        progress=ProgressAccountant(database, catalog, clock=clock),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


ServicesDep = Annotated[AppServices, Depends(get_services)]


def get_settings(services: ServicesDep) -> ServerSettings:
    return services.settings


def get_auth_service(services: ServicesDep) -> AuthService:
    return services.auth


def get_user_store(services: ServicesDep) -> SqlUserStore:
    return services.users


def get_catalog(services: ServicesDep) -> CatalogRepository:
    return services.catalog


def get_progress_accountant(services: ServicesDep) -> ProgressAccountant:
    return services.progress


def get_optional_session(request: Request) -> Optional[SessionContext]:
    """Return the session resolved by :class:`SessionMiddleware`, if any."""

    return request.scope.get("state", {}).get(SESSION_STATE_KEY)


def require_session(
    session: Annotated[Optional[SessionContext], Depends(get_optional_session)],
) -> SessionContext:
    if session is None:
        raise NotLoggedIn()
    return session


def require_admin(
    session: Annotated[SessionContext, Depends(require_session)],
) -> SessionContext:
    if not session.admin:
        raise NotAdmin()
    return session


SettingsDep = Annotated[ServerSettings, Depends(get_settings)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserStoreDep = Annotated[SqlUserStore, Depends(get_user_store)]
CatalogDep = Annotated[CatalogRepository, Depends(get_catalog)]
ProgressDep = Annotated[ProgressAccountant, Depends(get_progress_accountant)]
OptionalSessionDep = Annotated[Optional[SessionContext], Depends(get_optional_session)]
SessionDep = Annotated[SessionContext, Depends(require_session)]
AdminSessionDep = Annotated[SessionContext, Depends(require_admin)]


__all__ = [
    "AdminSessionDep",
    "AppServices",
    "AuthServiceDep",
    "CatalogDep",
    "OptionalSessionDep",
    "ProgressDep",
    "SessionDep",
    "SettingsDep",
    "UserStoreDep",
    "build_services",
    "get_auth_service",
    "get_catalog",
    "get_optional_session",
    "get_progress_accountant",
    "get_services",
    "get_settings",
    "get_user_store",
    "require_admin",
    "require_session",
]
