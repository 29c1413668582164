from __future__ import annotations

import pytest

from audioshelf.errors import InvalidCredentials
from audioshelf.user_management import AuthService

pytestmark = pytest.mark.auth


@pytest.fixture
def auth_service(user_store, lifecycle) -> AuthService:
    return AuthService(user_store, lifecycle)


def test_login_normalises_username(auth_service, make_user, lifecycle):
    make_user("alice", "secret")

    issued, record = auth_service.login("  Alice ", "secret")
    token = issued.token

    assert record.username == "alice"
    resolved = lifecycle.resolve(token)
    assert resolved is not None
    assert resolved.context.user_id == record.id


@pytest.mark.parametrize(
    "username, password",
    [("alice", "wrong"), ("nobody", "secret"), ("", "secret"), ("alice", "")],
)
def test_login_rejects_bad_credentials(auth_service, make_user, username, password):
    make_user("alice", "secret")

    with pytest.raises(InvalidCredentials) as excinfo:
        auth_service.login(username, password)

    assert excinfo.value.status_code == 400
    assert excinfo.value.error_code == "server-authentication--invalid-credentials"


def test_logout_ends_session(auth_service, make_user, lifecycle):
    make_user("alice", "secret")
    issued, _ = auth_service.login("alice", "secret")
    token = issued.token

    assert auth_service.logout(token) is True
    assert lifecycle.resolve(token) is None
    assert auth_service.logout(token) is False
