from __future__ import annotations

import pytest

pytestmark = [pytest.mark.webapi, pytest.mark.auth]


def test_healthcheck(client):
    response = client.get("/_health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_login_sets_session_cookie(client, make_user):
    make_user()

    response = client.post("/api/login", json={"username": " ALICE ", "password": "secret"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("audioshelf_session=")
    assert "HttpOnly" in cookie
    assert "Path=/" in cookie
    assert "SameSite=lax" in cookie
    assert "Secure" not in cookie
    assert "expires=" in cookie.lower()


def test_login_rejects_wrong_password(client, make_user):
    make_user()

    response = client.post("/api/login", json={"username": "alice", "password": "nope"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error_code": "server-authentication--invalid-credentials",
        "value": None,
    }
    assert "set-cookie" not in response.headers


def test_login_twice_is_rejected(client, logged_in):
    response = client.post("/api/login", json={"username": "alice", "password": "secret"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "server-authentication--already-logged-in"


def test_login_missing_fields_is_validation_error(client):
    response = client.post("/api/login", json={"username": "alice"})

    assert response.status_code == 422


def test_session_info(client, logged_in):
    response = client.get("/api/session/info")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["userId"] == logged_in.id
    assert data["username"] == "alice"
    assert data["admin"] is False
    assert "lastAccessed" in data


def test_session_info_requires_login(client):
    response = client.get("/api/session/info")

    assert response.status_code == 401
    assert response.json()["error_code"] == "server-authentication--not-logged-in"


def test_logout_clears_cookie_and_session(client, logged_in):
    response = client.delete("/api/logout")

    assert response.status_code == 200
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("audioshelf_session=")
    assert "Max-Age=0" in cookie

    assert client.get("/api/session/info").status_code == 401


def test_logout_requires_login(client):
    assert client.delete("/api/logout").status_code == 401
