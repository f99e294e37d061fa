from datetime import timedelta

from nfc_attendance.utils.auth import create_session_token

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME


def test_login_with_bad_password(client):
    response = client.post("/login", json={"username": ADMIN_USERNAME, "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_with_missing_fields(client):
    assert client.post("/login", json={}).status_code == 401


def test_login_sets_session_cookie(client, settings):
    response = client.post("/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "Max-Age=28800" in cookie
    assert client.get("/devices").status_code == 200


def test_logout_clears_session(admin_client):
    response = admin_client.post("/logout")

    assert response.status_code == 200
    assert admin_client.get("/devices").status_code == 401


def test_tampered_cookie_is_rejected(client, settings):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "not.a.jwt")

    assert client.get("/devices").status_code == 401


def test_cookie_signed_with_other_secret_is_rejected(client, settings):
    other = type(settings)()
    other.SECRET_KEY = "another-secret"
    other.ALGORITHM = settings.ALGORITHM
    client.cookies.set(settings.SESSION_COOKIE_NAME, create_session_token(ADMIN_USERNAME, other))

    assert client.get("/devices").status_code == 401


def test_expired_cookie_is_rejected(client, settings):
    token = create_session_token(ADMIN_USERNAME, settings, expires_delta=timedelta(seconds=-5))
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)

    assert client.get("/devices").status_code == 401


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["mode"] == "canteen"
