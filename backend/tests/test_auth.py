"""
Tests for authentication endpoints and session handling.
"""

from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy import select, func, update

from thesisflow.core.database import async_session_maker
from thesisflow.models import UserSession
from factories import PASSWORD, register


async def _expire_sessions() -> None:
    async with async_session_maker() as db:
        await db.execute(
            update(UserSession).values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))
        )
        await db.commit()


async def _session_count() -> int:
    async with async_session_maker() as db:
        return await db.scalar(select(func.count()).select_from(UserSession))


def test_register_user(client: TestClient):
    response = register(client)

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "student@example.com"
    assert data["first_name"] == "Ada"
    assert data["onboarding_completed"] is False
    assert "hashed_password" not in data
    assert "session" in client.cookies


def test_register_duplicate_email(client: TestClient):
    register(client)
    response = register(client)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_short_password_reports_field_errors(client: TestClient):
    response = client.post("/api/auth/register", json={"email": "a@example.com", "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid data"
    assert [error["field"] for error in body["errors"]] == ["password"]


def test_login(client: TestClient):
    register(client)
    client.cookies.clear()

    response = client.post("/api/auth/login", data={"username": "student@example.com", "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["email"] == "student@example.com"
    assert client.get("/api/auth/me").status_code == 200


def test_login_invalid_credentials(client: TestClient):
    register(client)
    client.cookies.clear()

    response = client.post("/api/auth/login", data={"username": "student@example.com", "password": "wrong-pass"})

    assert response.status_code == 401


def test_me_requires_session(client: TestClient):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_protected_routes_reject_garbage_cookie(client: TestClient):
    client.cookies.set("session", "not-a-token")

    assert client.get("/api/chapters").status_code == 401
    assert client.get("/api/dashboard").status_code == 401


def test_logout_invalidates_server_side_session(auth_client: TestClient):
    old_cookie = auth_client.cookies.get("session")

    response = auth_client.post("/api/auth/logout")
    assert response.status_code == 200

    # Replaying the old cookie must not work once the session row is gone
    auth_client.cookies.set("session", old_cookie)
    assert auth_client.get("/api/auth/me").status_code == 401


def test_cookie_write_from_foreign_origin_is_rejected(auth_client: TestClient):
    response = auth_client.post(
        "/api/chapters",
        json={"title": "Intro"},
        headers={"Origin": "https://evil.example.com"},
    )

    assert response.status_code == 403
    assert response.json()["message"].startswith("CSRF validation failed")


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_expired_session_is_rejected_and_removed(auth_client: TestClient):
    assert auth_client.portal.call(_session_count) == 1
    auth_client.portal.call(_expire_sessions)

    response = auth_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"
    assert auth_client.portal.call(_session_count) == 0
