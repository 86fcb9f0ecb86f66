"""Fixtures for web API tests (F6)."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from preptrack.core import users
from preptrack.web.api import create_app

PASSWORD = "password123"


def bearer(token: str) -> dict[str, str]:
    """Authorization header for a session token."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client whose lifespan creates and seeds a database in tmp_path."""
    monkeypatch.chdir(tmp_path)
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Factory: sign up (and by default onboard) a student.

    Returns (uid, headers).
    """

    def _signup(name="Asha Rao", email="asha@example.com", onboard=True):
        response = client.post(
            "/api/auth/signup",
            json={"display_name": name, "email": email, "password": PASSWORD},
        )
        assert response.status_code == 201
        data = response.json()
        headers = bearer(data["token"])
        if onboard:
            onboarded = client.post(
                "/api/me/onboarding",
                json={"exam": "NEET", "class_level": "12", "target_year": date.today().year + 1},
                headers=headers,
            )
            assert onboarded.status_code == 200
        return data["user"]["uid"], headers

    return _signup


@pytest.fixture
def admin_headers(client):
    """Signed-in admin."""
    users.create_staff_user("Root Admin", "admin@example.com", "adminpass1", role="admin")
    response = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "adminpass1"}
    )
    assert response.status_code == 200
    return bearer(response.json()["token"])


@pytest.fixture
def premium_student(client, signup, admin_headers):
    """Onboarded student who redeemed a premium code. Returns (uid, headers)."""
    uid, headers = signup()
    code = client.post("/api/admin/codes", headers=admin_headers).json()["code"]
    response = client.post("/api/premium/redeem", json={"code": code}, headers=headers)
    assert response.status_code == 200
    return uid, headers
