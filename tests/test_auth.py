from datetime import timedelta

import pytest
from jose import jwt

import auth

EMAIL = "admin@pesantren.sch.id"
PASSWORD = "bismillah-123"


@pytest.fixture
def seeded(db, monkeypatch):
    monkeypatch.setenv("ADMIN_DEFAULT_EMAIL", EMAIL.upper())
    monkeypatch.setenv("ADMIN_DEFAULT_PASSWORD", PASSWORD)
    auth.ensure_default_admin(db)
    return db


def test_seed_creates_one_admin(seeded):
    auth.ensure_default_admin(seeded)
    users = list(seeded["admin_user"].find({}))
    assert len(users) == 1
    assert users[0]["email"] == EMAIL
    assert users[0]["password_hash"] != PASSWORD


def test_login_sets_session_cookie(anon_client, seeded):
    response = anon_client.post("/api/admin/login", json={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["email"] == EMAIL
    assert body["data"]["role"] == "admin"

    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{auth.COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "Max-Age=28800" in cookie

    me = anon_client.get("/api/admin/me")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == EMAIL


def test_bearer_token_is_accepted(anon_client, seeded):
    token = anon_client.post("/api/admin/login", json={"email": EMAIL, "password": PASSWORD}).json()["access_token"]
    anon_client.cookies.clear()
    response = anon_client.get("/api/admin/summary", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_wrong_password(anon_client, seeded):
    response = anon_client.post("/api/admin/login", json={"email": EMAIL, "password": "salah"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


def test_logout_clears_cookie(anon_client, seeded):
    anon_client.post("/api/admin/login", json={"email": EMAIL, "password": PASSWORD})
    anon_client.post("/api/admin/logout")
    assert anon_client.get("/api/admin/me").status_code == 401


def test_tampered_or_expired_token_is_rejected(anon_client):
    valid = auth.create_access_token({"id": "x", "email": EMAIL, "role": "admin"})
    assert auth.decode_token(valid)["email"] == EMAIL

    expired = auth.create_access_token({"id": "x", "email": EMAIL, "role": "admin"}, timedelta(seconds=-5))
    assert auth.decode_token(expired) is None
    forged = jwt.encode({"id": "x", "email": EMAIL, "role": "admin"}, "not-the-secret", algorithm="HS256")
    assert auth.decode_token(forged) is None

    response = anon_client.get("/api/admin/news", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["error"] == "Could not validate credentials"


def test_token_without_role_is_rejected():
    token = auth.create_access_token({"id": "x", "email": EMAIL})
    assert auth.decode_token(token) is None


def test_admin_routes_need_session(anon_client):
    for path in ("/api/admin/news", "/api/admin/donations", "/api/admin/contacts", "/api/admin/gallery"):
        assert anon_client.get(path).status_code == 401
