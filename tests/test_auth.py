# tests/test_auth.py
from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.settings import settings
from app.security.jwt import decode_token

API = settings.API_V1_STR
PASSWORD = "secret-pass"  # mismo valor que TEST_PASSWORD en conftest


def test_login_and_me(client: TestClient, family_logbook):
    r = client.post(f"{API}/auth/login", json={"email": "parent@example.com", "password": PASSWORD})
    assert r.status_code == 200, r.text
    tokens = r.json()
    assert tokens["token_type"] == "bearer"
    assert decode_token(tokens["access_token"])["sub"] == str(family_logbook.parent_id)

    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200
    me = r.json()
    assert me["email"] == "parent@example.com"
    assert me["memberships"] == [
        {"logbook_id": family_logbook.id, "logbook_slug": "smith-family", "logbook_name": "Smith Family", "role": "parent"},
    ]


def test_login_wrong_password(client: TestClient, family_logbook):
    r = client.post(f"{API}/auth/login", json={"email": "parent@example.com", "password": "nope"})
    assert r.status_code == 401


def test_refresh_issues_new_tokens(client: TestClient, family_logbook):
    tokens = client.post(f"{API}/auth/login", json={"email": "friend@example.com", "password": PASSWORD}).json()
    r = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert decode_token(r.json()["access_token"])["type"] == "access"

    # un access token no sirve como refresh
    r = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert r.status_code == 401


def test_me_requires_token(client: TestClient):
    assert client.get(f"{API}/auth/me").status_code == 401


def test_refresh_token_is_not_an_access_token(client: TestClient, family_logbook):
    tokens = client.post(f"{API}/auth/login", json={"email": "parent@example.com", "password": PASSWORD}).json()
    r = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401
