# tests/test_rate_limit.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.settings import settings
from app.middleware.ratelimit import RateLimitMiddleware
from app.security.jwt import create_access_token

WRITE_URL = f"{settings.API_V1_STR}/logbooks/smith-family/pages/home/content"


def _app(limit: int | None = None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit_per_min=limit)

    @app.patch(WRITE_URL)
    def _write():
        return {"success": True}

    @app.get(WRITE_URL)
    def _read():
        return {"success": True}

    return app


def test_disabled_by_default(monkeypatch):
    monkeypatch.setattr(settings, "RATELIMIT_ENABLED", False)
    client = TestClient(_app(limit=1))
    assert [client.patch(WRITE_URL).status_code for _ in range(3)] == [200, 200, 200]


def test_writes_are_limited_per_user(monkeypatch):
    monkeypatch.setattr(settings, "RATELIMIT_ENABLED", True)
    client = TestClient(_app(limit=2))
    alice = {"Authorization": f"Bearer {create_access_token(1)}"}
    bob = {"Authorization": f"Bearer {create_access_token(2)}"}

    assert client.patch(WRITE_URL, headers=alice).status_code == 200
    assert client.patch(WRITE_URL, headers=alice).status_code == 200
    r = client.patch(WRITE_URL, headers=alice)
    assert r.status_code == 429
    assert r.json() == {"success": False, "error": "Rate limit exceeded", "code": "rate_limited", "limit_per_min": 2}
    assert r.headers["Retry-After"] == "60"

    # otro usuario tiene su propia ventana
    assert client.patch(WRITE_URL, headers=bob).status_code == 200


def test_reads_are_not_limited(monkeypatch):
    monkeypatch.setattr(settings, "RATELIMIT_ENABLED", True)
    client = TestClient(_app(limit=1))
    assert [client.get(WRITE_URL).status_code for _ in range(3)] == [200, 200, 200]


def test_limit_comes_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "RATELIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATELIMIT_WRITE_PER_MIN", 1)
    client = TestClient(_app())
    assert client.patch(WRITE_URL).status_code == 200
    assert client.patch(WRITE_URL).status_code == 429
