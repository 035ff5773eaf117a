# tests/test_health.py
from fastapi.testclient import TestClient

from app.core.settings import settings


def test_ping(client: TestClient):
    r = client.get(f"{settings.API_V1_STR}/health/ping")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_openapi_has_bearer_scheme(client: TestClient):
    schema = client.get("/openapi.json").json()
    assert schema["components"]["securitySchemes"]["bearerAuth"]["scheme"] == "bearer"
    assert f"{settings.API_V1_STR}/logbooks/{{slug}}/pages/{{page_type}}/sections" in schema["paths"]
