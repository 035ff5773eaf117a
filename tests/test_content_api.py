# tests/test_content_api.py
from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.settings import settings

BASE = f"{settings.API_V1_STR}/logbooks/smith-family/pages"


def test_get_sections_as_friend(client: TestClient, family_logbook, headers_for):
    r = client.get(f"{BASE}/home/sections", headers=headers_for(family_logbook.friend_id))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["error"] is None
    assert body["sections"]["hero"]["title"] == "Welcome to Our Journey"


def test_missing_token_is_401_with_result_body(client: TestClient, family_logbook):
    r = client.get(f"{BASE}/home/sections")
    assert r.status_code == 401
    assert r.json()["error"] == "Authentication required"


def test_outsider_gets_404(client: TestClient, family_logbook, headers_for):
    r = client.get(f"{BASE}/home/content", headers=headers_for(family_logbook.outsider_id))
    assert r.status_code == 404
    assert r.json() == {
        "success": False,
        "data": None,
        "error": "Logbook not found or access denied",
        "code": "not_found",
    }


def test_patch_section_then_read(client: TestClient, family_logbook, headers_for):
    r = client.patch(
        f"{BASE}/home/sections/hero",
        json={"updates": {"title": "Our Story"}},
        headers=headers_for(family_logbook.parent_id),
    )
    assert r.status_code == 200, r.text
    assert r.json()["success"] is True
    assert r.json()["data"]["hero"]["title"] == "Our Story"

    r = client.get(f"{BASE}/home/content?raw=true", headers=headers_for(family_logbook.family_id))
    assert r.json()["data"] == {"hero": {"title": "Our Story"}}


def test_family_cannot_patch_section(client: TestClient, family_logbook, headers_for):
    r = client.patch(
        f"{BASE}/home/sections/hero",
        json={"updates": {"title": "x"}},
        headers=headers_for(family_logbook.family_id),
    )
    assert r.status_code == 403
    assert r.json()["error"] == "Only parents can edit page content"


def test_visibility_and_reset_routes(client: TestClient, family_logbook, headers_for):
    h = headers_for(family_logbook.parent_id)
    r = client.put(f"{BASE}/home/sections/hero/visibility", json={"visible": False}, headers=h)
    assert r.status_code == 200
    assert r.json()["data"]["hero"]["visible"] is False

    r = client.delete(f"{BASE}/home/sections/hero", headers=h)
    assert r.status_code == 200
    assert r.json()["data"]["hero"]["visible"] is True


def test_visibility_body_must_be_boolean(client: TestClient, family_logbook, headers_for):
    r = client.put(
        f"{BASE}/home/sections/hero/visibility",
        json={"visible": "maybe"},
        headers=headers_for(family_logbook.parent_id),
    )
    assert r.status_code == 422


def test_visibility_body_is_not_coerced(client: TestClient, family_logbook, headers_for):
    h = headers_for(family_logbook.parent_id)
    for raw in ("no", "yes", 0, 1):
        r = client.put(f"{BASE}/home/sections/hero/visibility", json={"visible": raw}, headers=h)
        assert r.status_code == 422, raw

    r = client.get(f"{BASE}/home/content?raw=true", headers=h)
    assert r.json()["data"] == {}


def test_dot_path_and_batch_routes(client: TestClient, family_logbook, headers_for):
    h = headers_for(family_logbook.parent_id)
    r = client.patch(f"{BASE}/faq/content", json={"path": "faq.cards.0.question", "value": "Due date?"}, headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["faq"]["cards"][0]["question"] == "Due date?"

    r = client.patch(
        f"{BASE}/faq/content/batch",
        json={"updates": {"intro.title": "Hello", "general.visible": True}},
        headers=h,
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["intro"]["title"] == "Hello"
    assert data["general"]["visible"] is True
    assert data["faq"]["cards"][0]["question"] == "Due date?"


def test_bad_path_is_422(client: TestClient, family_logbook, headers_for):
    r = client.patch(
        f"{BASE}/home/content",
        json={"path": "footer.title", "value": "x"},
        headers=headers_for(family_logbook.parent_id),
    )
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


def test_unknown_page_type_is_422(client: TestClient, family_logbook, headers_for):
    r = client.get(f"{BASE}/blog/sections", headers=headers_for(family_logbook.parent_id))
    assert r.status_code == 422


def test_upload_route(client: TestClient, family_logbook, headers_for):
    r = client.post(
        f"{BASE}/home/content/upload",
        data={"path": "hero.imageUrl"},
        files={"file": ("baby.png", b"\x89PNG data", "image/png")},
        headers=headers_for(family_logbook.parent_id),
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["url"].startswith("data:image/png;base64,")
    assert data["sections"]["hero"]["imageUrl"] == data["url"]


def test_invalid_token_on_optional_auth_is_unauthenticated(client: TestClient, family_logbook):
    r = client.get(f"{BASE}/home/sections", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
