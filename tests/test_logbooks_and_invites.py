# tests/test_logbooks_and_invites.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.models.auth import InviteCode, LogbookMember, MemberRole
from app.services import logbook_service as svc

API = settings.API_V1_STR


def test_create_logbook_makes_creator_parent(client: TestClient, db: Session, make_user, headers_for):
    user = make_user("new@example.com")
    r = client.post(f"{API}/logbooks", json={"name": "Lee Family", "slug": "lee-family"}, headers=headers_for(user.id))
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["slug"] == "lee-family"
    assert data["role"] == "parent"

    # page_sections arranca vacío: la página se arma con defaults
    r = client.get(f"{API}/logbooks/lee-family/pages/home/sections", headers=headers_for(user.id))
    assert r.json()["sections"]["hero"]["visible"] is True


def test_slug_taken(db: Session, family_logbook):
    res = svc.create_logbook(db, user_id=family_logbook.parent_id, name="Other", slug="smith-family")
    assert res.success is False
    assert res.error == "Logbook slug is already taken"
    assert res.code == "conflict"


def test_create_logbook_validations(db: Session, family_logbook):
    assert svc.create_logbook(db, user_id=family_logbook.parent_id, name="  ", slug="ok").code == "validation_error"
    assert svc.create_logbook(db, user_id=family_logbook.parent_id, name="X", slug="Bad Slug!").code == "validation_error"
    assert svc.create_logbook(db, user_id=None, name="X", slug="x").code == "unauthenticated"


def test_get_logbook_and_members(client: TestClient, family_logbook, headers_for):
    r = client.get(f"{API}/logbooks/smith-family", headers=headers_for(family_logbook.friend_id))
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "friend"

    r = client.get(f"{API}/logbooks/smith-family/members", headers=headers_for(family_logbook.family_id))
    roles = sorted(m["role"] for m in r.json()["data"])
    assert roles == ["family", "friend", "parent"]

    r = client.get(f"{API}/logbooks/smith-family", headers=headers_for(family_logbook.outsider_id))
    assert r.status_code == 404


def test_invite_lifecycle(client: TestClient, db: Session, family_logbook, make_user, headers_for):
    r = client.post(
        f"{API}/logbooks/smith-family/invites",
        json={"role": "family", "max_uses": 1},
        headers=headers_for(family_logbook.parent_id),
    )
    assert r.status_code == 201, r.text
    invite = r.json()["data"]
    assert len(invite["code"]) == 8
    assert invite["code"].isalnum() and invite["code"].upper() == invite["code"]
    assert invite["url"].endswith(f"/join/{invite['code']}")

    newcomer = make_user("newcomer@example.com")
    r = client.post(f"{API}/invites/{invite['code'].lower()}/redeem", headers=headers_for(newcomer.id))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["role"] == "family"

    member = db.scalar(select(LogbookMember).where(LogbookMember.user_id == newcomer.id))
    assert member.role == MemberRole.family

    # max_uses = 1: el segundo canje falla
    late = make_user("late@example.com")
    r = client.post(f"{API}/invites/{invite['code']}/redeem", headers=headers_for(late.id))
    assert r.status_code == 422
    assert r.json()["error"] == "Invite code has reached its maximum uses"


def test_only_parents_create_invites(db: Session, family_logbook):
    res = svc.create_invite_code(db, user_id=family_logbook.family_id, logbook_slug="smith-family", role="friend")
    assert res.error == "Only logbook parents can create invite codes"
    assert res.code == "unauthorized"


def test_invites_never_grant_parent(db: Session, family_logbook):
    res = svc.create_invite_code(db, user_id=family_logbook.parent_id, logbook_slug="smith-family", role="parent")
    assert res.code == "validation_error"


def test_redeem_rejections(db: Session, family_logbook, make_user):
    created = svc.create_invite_code(db, user_id=family_logbook.parent_id, logbook_slug="smith-family", role="friend", max_uses=5)
    code = created.data["code"]

    assert svc.redeem_invite_code(db, user_id=family_logbook.friend_id, code=code).code == "conflict"
    assert svc.redeem_invite_code(db, user_id=family_logbook.outsider_id, code="ZZZZZZZZ").code == "not_found"

    invite = db.scalar(select(InviteCode).where(InviteCode.code == code))
    invite.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
    db.commit()
    res = svc.redeem_invite_code(db, user_id=family_logbook.outsider_id, code=code)
    assert res.error == "Invite code has expired"


def test_list_and_delete_invites(client: TestClient, db: Session, family_logbook, headers_for):
    h = headers_for(family_logbook.parent_id)
    created = client.post(f"{API}/logbooks/smith-family/invites", json={"role": "friend", "expires_in_days": 7}, headers=h).json()["data"]
    assert created["expires_at"] is not None

    r = client.get(f"{API}/logbooks/smith-family/invites", headers=h)
    assert [i["id"] for i in r.json()["data"]] == [created["id"]]

    r = client.get(f"{API}/logbooks/smith-family/invites", headers=headers_for(family_logbook.friend_id))
    assert r.status_code == 403

    r = client.delete(f"{API}/logbooks/smith-family/invites/{created['id']}", headers=h)
    assert r.status_code == 200
    r = client.delete(f"{API}/logbooks/smith-family/invites/{created['id']}", headers=h)
    assert r.status_code == 404
