# app/api/v1/endpoints/logbooks.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.responses import respond
from app.db.session import get_db
from app.deps.auth import get_current_user_id_optional
from app.schemas.logbook import InviteCreate, LogbookCreate
from app.services import logbook_service as svc

router = APIRouter(tags=["logbooks"])


# ===== Logbooks =====
@router.post("/logbooks")
def create_logbook(
    payload: LogbookCreate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    result = svc.create_logbook(
        db, user_id=user_id, name=payload.name, slug=payload.slug,
        baby_name=payload.baby_name, due_date=payload.due_date,
    )
    return respond(result, success_status=status.HTTP_201_CREATED)


@router.get("/logbooks/{slug}")
def get_logbook(
    slug: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.get_logbook_by_slug(db, user_id=user_id, logbook_slug=slug))


@router.get("/logbooks/{slug}/members")
def list_members(
    slug: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.list_members(db, user_id=user_id, logbook_slug=slug))


# ===== Invite codes =====
@router.post("/logbooks/{slug}/invites")
def create_invite(
    slug: str,
    payload: InviteCreate,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    result = svc.create_invite_code(
        db, user_id=user_id, logbook_slug=slug, role=payload.role,
        max_uses=payload.max_uses, expires_in_days=payload.expires_in_days,
    )
    return respond(result, success_status=status.HTTP_201_CREATED)


@router.get("/logbooks/{slug}/invites")
def list_invites(
    slug: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.list_invite_codes(db, user_id=user_id, logbook_slug=slug))


@router.delete("/logbooks/{slug}/invites/{invite_id}")
def delete_invite(
    slug: str,
    invite_id: int,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.delete_invite_code(db, user_id=user_id, logbook_slug=slug, invite_id=invite_id))


@router.post("/invites/{code}/redeem")
def redeem_invite(
    code: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.redeem_invite_code(db, user_id=user_id, code=code))
