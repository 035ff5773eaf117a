# app/services/logbook_service.py
# Logbooks, miembros e invitaciones. Mismo contrato que las acciones de contenido:
# devuelven ContentResult y nunca lanzan hacia el caller.
from __future__ import annotations

import logging
import re
import secrets
import string
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.models.auth import InviteCode, Logbook, LogbookMember, MemberRole, User
from app.schemas.content import ContentResult
from app.schemas.logbook import SLUG_PATTERN
from app.services.actions import action, load_membership, ok, require_parent, require_user
from app.services.errors import Conflict, NotFound, PersistenceFailure, ValidationFailure

logger = logging.getLogger(__name__)

INVITE_FORBIDDEN = "Only logbook parents can create invite codes"
INVITE_MANAGE_FORBIDDEN = "Only logbook parents can manage invite codes"
INVITE_ALPHABET = string.ascii_uppercase + string.digits
INVITABLE_ROLES = (MemberRole.family, MemberRole.friend)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite devuelve datetimes naive; se guardan en UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _logbook_out(logbook: Logbook, role: MemberRole) -> Dict[str, Any]:
    return {
        "id": logbook.id,
        "slug": logbook.slug,
        "name": logbook.name,
        "baby_name": logbook.baby_name,
        "due_date": logbook.due_date.isoformat() if logbook.due_date else None,
        "theme": logbook.theme,
        "role": role.value,
    }


def invite_url(code: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/join/{code}"


def _invite_out(invite: InviteCode) -> Dict[str, Any]:
    return {
        "id": invite.id,
        "code": invite.code,
        "url": invite_url(invite.code),
        "role": MemberRole(invite.role).value,
        "max_uses": invite.max_uses,
        "uses_count": invite.uses_count,
        "expires_at": _as_utc(invite.expires_at).isoformat() if invite.expires_at else None,
    }


# -------- Logbooks --------
@action("create_logbook", persist_error="Failed to create logbook")
def create_logbook(
    db: Session,
    *,
    user_id: Optional[int],
    name: str,
    slug: str,
    baby_name: Optional[str] = None,
    due_date: Optional[date] = None,
) -> ContentResult:
    """Crea el logbook (page_sections = NULL, todo por defecto) y hace parent al creador."""
    require_user(user_id)
    name = (name or "").strip()
    slug = (slug or "").strip().lower()
    if not name:
        raise ValidationFailure("Logbook name is required")
    if not slug or not re.fullmatch(SLUG_PATTERN, slug):
        raise ValidationFailure("Slug may only contain lowercase letters, numbers and hyphens")
    if db.scalar(select(Logbook.id).where(Logbook.slug == slug)) is not None:
        raise Conflict("Logbook slug is already taken")

    logbook = Logbook(
        slug=slug,
        name=name,
        baby_name=(baby_name or None),
        due_date=due_date,
        created_by=user_id,
        page_sections=None,
    )
    db.add(logbook)
    db.flush()
    db.add(LogbookMember(logbook_id=logbook.id, user_id=user_id, role=MemberRole.parent))
    db.commit()
    db.refresh(logbook)

    logger.info("logbook created slug=%s by user=%s", slug, user_id)
    return ok(_logbook_out(logbook, MemberRole.parent))


@action("get_logbook_by_slug", persist_error="Failed to load logbook")
def get_logbook_by_slug(db: Session, *, user_id: Optional[int], logbook_slug: str) -> ContentResult:
    logbook, role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    return ok(_logbook_out(logbook, role))


@action("list_members", persist_error="Failed to load members")
def list_members(db: Session, *, user_id: Optional[int], logbook_slug: str) -> ContentResult:
    logbook, _role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    rows = db.execute(
        select(LogbookMember, User)
        .join(User, User.id == LogbookMember.user_id)
        .where(LogbookMember.logbook_id == logbook.id)
        .order_by(LogbookMember.id.asc())
    ).all()
    return ok([
        {
            "id": m.id,
            "user_id": u.id,
            "email": u.email,
            "full_name": u.full_name,
            "role": MemberRole(m.role).value,
        }
        for m, u in rows
    ])


# -------- Invitaciones --------
def _generate_unique_code(db: Session) -> str:
    for _ in range(max(1, settings.INVITE_CODE_MAX_ATTEMPTS)):
        code = "".join(secrets.choice(INVITE_ALPHABET) for _ in range(settings.INVITE_CODE_LENGTH))
        if db.scalar(select(InviteCode.id).where(InviteCode.code == code)) is None:
            return code
    raise PersistenceFailure("Failed to generate a unique invite code")


@action("create_invite_code", persist_error="Failed to create invite code")
def create_invite_code(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    role: MemberRole | str,
    max_uses: int = 1,
    expires_in_days: Optional[int] = None,
) -> ContentResult:
    require_user(user_id)
    try:
        invite_role = MemberRole(role)
    except ValueError:
        raise ValidationFailure(f"Unknown role '{role}'")
    if invite_role not in INVITABLE_ROLES:
        raise ValidationFailure("Invite codes can only grant family or friend access")
    if not isinstance(max_uses, int) or not 1 <= max_uses <= 100:
        raise ValidationFailure("max_uses must be between 1 and 100")
    if expires_in_days is not None and expires_in_days < 1:
        raise ValidationFailure("expires_in_days must be at least 1")

    logbook, member_role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    require_parent(member_role, INVITE_FORBIDDEN)

    invite = InviteCode(
        code=_generate_unique_code(db),
        logbook_id=logbook.id,
        role=invite_role,
        max_uses=max_uses,
        uses_count=0,
        expires_at=(_utcnow() + timedelta(days=expires_in_days)) if expires_in_days else None,
        created_by=user_id,
    )
    db.add(invite)
    db.commit()
    db.refresh(invite)

    logger.info("invite created slug=%s role=%s max_uses=%s", logbook_slug, invite_role.value, max_uses)
    return ok(_invite_out(invite))


@action("list_invite_codes", persist_error="Failed to load invite codes")
def list_invite_codes(db: Session, *, user_id: Optional[int], logbook_slug: str) -> ContentResult:
    logbook, role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    require_parent(role, INVITE_MANAGE_FORBIDDEN)
    invites = db.scalars(
        select(InviteCode).where(InviteCode.logbook_id == logbook.id).order_by(InviteCode.id.desc())
    ).all()
    return ok([_invite_out(i) for i in invites])


@action("delete_invite_code", persist_error="Failed to delete invite code")
def delete_invite_code(db: Session, *, user_id: Optional[int], logbook_slug: str, invite_id: int) -> ContentResult:
    logbook, role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    require_parent(role, INVITE_MANAGE_FORBIDDEN)
    invite = db.get(InviteCode, invite_id)
    if invite is None or invite.logbook_id != logbook.id:
        raise NotFound("Invite code not found")
    db.delete(invite)
    db.commit()
    logger.info("invite deleted slug=%s invite_id=%s", logbook_slug, invite_id)
    return ok({"deleted": invite_id})


@action("redeem_invite_code", persist_error="Failed to join logbook")
def redeem_invite_code(db: Session, *, user_id: Optional[int], code: str) -> ContentResult:
    """Crea la membresía con el rol del código e incrementa uses_count."""
    require_user(user_id)
    normalized = (code or "").strip().upper()
    if not normalized:
        raise ValidationFailure("Invite code is required")

    invite = db.scalar(select(InviteCode).where(InviteCode.code == normalized))
    if invite is None:
        raise NotFound("Invalid invite code")
    if invite.expires_at is not None and _as_utc(invite.expires_at) <= _utcnow():
        raise ValidationFailure("Invite code has expired")
    if invite.uses_count >= invite.max_uses:
        raise ValidationFailure("Invite code has reached its maximum uses")

    already = db.scalar(
        select(LogbookMember.id).where(
            LogbookMember.logbook_id == invite.logbook_id,
            LogbookMember.user_id == user_id,
        )
    )
    if already is not None:
        raise Conflict("You are already a member of this logbook")

    # Incremento condicionado: dos canjes simultáneos no superan max_uses
    res = db.execute(
        update(InviteCode)
        .where(InviteCode.id == invite.id, InviteCode.uses_count < InviteCode.max_uses)
        .values(uses_count=InviteCode.uses_count + 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        raise ValidationFailure("Invite code has reached its maximum uses")

    role = MemberRole(invite.role)
    db.add(LogbookMember(logbook_id=invite.logbook_id, user_id=user_id, role=role))
    logbook = db.get(Logbook, invite.logbook_id)
    db.commit()

    logger.info("invite redeemed code=%s user=%s role=%s", normalized, user_id, role.value)
    return ok(_logbook_out(logbook, role))
