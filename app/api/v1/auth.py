# app/api/v1/auth.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from pydantic import BaseModel, EmailStr
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.auth import User, Logbook, LogbookMember, MemberRole
from app.security.jwt import create_access_token, create_refresh_token, decode_token
from app.services.passwords import verify_password
from app.deps.auth import get_current_user  # dependencia estándar para /me

router = APIRouter(tags=["auth"])  # el prefix lo pone api/v1/router.py


# ---------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------
class LoginIn(BaseModel):
    email: EmailStr
    password: str

class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class RefreshIn(BaseModel):
    refresh_token: str

class MeOut(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    memberships: list[dict]


# ---------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------
@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(User.email == payload.email))
    if not user or not verify_password(payload.password, user.hashed_password or ""):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User inactive")

    extra = {"email": user.email}
    return TokenOut(
        access_token=create_access_token(user.id, extra),
        refresh_token=create_refresh_token(user.id, extra),
    )


@router.post("/refresh", response_model=TokenOut)
def refresh(body: RefreshIn):
    try:
        payload = decode_token(body.refresh_token, expected_type="refresh")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    sub = payload.get("sub")
    extra = {k: v for k, v in payload.items() if k not in {"sub", "iat", "exp", "type"}}
    return TokenOut(
        access_token=create_access_token(sub, extra),
        refresh_token=create_refresh_token(sub, extra),
    )


@router.get("/me", response_model=MeOut)
def me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = (
        select(LogbookMember, Logbook)
        .join(Logbook, LogbookMember.logbook_id == Logbook.id)
        .where(LogbookMember.user_id == current_user.id)
        .order_by(Logbook.name.asc())
    )
    memberships = []
    for m, lb in db.execute(q).all():
        memberships.append({
            "logbook_id": lb.id,
            "logbook_slug": lb.slug,
            "logbook_name": lb.name,
            "role": MemberRole(m.role).value,
        })

    return MeOut(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        memberships=memberships,
    )
