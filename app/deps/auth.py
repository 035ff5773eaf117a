# app/deps/auth.py
# Identidad del request a partir del bearer JWT (access token).
# Las acciones de contenido/logbooks usan la variante opcional: con None la
# propia acción responde "Authentication required" en el cuerpo ContentResult.
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.auth import User
from app.security.jwt import decode_token

_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _active_user(db: Session, user_id: int | str | None) -> Optional[User]:
    try:
        user = db.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
    if user is None or not user.is_active:
        return None
    return user


def _user_id_from_token(db: Session, token: str) -> int:
    try:
        payload = decode_token(token, expected_type="access")
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError:
        raise _unauthorized("Invalid token")

    user = _active_user(db, payload.get("sub"))
    if user is None:
        raise _unauthorized("User not found or inactive")
    return int(user.id)


def get_current_user_id(
    db: Session = Depends(get_db),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> int:
    if not creds or not creds.credentials:
        raise _unauthorized("Authentication required")
    return _user_id_from_token(db, creds.credentials)


def get_current_user_id_optional(
    db: Session = Depends(get_db),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[int]:
    """None si no hay token o si no es válido (expirado, refresh, usuario inactivo)."""
    if not creds or not creds.credentials:
        return None
    try:
        return _user_id_from_token(db, creds.credentials)
    except HTTPException:
        return None


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    user = _active_user(db, user_id)
    if user is None:
        raise _unauthorized("User not found or inactive")
    return user
