# app/security/jwt.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from app.core.settings import settings

ALGO   = settings.JWT_ALGORITHM or "HS256"
SECRET = settings.JWT_SECRET_KEY or "dev-secret"
ACCESS_MIN  = settings.ACCESS_MIN
REFRESH_MIN = settings.REFRESH_MIN

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _encode(subject: int | str, token_type: str, minutes: int, extra: Dict[str, Any] | None) -> str:
    now = _utcnow()
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "type": token_type,
        # exp/iat como enteros UNIX (segundos)
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, SECRET, algorithm=ALGO)

def create_access_token(subject: int | str, extra: Dict[str, Any] | None = None) -> str:
    return _encode(subject, "access", ACCESS_MIN, extra)

def create_refresh_token(subject: int | str, extra: Dict[str, Any] | None = None) -> str:
    return _encode(subject, "refresh", REFRESH_MIN, extra)

def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Lanza JWTError (o ExpiredSignatureError) si la firma/exp no valen o si
    `expected_type` no coincide con el claim `type`. El caller responde 401.
    """
    # sin aud/iss: no los firmamos
    payload = jwt.decode(
        token,
        SECRET,
        algorithms=[ALGO],
        options={"verify_aud": False, "verify_iss": False},
    )
    if expected_type is not None and payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload
