# app/services/passwords.py
from __future__ import annotations

from passlib.context import CryptContext

# bcrypt para usuarios de logbooks (login, seeds y fixtures usan el mismo contexto)
_pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__truncate_error=False,
)


def hash_password(plain: str) -> str:
    return _pwd.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """False si el usuario no tiene hash (cuentas creadas solo por invitación/seed incompleto)."""
    if not hashed:
        return False
    return _pwd.verify(plain, hashed)
