# scripts/set_password.py
# Uso: python -m scripts.set_password parent@example.com nueva-clave
from __future__ import annotations
import argparse

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.auth import User
from app.services.passwords import hash_password


def run(email: str, plain: str) -> bool:
    db: Session = SessionLocal()
    try:
        u = db.scalar(select(User).where(User.email == email))
        if not u:
            print(f"[SKIP] User not found: {email}")
            return False
        u.hashed_password = hash_password(plain)
        db.commit()
        print(f"[OK] Set password for {email}")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Cambia la contraseña de un usuario")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()
    raise SystemExit(0 if run(args.email, args.password) else 1)
