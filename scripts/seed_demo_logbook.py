# scripts/seed_demo_logbook.py
# Logbook de demo con un usuario por rol (parent/family/friend). Idempotente.
from __future__ import annotations
import argparse

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.db.session import SessionLocal
from app.models.auth import User, Logbook, LogbookMember, MemberRole
from app.services.passwords import hash_password

DEMO_USERS = [
    ("parent@example.com", "Demo Parent", MemberRole.parent),
    ("family@example.com", "Demo Family", MemberRole.family),
    ("friend@example.com", "Demo Friend", MemberRole.friend),
]

def get_or_create(session: Session, model, defaults=None, **kwargs):
    stmt = select(model).filter_by(**kwargs)
    instance = session.execute(stmt).scalar_one_or_none()
    if instance:
        return instance, False
    params = {**kwargs, **(defaults or {})}
    instance = model(**params)
    session.add(instance)
    session.flush()
    return instance, True

def main():
    parser = argparse.ArgumentParser(description="Seed de un logbook de demo")
    parser.add_argument("--slug", default="demo-family")
    parser.add_argument("--name", default="Demo Family Logbook")
    parser.add_argument("--password", default="password")
    args = parser.parse_args()

    db: Session = SessionLocal()
    try:
        users = []
        for email, name, role in DEMO_USERS:
            user, _ = get_or_create(
                db, User, email=email,
                defaults={"hashed_password": hash_password(args.password), "full_name": name, "is_active": True},
            )
            users.append((user, role))

        logbook, created = get_or_create(
            db, Logbook, slug=args.slug,
            defaults={"name": args.name, "baby_name": "Baby", "created_by": users[0][0].id, "page_sections": None},
        )
        for user, role in users:
            get_or_create(db, LogbookMember, logbook_id=logbook.id, user_id=user.id, defaults={"role": role})

        db.commit()
        state = "creado" if created else "ya existía"
        print(f"✅ Logbook '{args.slug}' {state}; usuarios: {', '.join(e for e, _, _ in DEMO_USERS)}")
    except Exception as e:
        db.rollback()
        print("❌ Error en seeds:", e)
        raise
    finally:
        db.close()

if __name__ == "__main__":
    main()
