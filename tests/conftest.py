# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from types import SimpleNamespace

# La BD de pruebas se fija ANTES de importar app.* (settings/engine se crean al importar)
_TMP_DIR = tempfile.mkdtemp(prefix="logbook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["RATELIMIT_ENABLED"] = "false"
os.environ.pop("FIREBASE_CREDENTIALS_PATH", None)
os.environ.pop("FIREBASE_STORAGE_BUCKET", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models.auth import Logbook, LogbookMember, MemberRole, User  # también registra el resto de modelos
from app.security.jwt import create_access_token
from app.services.passwords import hash_password


TEST_PASSWORD = "secret-pass"


@pytest.fixture(autouse=True)
def _schema():
    """Esquema limpio por test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Session:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user(db: Session):
    def _make(email: str, full_name: str | None = None, password: str = TEST_PASSWORD) -> User:
        user = User(email=email, full_name=full_name, hashed_password=hash_password(password), is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def family_logbook(db: Session, make_user):
    """
    Logbook 'smith-family' con page_sections = NULL y un miembro por rol,
    más un usuario autenticado que NO es miembro.
    """
    parent = make_user("parent@example.com", "Pat Parent")
    family = make_user("family@example.com", "Fran Family")
    friend = make_user("friend@example.com", "Frankie Friend")
    outsider = make_user("outsider@example.com", "Olly Outsider")

    logbook = Logbook(slug="smith-family", name="Smith Family", created_by=parent.id, page_sections=None)
    db.add(logbook)
    db.flush()
    for user, role in ((parent, MemberRole.parent), (family, MemberRole.family), (friend, MemberRole.friend)):
        db.add(LogbookMember(logbook_id=logbook.id, user_id=user.id, role=role))
    db.commit()

    return SimpleNamespace(
        id=logbook.id,
        slug=logbook.slug,
        parent_id=parent.id,
        family_id=family.id,
        friend_id=friend.id,
        outsider_id=outsider.id,
    )


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def headers_for():
    return auth_headers
