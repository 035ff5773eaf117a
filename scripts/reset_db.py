# scripts/reset_db.py
# ⚠️ Borra y recrea TODAS las tablas de logbooks. Solo para desarrollo local;
# en otros entornos usar `alembic upgrade head`.
from __future__ import annotations

from app.core.settings import settings
from app.db.base import Base
from app.db.session import engine
import app.models  # noqa: F401  (registra los modelos en Base.metadata)

if settings.ENV not in ("dev", "test"):
    raise SystemExit(f"[ABORT] reset_db no corre con ENV={settings.ENV}")

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
print(f"[OK] tablas recreadas en {engine.url.render_as_string(hide_password=True)}")
