# app/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.settings import settings

ENGINE_URL = settings.SQLALCHEMY_DATABASE_URL

if ENGINE_URL.startswith("sqlite"):
    # SQLite local / tests: FastAPI corre endpoints sync en un threadpool
    engine = create_engine(ENGINE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        ENGINE_URL,
        pool_pre_ping=True,
        pool_recycle=1800,  # keep connections fresh on Heroku
    )

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
