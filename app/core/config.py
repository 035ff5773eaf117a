# app/core/config.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .settings import settings


def create_app() -> FastAPI:
    # docs interactivas fuera de producción
    docs_url = None if settings.ENV == "prod" else "/docs"
    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, docs_url=docs_url, redoc_url=None)

    origins = settings.CORS_ORIGINS
    if origins:
        # con "*" el navegador no acepta credenciales
        wildcard = "*" in origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if wildcard else origins,
            allow_credentials=not wildcard,
            allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
            allow_headers=["Authorization", "Content-Type"],
        )
    return app
