# app/main.py
from __future__ import annotations

import logging

from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute

from app.api.v1.router import api_router
from app.core.config import create_app
from app.core.logging import configure_logging
from app.core.settings import settings
from app.middleware.ratelimit import RateLimitMiddleware

from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

# Rutas que no piden bearer (solo afecta a la documentación)
PUBLIC_PATHS = (
    f"{settings.API_V1_STR}/health/",
    f"{settings.API_V1_STR}/auth/login",
    f"{settings.API_V1_STR}/auth/refresh",
)

configure_logging(logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = create_app()
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


def _inject_bearer_security(app):
    """Inyecta bearerAuth globalmente en OpenAPI (solo docs; la seguridad real es la de los endpoints)."""
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=settings.APP_NAME,
            version="1.0.0",
            description="Contenido por página de cada logbook (secciones + dot-paths), miembros e invitaciones",
            routes=app.routes,
        )

        components = openapi_schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        openapi_schema["security"] = [{"bearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi


def _mark_public_routes(app):
    for route in app.routes:
        if isinstance(route, APIRoute) and (route.path or "").startswith(PUBLIC_PATHS):
            extra = dict(route.openapi_extra or {})
            extra["security"] = []  # anula el bearer global en docs
            route.openapi_extra = extra


_inject_bearer_security(app)

# Rate limit de escrituras; no hace nada si RATELIMIT_ENABLED=false
app.add_middleware(RateLimitMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)
_mark_public_routes(app)

logger.info("app ready env=%s ratelimit=%s", settings.ENV, settings.RATELIMIT_ENABLED)
