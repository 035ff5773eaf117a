# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import health, content, logbooks
from app.api.v1 import auth as auth_endpoints

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth_endpoints.router, prefix="/auth")
api_router.include_router(logbooks.router)                  # /logbooks, /invites
api_router.include_router(content.router, tags=["content"])  # /logbooks/{slug}/pages/{page_type}/...
