# app/middleware/ratelimit.py
from __future__ import annotations
import time
import threading
from typing import Dict, Optional, Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from app.core.settings import settings
from app.security.jwt import decode_token

WindowState = Tuple[int, int]  # (window_epoch_sec, count)

WRITE_METHODS = ("POST", "PATCH", "PUT", "DELETE")


def _bearer_subject(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization") or ""
    parts = auth.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    try:
        return str(decode_token(parts[1]).get("sub") or "") or None
    except Exception:
        # token inválido: lo rechaza la dependencia de auth, aquí cuenta por IP
        return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Límite por minuto con ventanas fijas, en memoria (un proceso).
    Solo escrituras bajo {API_V1_STR}/logbooks/: key por usuario (sub del JWT) y fallback IP.
    """

    def __init__(self, app, limit_per_min: Optional[int] = None):
        super().__init__(app)
        self._limit = limit_per_min
        self._store: Dict[str, WindowState] = {}
        self._lock = threading.Lock()

    def _hit(self, key: str, limit: int) -> bool:
        now = int(time.time())
        window = now - (now % 60)
        with self._lock:
            w, c = self._store.get(key, (window, 0))
            if w != window:
                w, c = window, 0
            c += 1
            self._store[key] = (w, c)
            return c <= limit

    async def dispatch(self, request: Request, call_next):
        if not settings.RATELIMIT_ENABLED:
            return await call_next(request)

        path = request.url.path or ""
        method = request.method.upper()
        if method not in WRITE_METHODS or not path.startswith(f"{settings.API_V1_STR}/logbooks/"):
            return await call_next(request)

        limit = self._limit or settings.RATELIMIT_WRITE_PER_MIN
        subject = _bearer_subject(request)
        client_ip = request.client.host if request.client else "unknown"
        key = f"write:u:{subject}" if subject else f"write:ip:{client_ip}"

        if not self._hit(key, limit):
            return JSONResponse(
                {"success": False, "error": "Rate limit exceeded", "code": "rate_limited", "limit_per_min": limit},
                status_code=429,
                headers={"Retry-After": "60"},
            )

        return await call_next(request)
