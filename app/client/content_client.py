# app/client/content_client.py
# Cliente HTTP (httpx) de la API de contenido. Provee writer/loader para PageContentContext.
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from app.core.settings import settings


class ContentClientError(Exception):
    """Respuesta fallida de la API: conserva mensaje, código y status HTTP."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class LogbookContentClient:
    """
    Uso:
        with LogbookContentClient("https://api.example.com", token=jwt) as api:
            sections = api.get_page_sections("smith-family", "home")
            api.update_content("smith-family", "home", "hero.title", "Our Story")

    `client` permite inyectar un httpx.Client ya configurado (p. ej. TestClient).
    """

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        *,
        api_prefix: str = settings.API_V1_STR,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._prefix = api_prefix.rstrip("/")
        self._token = token

    # ---------- lifecycle ----------
    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> LogbookContentClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- helpers ----------
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"} if self._token else {}

    def _page_url(self, slug: str, page_type: str, tail: str) -> str:
        return f"{self._prefix}/logbooks/{slug}/pages/{page_type}/{tail}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        resp = self._client.request(method, url, headers=self._headers(), **kwargs)
        try:
            body = resp.json()
        except ValueError:
            raise ContentClientError(f"Unexpected response ({resp.status_code})", status_code=resp.status_code)

        if not isinstance(body, dict):
            raise ContentClientError(f"Unexpected response ({resp.status_code})", status_code=resp.status_code)
        # errores de FastAPI (token inválido, validación del body) vienen como {"detail": ...}
        if "detail" in body and resp.status_code >= 400:
            detail = body["detail"]
            raise ContentClientError(detail if isinstance(detail, str) else "Invalid request", status_code=resp.status_code)
        if body.get("error") or body.get("success") is False or resp.status_code >= 400:
            raise ContentClientError(body.get("error") or "Request failed", body.get("code"), resp.status_code)
        return body

    # ---------- secciones ----------
    def get_page_sections(self, slug: str, page_type: str) -> Dict[str, Any]:
        return self._request("GET", self._page_url(slug, page_type, "sections"))["sections"]

    def update_section(self, slug: str, page_type: str, section_key: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        url = self._page_url(slug, page_type, f"sections/{section_key}")
        return self._request("PATCH", url, json={"updates": dict(updates)})["data"]

    def set_section_visibility(self, slug: str, page_type: str, section_key: str, visible: bool) -> Dict[str, Any]:
        url = self._page_url(slug, page_type, f"sections/{section_key}/visibility")
        return self._request("PUT", url, json={"visible": visible})["data"]

    def reset_section(self, slug: str, page_type: str, section_key: str) -> Dict[str, Any]:
        return self._request("DELETE", self._page_url(slug, page_type, f"sections/{section_key}"))["data"]

    # ---------- dot-path ----------
    def get_content(self, slug: str, page_type: str, *, raw: bool = False) -> Dict[str, Any]:
        params = {"raw": "true"} if raw else None
        return self._request("GET", self._page_url(slug, page_type, "content"), params=params)["data"]

    def update_content(self, slug: str, page_type: str, path: str, value: Any) -> Dict[str, Any]:
        url = self._page_url(slug, page_type, "content")
        return self._request("PATCH", url, json={"path": path, "value": value})["data"]

    def batch_update(self, slug: str, page_type: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        url = self._page_url(slug, page_type, "content/batch")
        return self._request("PATCH", url, json={"updates": dict(updates)})["data"]

    def upload_image(
        self, slug: str, page_type: str, path: str, *, filename: str, data: bytes, content_type: str,
    ) -> Dict[str, Any]:
        url = self._page_url(slug, page_type, "content/upload")
        files = {"file": (filename, data, content_type)}
        return self._request("POST", url, data={"path": path}, files=files)["data"]

    # ---------- adaptadores para PageContentContext ----------
    def writer_for(self, slug: str, page_type: str) -> Callable[[str, Any], Dict[str, Any]]:
        return lambda path, value: self.update_content(slug, page_type, path, value)

    def loader_for(self, slug: str, page_type: str) -> Callable[[], Dict[str, Any]]:
        return lambda: self.get_page_sections(slug, page_type)
