# app/services/content_service.py
# Acciones de contenido por página: lectura mergeada, escritura por sección y por dot-path.
# Toda escritura pasa por _write_page: merge -> mutación -> diff mínimo -> guardar.
from __future__ import annotations

import base64
import copy
import logging
import mimetypes
import uuid
from io import BytesIO
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.content_registry import DEFAULT_SECTIONS, PageType, coerce_page_type, get_section_definition
from app.core.settings import settings
from app.models.audit import ContentAction
from app.schemas.content import ContentResult, PageSectionsResult
from app.services.actions import action, load_membership, ok, require_parent, require_user
from app.services.audit_service import audit_content_action, compute_changed_keys
from app.services.content_paths import PathError, PathSegment, format_path, parse_path, set_nested_value
from app.services.errors import Conflict, ValidationFailure
from app.services.firebase_storage import (
    delete_file_from_firebase, is_firebase_configured, upload_file_to_firebase,
)
from app.services.page_content import (
    PageSections, get_page_sections, get_section_differences, update_section_in_sections,
)
from app.utils.payload_guard import enforce_page_sections_size

logger = logging.getLogger(__name__)

SECTION_FORBIDDEN = "Only parents can edit page content"
CONTENT_FORBIDDEN = "Only parents can edit content"


def _sections_error(error: str, code: str) -> PageSectionsResult:
    return PageSectionsResult(sections=None, error=error, code=code)


# -------- Validación de entrada (antes de cualquier I/O) --------
def _page_type(value: PageType | str) -> PageType:
    try:
        return coerce_page_type(value)
    except ValueError:
        raise ValidationFailure(f"Unknown page type '{value}'")


def _section_key(page: PageType, section_key: str) -> str:
    if not section_key or get_section_definition(page, section_key) is None:
        raise ValidationFailure(f"Unknown section '{section_key}' for page '{page.value}'")
    return section_key


def _content_path(page: PageType, path: str, value: Any) -> List[PathSegment]:
    try:
        segments = parse_path(path)
    except PathError as e:
        raise ValidationFailure(str(e))
    root = segments[0]
    if not isinstance(root, str):
        raise ValidationFailure(f"Invalid path '{path}': must start with a section key")
    _section_key(page, root)
    if len(segments) == 1:
        if not isinstance(value, dict):
            raise ValidationFailure("A section value must be an object")
        if "visible" in value and not isinstance(value["visible"], bool):
            raise ValidationFailure("'visible' must be a boolean")
    if len(segments) == 2 and segments[1] == "visible" and not isinstance(value, bool):
        raise ValidationFailure("'visible' must be a boolean")
    return segments


def _patch(sections: PageSections, segments: Sequence[PathSegment], value: Any) -> PageSections:
    try:
        return set_nested_value(sections, segments, value)
    except PathError as e:
        raise ValidationFailure(str(e))


# -------- Ruta canónica de escritura --------
def _write_page(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page: PageType,
    mutate: Callable[[PageSections], PageSections],
    audit: ContentAction,
    details: Dict[str, Any],
    forbidden: str,
) -> PageSections:
    """
    Lee el documento vigente, aplica `mutate` sobre las secciones mergeadas de
    `page` y persiste solo el diff contra los defaults.

    El UPDATE va condicionado a page_sections_version; si otra escritura ganó
    (StaleDataError) se hace rollback, se relee y se re-aplica la mutación.
    Rol y membresía se verifican en cada intento.
    """
    attempts = max(1, int(settings.CONTENT_WRITE_MAX_ATTEMPTS))
    for attempt in range(1, attempts + 1):
        logbook, role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
        require_parent(role, forbidden)

        document: Dict[str, Any] = copy.deepcopy(logbook.page_sections) if isinstance(logbook.page_sections, dict) else {}
        before = document.get(page.value) if isinstance(document.get(page.value), dict) else {}

        updated = mutate(get_page_sections(document, page))
        document[page.value] = get_section_differences(updated, page)
        enforce_page_sections_size(document)

        logbook.page_sections = document
        audit_content_action(
            db,
            logbook_id=logbook.id,
            page_type=page.value,
            action=audit,
            user_id=user_id,
            details={**details, "changed_sections": compute_changed_keys(before, document[page.value])},
        )
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.info(
                "page_sections version conflict slug=%s page=%s (attempt %s/%s)",
                logbook_slug, page.value, attempt, attempts,
            )
            continue
        return get_page_sections(document, page)

    raise Conflict()


# -------- Flujo por secciones --------
@action("get_logbook_page_sections", persist_error="Failed to load page sections", on_error=_sections_error)
def get_logbook_page_sections(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
) -> PageSectionsResult:
    """Secciones mergeadas de una página. Cualquier miembro puede leer."""
    require_user(user_id)
    page = _page_type(page_type)
    logbook, _role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    return PageSectionsResult(sections=get_page_sections(logbook.page_sections, page))


@action("update_page_section", persist_error="Failed to update page section")
def update_page_section(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    section_key: str,
    updates: Mapping[str, Any],
) -> ContentResult:
    require_user(user_id)
    page = _page_type(page_type)
    key = _section_key(page, section_key)
    if not isinstance(updates, Mapping):
        raise ValidationFailure("Section updates must be an object")
    if "visible" in updates and not isinstance(updates["visible"], bool):
        raise ValidationFailure("'visible' must be a boolean")

    sections = _write_page(
        db,
        user_id=user_id,
        logbook_slug=logbook_slug,
        page=page,
        mutate=lambda merged: update_section_in_sections(merged, key, updates),
        audit=ContentAction.UPDATE_SECTION,
        details={"section": key, "fields": sorted(updates.keys())},
        forbidden=SECTION_FORBIDDEN,
    )
    logger.info("section updated slug=%s page=%s section=%s", logbook_slug, page.value, key)
    return ok(sections)


@action("toggle_section_visibility", persist_error="Failed to update page section")
def toggle_section_visibility(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    section_key: str,
    visible: bool,
) -> ContentResult:
    require_user(user_id)
    page = _page_type(page_type)
    key = _section_key(page, section_key)
    if not isinstance(visible, bool):
        raise ValidationFailure("'visible' must be a boolean")

    sections = _write_page(
        db,
        user_id=user_id,
        logbook_slug=logbook_slug,
        page=page,
        mutate=lambda merged: update_section_in_sections(merged, key, {"visible": visible}),
        audit=ContentAction.TOGGLE_VISIBILITY,
        details={"section": key, "visible": visible},
        forbidden=SECTION_FORBIDDEN,
    )
    logger.info("section visibility slug=%s page=%s section=%s visible=%s", logbook_slug, page.value, key, visible)
    return ok(sections)


@action("reset_page_section", persist_error="Failed to reset page section")
def reset_page_section(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    section_key: str,
) -> ContentResult:
    """Devuelve la sección a sus defaults: el diff la elimina del override."""
    require_user(user_id)
    page = _page_type(page_type)
    key = _section_key(page, section_key)

    def _reset(merged: PageSections) -> PageSections:
        result = dict(merged)
        result[key] = copy.deepcopy(DEFAULT_SECTIONS[page.value][key])
        return result

    sections = _write_page(
        db,
        user_id=user_id,
        logbook_slug=logbook_slug,
        page=page,
        mutate=_reset,
        audit=ContentAction.RESET_SECTION,
        details={"section": key},
        forbidden=SECTION_FORBIDDEN,
    )
    logger.info("section reset slug=%s page=%s section=%s", logbook_slug, page.value, key)
    return ok(sections)


# -------- Flujo por dot-path --------
@action("get_logbook_content", persist_error="Failed to load content")
def get_logbook_content(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    raw: bool = False,
) -> ContentResult:
    """
    Contenido de la página: mergeado por defecto; con raw=True, el override
    persistido tal cual ({} si la página nunca se editó).
    """
    require_user(user_id)
    page = _page_type(page_type)
    logbook, _role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    if raw:
        stored = logbook.page_sections.get(page.value) if isinstance(logbook.page_sections, dict) else None
        return ok(copy.deepcopy(stored) if isinstance(stored, dict) else {})
    return ok(get_page_sections(logbook.page_sections, page))


@action("update_logbook_content", persist_error="Failed to update content")
def update_logbook_content(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    path: str,
    value: Any,
) -> ContentResult:
    require_user(user_id)
    page = _page_type(page_type)
    segments = _content_path(page, path, value)

    sections = _write_page(
        db,
        user_id=user_id,
        logbook_slug=logbook_slug,
        page=page,
        mutate=lambda merged: _patch(merged, segments, value),
        audit=ContentAction.UPDATE_CONTENT,
        details={"paths": [format_path(segments)]},
        forbidden=CONTENT_FORBIDDEN,
    )
    logger.info("content updated slug=%s page=%s path=%s", logbook_slug, page.value, format_path(segments))
    return ok(sections)


@action("batch_update_logbook_content", persist_error="Failed to update content")
def batch_update_logbook_content(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    updates: Mapping[str, Any],
) -> ContentResult:
    """Aplica {path: value} en orden sobre la misma copia; una sola escritura."""
    require_user(user_id)
    page = _page_type(page_type)
    if not isinstance(updates, Mapping) or not updates:
        raise ValidationFailure("Updates must be a non-empty object")
    # todos los paths se validan antes de tocar la base
    patches = [(_content_path(page, path, value), value) for path, value in updates.items()]

    def _apply(merged: PageSections) -> PageSections:
        for segments, value in patches:
            merged = _patch(merged, segments, value)
        return merged

    sections = _write_page(
        db,
        user_id=user_id,
        logbook_slug=logbook_slug,
        page=page,
        mutate=_apply,
        audit=ContentAction.BATCH_UPDATE,
        details={"paths": [format_path(s) for s, _ in patches]},
        forbidden=CONTENT_FORBIDDEN,
    )
    logger.info("content batch updated slug=%s page=%s paths=%d", logbook_slug, page.value, len(patches))
    return ok(sections)


# -------- Imagen + contenido --------
def _image_extension(filename: Optional[str], content_type: str) -> str:
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[-1].lower()
    return mimetypes.guess_extension(content_type) or ""


def _store_image(
    *, logbook_slug: str, page: PageType, filename: Optional[str], content_type: str, data: bytes,
) -> tuple[str, Optional[str]]:
    """
    Firebase Storage si está configurado; si no (o si falla), data URL en base64.
    Devuelve (url, blob_path); blob_path es None para data URLs.
    """
    if is_firebase_configured():
        dest = f"logbooks/{logbook_slug}/{page.value}/{uuid.uuid4().hex}{_image_extension(filename, content_type)}"
        try:
            return upload_file_to_firebase(BytesIO(data), content_type, dest), dest
        except Exception:
            logger.exception("firebase upload failed slug=%s, falling back to data URL", logbook_slug)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}", None


def _discard_blob(blob_path: str) -> None:
    try:
        delete_file_from_firebase(blob_path)
        logger.info("orphan image deleted blob=%s", blob_path)
    except Exception:
        logger.exception("could not delete orphan image blob=%s", blob_path)


@action("upload_and_update_content", persist_error="Failed to update content")
def upload_and_update_content(
    db: Session,
    *,
    user_id: Optional[int],
    logbook_slug: str,
    page_type: PageType | str,
    path: str,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
) -> ContentResult:
    require_user(user_id)
    page = _page_type(page_type)
    segments = _content_path(page, path, "")
    if len(segments) < 2:
        raise ValidationFailure("Image path must point to a field inside a section")

    # permisos antes de subir nada
    _logbook, role = load_membership(db, user_id=user_id, logbook_slug=logbook_slug)
    require_parent(role, CONTENT_FORBIDDEN)

    mime = (content_type or "").lower()
    if not mime.startswith("image/"):
        raise ValidationFailure("Only image uploads are allowed")
    if not data:
        raise ValidationFailure("Uploaded file is empty")
    max_bytes = int(settings.UPLOAD_MAX_MB) * 1024 * 1024
    if len(data) > max_bytes:
        raise ValidationFailure(f"File too large (max {settings.UPLOAD_MAX_MB}MB)")

    url, blob_path = _store_image(logbook_slug=logbook_slug, page=page, filename=filename, content_type=mime, data=data)

    try:
        sections = _write_page(
            db,
            user_id=user_id,
            logbook_slug=logbook_slug,
            page=page,
            mutate=lambda merged: _patch(merged, segments, url),
            audit=ContentAction.UPLOAD_IMAGE,
            details={"paths": [format_path(segments)], "content_type": mime, "bytes": len(data)},
            forbidden=CONTENT_FORBIDDEN,
        )
    except Exception:
        # el contenido no apunta al blob: se borra antes de propagar el error
        if blob_path is not None:
            _discard_blob(blob_path)
        raise
    logger.info("image uploaded slug=%s page=%s path=%s", logbook_slug, page.value, format_path(segments))
    return ok({"url": url, "sections": sections})
