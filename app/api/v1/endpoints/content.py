# =============================================================================
# Content Endpoints (page sections + dot-path content)
# app/api/v1/endpoints/content.py
# =============================================================================
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.v1.responses import respond
from app.db.session import get_db
from app.deps.auth import get_current_user_id_optional
from app.schemas.content import (
    BatchContentUpdateIn, ContentUpdateIn, SectionUpdateIn, VisibilityIn,
)
from app.services import content_service as svc

router = APIRouter(prefix="/logbooks/{slug}/pages/{page_type}")

# El usuario llega como Optional: la acción misma responde "Authentication required".


# =======================
# Sections
# =======================
@router.get("/sections")
def get_page_sections(
    slug: str,
    page_type: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.get_logbook_page_sections(db, user_id=user_id, logbook_slug=slug, page_type=page_type))


@router.patch("/sections/{section_key}")
def patch_page_section(
    slug: str,
    page_type: str,
    section_key: str,
    body: SectionUpdateIn,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.update_page_section(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type,
        section_key=section_key, updates=body.updates,
    ))


@router.put("/sections/{section_key}/visibility")
def put_section_visibility(
    slug: str,
    page_type: str,
    section_key: str,
    body: VisibilityIn,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.toggle_section_visibility(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type,
        section_key=section_key, visible=body.visible,
    ))


@router.delete("/sections/{section_key}")
def reset_page_section(
    slug: str,
    page_type: str,
    section_key: str,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.reset_page_section(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type, section_key=section_key,
    ))


# =======================
# Dot-path content
# =======================
@router.get("/content")
def get_content(
    slug: str,
    page_type: str,
    raw: bool = Query(False, description="Override persistido en lugar del contenido mergeado"),
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.get_logbook_content(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type, raw=raw,
    ))


@router.patch("/content")
def patch_content(
    slug: str,
    page_type: str,
    body: ContentUpdateIn,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.update_logbook_content(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type,
        path=body.path, value=body.value,
    ))


@router.patch("/content/batch")
def patch_content_batch(
    slug: str,
    page_type: str,
    body: BatchContentUpdateIn,
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    return respond(svc.batch_update_logbook_content(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type, updates=body.updates,
    ))


@router.post("/content/upload")
async def upload_content_image(
    slug: str,
    page_type: str,
    path: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_current_user_id_optional),
):
    data = await file.read()
    return respond(svc.upload_and_update_content(
        db, user_id=user_id, logbook_slug=slug, page_type=page_type, path=path,
        filename=file.filename, content_type=file.content_type, data=data,
    ))
