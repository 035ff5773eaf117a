# app/services/firebase_storage.py
# Subida de imágenes de páginas a Firebase Storage. Sin credenciales/bucket
# el caller usa data URLs (ver content_service.upload_and_update_content).
from __future__ import annotations

import logging
import os
import urllib.parse
import uuid
from typing import BinaryIO

import firebase_admin
from firebase_admin import credentials, storage

from app.core.settings import settings

logger = logging.getLogger(__name__)

_FIREBASE_APP = None


def _bucket_name() -> str:
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    return bucket[5:] if bucket.startswith("gs://") else bucket


def is_firebase_configured() -> bool:
    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    return bool(cred_path and _bucket_name() and os.path.exists(cred_path))


def _get_firebase_app():
    global _FIREBASE_APP
    if _FIREBASE_APP is not None:
        return _FIREBASE_APP
    try:
        _FIREBASE_APP = firebase_admin.get_app()
        return _FIREBASE_APP
    except ValueError:
        pass

    if not is_firebase_configured():
        raise RuntimeError("Firebase Storage is not configured (FIREBASE_CREDENTIALS_PATH / FIREBASE_STORAGE_BUCKET)")

    cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    _FIREBASE_APP = firebase_admin.initialize_app(cred, {"storageBucket": _bucket_name()})
    logger.info("firebase app initialized bucket=%s", _bucket_name())
    return _FIREBASE_APP


def upload_file_to_firebase(file_obj: BinaryIO, content_type: str | None, dest_path: str) -> str:
    """Sube `file_obj` a `dest_path` y devuelve la URL pública con download token."""
    bucket = storage.bucket(app=_get_firebase_app())

    token = uuid.uuid4().hex
    blob = bucket.blob(dest_path)
    blob.metadata = {"firebaseStorageDownloadTokens": token}
    blob.upload_from_file(file_obj, content_type=content_type or "application/octet-stream")

    encoded_path = urllib.parse.quote(dest_path, safe="")
    return f"https://firebasestorage.googleapis.com/v0/b/{_bucket_name()}/o/{encoded_path}?alt=media&token={token}"


def delete_file_from_firebase(dest_path: str) -> None:
    """Borra el blob en `dest_path`; lanza si Firebase no responde."""
    bucket = storage.bucket(app=_get_firebase_app())
    bucket.blob(dest_path).delete()
