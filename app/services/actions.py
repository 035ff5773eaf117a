# app/services/actions.py
# Frontera de las acciones: toda excepción se convierte en un ContentResult.
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.auth import Logbook, LogbookMember, MemberRole
from app.schemas.content import ContentResult
from app.services.errors import (
    ContentError, NotFound, Unauthenticated, Unauthorized,
    PersistenceFailure, UNEXPECTED_ERROR_CODE, UNEXPECTED_ERROR_MESSAGE,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def ok(data: Any = None) -> ContentResult:
    return ContentResult(success=True, data=data)


def fail(error: str, code: str) -> ContentResult:
    return ContentResult(success=False, error=error, code=code)


def action(
    label: str,
    *,
    persist_error: str = PersistenceFailure.default_message,
    on_error: Callable[[str, str], Any] = fail,
) -> Callable[[F], F]:
    """
    Decora una acción `fn(db, ...)`:
      - ContentError      -> rollback + resultado con su mensaje/código (warning).
      - SQLAlchemyError   -> rollback + `persist_error` genérico (se loguea el original).
      - cualquier otra    -> rollback + "An unexpected error occurred".
    """
    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return fn(db, *args, **kwargs)
            except ContentError as e:
                db.rollback()
                logger.warning("%s rejected (%s): %s", label, e.code, e.message)
                return on_error(e.message, e.code)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("%s: database error", label)
                return on_error(persist_error, PersistenceFailure.code)
            except Exception:
                db.rollback()
                logger.exception("%s: unexpected error", label)
                return on_error(UNEXPECTED_ERROR_MESSAGE, UNEXPECTED_ERROR_CODE)
        return wrapper  # type: ignore[return-value]
    return decorator


def load_membership(db: Session, *, user_id: Optional[int], logbook_slug: str) -> tuple[Logbook, MemberRole]:
    """
    Logbook + rol del usuario en UNA consulta (join con logbook_members).
    Slug inexistente y "no eres miembro" dan el mismo NotFound.
    """
    if user_id is None:
        raise Unauthenticated()
    row = db.execute(
        select(Logbook, LogbookMember.role)
        .join(LogbookMember, LogbookMember.logbook_id == Logbook.id)
        .where(Logbook.slug == logbook_slug, LogbookMember.user_id == user_id)
        .limit(1)
    ).first()
    if row is None:
        raise NotFound()
    logbook, role = row
    return logbook, MemberRole(role)


def require_parent(role: MemberRole, message: str) -> None:
    if role != MemberRole.parent:
        raise Unauthorized(message)


def require_user(user_id: Optional[int]) -> int:
    """Sin sesión no se valida ni se lee nada."""
    if user_id is None:
        raise Unauthenticated()
    return user_id
