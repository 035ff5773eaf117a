# app/services/audit_service.py

from __future__ import annotations
from typing import Optional, Dict, Any, Union, List
from sqlalchemy.orm import Session

from app.models.audit import ContentAuditLog, ContentAction


def compute_changed_keys(before: Dict[str, Any] | None, after: Dict[str, Any] | None) -> List[str]:
    """
    Devuelve las claves cuyo valor cambió entre before y after (comparación superficial).
    Si alguna es None, se trata como {} para evitar errores.
    """
    b = before or {}
    a = after or {}
    keys = set(b.keys()) | set(a.keys())
    changed = [k for k in keys if b.get(k) != a.get(k)]
    changed.sort()
    return changed


def audit_content_action(
    db: Session,
    *,
    logbook_id: int,
    page_type: str,
    action: Union[ContentAction, str],
    user_id: Optional[int],
    details: Optional[Dict[str, Any]] = None,
) -> ContentAuditLog:
    """No hace commit: el log viaja en la misma transacción que la escritura."""
    if isinstance(action, str):
        action = ContentAction(action.lower())

    log = ContentAuditLog(
        logbook_id=logbook_id,
        page_type=page_type,
        action=action,
        user_id=user_id,
        details=details or {},
    )
    db.add(log)
    return log
