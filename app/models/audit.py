# app/models/audit.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from sqlalchemy import (
    BigInteger, Integer, String, Enum as SAEnum, DateTime, ForeignKey, Index, func
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, JSONDoc


class ContentAction(str, Enum):
    UPDATE_SECTION = "update_section"
    TOGGLE_VISIBILITY = "toggle_visibility"
    RESET_SECTION = "reset_section"
    UPDATE_CONTENT = "update_content"
    BATCH_UPDATE = "batch_update"
    UPLOAD_IMAGE = "upload_image"


class ContentAuditLog(Base):
    __tablename__ = "content_audit_logs"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    logbook_id: Mapped[int] = mapped_column(
        ForeignKey("logbooks.id", ondelete="CASCADE"), nullable=False
    )
    # Usuario que originó la acción
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    page_type: Mapped[str] = mapped_column(String(32), nullable=False)

    action: Mapped[ContentAction] = mapped_column(
        SAEnum(
            ContentAction,
            name="contentaction",
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
    )

    # Secciones cambiadas, paths tocados, etc.
    details: Mapped[Dict[str, Any]] = mapped_column(JSONDoc, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_content_audit_logs_logbook_created", "logbook_id", "created_at"),
        Index("ix_content_audit_logs_action", "action"),
    )
