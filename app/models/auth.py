# app/models/auth.py
# Usuarios, logbooks (tenancy), membresías con rol e invitaciones
from __future__ import annotations
from datetime import datetime, date
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    String, Integer, Boolean, Date, DateTime, ForeignKey, Enum as SQLEnum,
    UniqueConstraint, Index, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, JSONDoc


class MemberRole(str, Enum):
    parent = "parent"
    family = "family"
    friend = "friend"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str | None] = mapped_column(String(160), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    memberships: Mapped[list[LogbookMember]] = relationship("LogbookMember", back_populates="user", cascade="all, delete-orphan")


class Logbook(Base):
    __tablename__ = "logbooks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(160))
    baby_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    theme: Mapped[str] = mapped_column(String(40), default="forest-light")
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Overrides por página (diff mínimo contra DEFAULT_SECTIONS); NULL = todo por defecto
    page_sections: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONDoc, nullable=True, default=None)
    # Token de concurrencia optimista: UPDATE ... WHERE page_sections_version = :visto
    page_sections_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    members: Mapped[list[LogbookMember]] = relationship("LogbookMember", back_populates="logbook", cascade="all, delete-orphan")
    invite_codes: Mapped[list[InviteCode]] = relationship("InviteCode", back_populates="logbook", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": page_sections_version}


class LogbookMember(Base):
    __tablename__ = "logbook_members"
    __table_args__ = (
        UniqueConstraint("logbook_id", "user_id", name="uq_logbook_member"),
        Index("ix_logbook_members_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    logbook_id: Mapped[int] = mapped_column(ForeignKey("logbooks.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    role: Mapped[MemberRole] = mapped_column(SQLEnum(MemberRole, native_enum=False), default=MemberRole.friend)
    last_visited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship("User", back_populates="memberships")
    logbook: Mapped[Logbook] = relationship("Logbook", back_populates="members")


class InviteCode(Base):
    __tablename__ = "invite_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    logbook_id: Mapped[int] = mapped_column(ForeignKey("logbooks.id", ondelete="CASCADE"), index=True)
    # Las invitaciones nunca otorgan 'parent'
    role: Mapped[MemberRole] = mapped_column(SQLEnum(MemberRole, native_enum=False))
    max_uses: Mapped[int] = mapped_column(Integer, default=1)
    uses_count: Mapped[int] = mapped_column(Integer, default=0)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    logbook: Mapped[Logbook] = relationship("Logbook", back_populates="invite_codes")
