# app/schemas/logbook.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional, Literal

from pydantic import BaseModel, Field, ConfigDict

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# ===== Logbooks =====
class LogbookCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    slug: str = Field(..., min_length=1, max_length=80, pattern=SLUG_PATTERN)
    baby_name: Optional[str] = Field(None, max_length=160)
    due_date: Optional[date] = None


class LogbookOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    slug: str
    name: str
    baby_name: Optional[str] = None
    due_date: Optional[date] = None
    theme: str
    created_at: Optional[datetime] = None


class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    role: str
    last_visited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# ===== Invite codes =====
class InviteCreate(BaseModel):
    role: Literal["family", "friend"]
    max_uses: int = Field(1, ge=1, le=100)
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)


class InviteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    code: str
    role: str
    max_uses: int
    uses_count: int
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
