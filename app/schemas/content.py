# app/schemas/content.py
# Pydantic: requests/responses para secciones de página y contenido por dot-path
from __future__ import annotations
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict, StrictBool, field_validator


class ContentResult(BaseModel):
    """Resultado uniforme de toda acción: nunca se lanza una excepción al caller."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None


class PageSectionsResult(BaseModel):
    sections: Optional[Dict[str, Dict[str, Any]]] = None
    error: Optional[str] = None
    code: Optional[str] = None


# ---------- Section flow ----------
class SectionUpdateIn(BaseModel):
    updates: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("updates")
    @classmethod
    def _visible_is_bool(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if "visible" in v and not isinstance(v["visible"], bool):
            raise ValueError("'visible' must be a boolean")
        return v


class VisibilityIn(BaseModel):
    visible: StrictBool  # sin coerción de "yes"/"no"/0/1


# ---------- Dot-path flow ----------
class ContentUpdateIn(BaseModel):
    path: str = Field(..., min_length=1, max_length=256)
    value: Any = None

    model_config = ConfigDict(extra="ignore")


class BatchContentUpdateIn(BaseModel):
    # {dot.path: value}
    updates: Dict[str, Any] = Field(..., min_length=1)
