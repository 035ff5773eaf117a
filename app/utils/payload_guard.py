from __future__ import annotations

import json

from app.core.settings import settings
from app.services.errors import PayloadTooLarge, ValidationFailure


def enforce_page_sections_size(doc: dict) -> None:
    """
    Enforces a maximum serialized JSON size (in KB) for a logbook's page_sections.
    Raises PayloadTooLarge on overflow, or ValidationFailure if not JSON-serializable.
    """
    limit_kb = float(getattr(settings, "MAX_PAGE_SECTIONS_KB", 0) or 0)
    if limit_kb <= 0:
        return
    try:
        # compact JSON to measure true wire-size
        b = json.dumps(doc, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError):
        raise ValidationFailure("Content must be JSON-serializable")
    kb = len(b) / 1024.0
    if kb > limit_kb:
        raise PayloadTooLarge(f"Content too large: page sections are {kb:.1f}KB, limit is {limit_kb:.0f}KB")
