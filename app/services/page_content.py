# app/services/page_content.py
# Merge (defaults + overrides), validación y diff mínimo de secciones de página.
from __future__ import annotations

import copy
import json
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from jsonschema import Draft202012Validator

from app.content_registry import DEFAULT_SECTIONS, PageType, coerce_page_type, page_json_schema

# {section_key: {field: value}}
PageSections = Dict[str, Dict[str, Any]]


# -------- Merge --------
def deep_merge(base: Any, override: Any) -> Any:
    """
    Merge recursivo que no muta sus argumentos.
    - dict + dict: clave a clave, recursivo.
    - listas: el override REEMPLAZA la lista completa (nunca elemento a elemento).
    - primitivos / tipos distintos: gana el override.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    return copy.deepcopy(override)


def _merge_section(default_section: Dict[str, Any], override: Any) -> Dict[str, Any]:
    # Una sección override que no es objeto no puede respetar la forma; se ignora
    if not isinstance(override, dict):
        return copy.deepcopy(default_section)
    merged = deep_merge(default_section, override)
    if not isinstance(merged.get("visible"), bool):
        merged["visible"] = default_section["visible"]
    return merged


def get_page_sections(raw_overrides: Optional[Mapping[str, Any]], page_type: PageType | str) -> PageSections:
    """
    Secciones completas de una página: DEFAULT_SECTIONS[page] + overrides del logbook.

    `raw_overrides` es el documento page_sections completo (todas las páginas);
    puede ser None o no incluir la página pedida. Secciones desconocidas en el
    override se conservan tal cual (round-trip), después de las del registry.
    """
    page = coerce_page_type(page_type).value
    defaults = DEFAULT_SECTIONS[page]

    page_overrides = raw_overrides.get(page) if isinstance(raw_overrides, Mapping) else None
    if not isinstance(page_overrides, dict) or not page_overrides:
        return copy.deepcopy(defaults)

    merged: PageSections = {}
    for key, default_section in defaults.items():
        if key in page_overrides:
            merged[key] = _merge_section(default_section, page_overrides[key])
        else:
            merged[key] = copy.deepcopy(default_section)

    for key, value in page_overrides.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
    return merged


# -------- Validación --------
@lru_cache(maxsize=None)
def _validator_for(page: str) -> Draft202012Validator:
    return Draft202012Validator(page_json_schema(page))


def validate_page_sections(sections: Any, page_type: PageType | str) -> bool:
    """True si están todas las secciones del registry y cada una tiene `visible` booleano."""
    try:
        page = coerce_page_type(page_type).value
    except ValueError:
        return False
    return _validator_for(page).is_valid(sections)


# -------- Lectura --------
def get_section_value(sections: Mapping[str, Any], section_key: str, field_key: str) -> Any:
    section = sections.get(section_key)
    if not isinstance(section, dict):
        return None
    return section.get(field_key)


def is_section_visible(sections: Mapping[str, Any], section_key: str) -> bool:
    """Lo que diga la sección mergeada; sin sección, no visible."""
    return bool(get_section_value(sections, section_key, "visible"))


def update_section_in_sections(
    sections: Mapping[str, Any],
    section_key: str,
    updates: Mapping[str, Any],
) -> PageSections:
    """Copia de `sections` con `updates` mergeados (deep merge) dentro de la sección."""
    result = copy.deepcopy(dict(sections))
    current = result.get(section_key)
    result[section_key] = deep_merge(current if isinstance(current, dict) else {}, dict(updates))
    return result


# -------- Diff --------
def _canonical_json(value: Any) -> str:
    # sort_keys: dos dicts iguales con distinto orden de claves comparan igual.
    # A diferencia de `==`, distingue True de 1.
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def _json_equal(a: Any, b: Any) -> bool:
    return _canonical_json(a) == _canonical_json(b)


_ABSENT = object()


def get_section_differences(sections: Mapping[str, Any], page_type: PageType | str) -> PageSections:
    """
    Override mínimo: por sección, solo los campos (primer nivel) distintos del default.
    Secciones idénticas al default no aparecen. Secciones fuera del registry se
    conservan completas.
    """
    defaults = DEFAULT_SECTIONS[coerce_page_type(page_type).value]
    differences: PageSections = {}

    for section_key, section in sections.items():
        default_section = defaults.get(section_key)
        if default_section is None:
            differences[section_key] = copy.deepcopy(section)
            continue
        if not isinstance(section, dict):
            continue

        section_diffs: Dict[str, Any] = {}
        for field_key, value in section.items():
            default_value = default_section.get(field_key, _ABSENT)
            if default_value is _ABSENT or not _json_equal(value, default_value):
                section_diffs[field_key] = copy.deepcopy(value)

        if section_diffs:
            differences[section_key] = section_diffs

    return differences
