# app/services/content_paths.py
# Dot-paths sobre documentos JSON: "hero.title", "faq.cards.2.question"
from __future__ import annotations

import copy
from typing import Any, Iterable, List, Sequence, Union

PathSegment = Union[str, int]


class PathError(ValueError):
    """Path mal formado o imposible de aplicar sobre el documento."""


def parse_path(path: str | Sequence[PathSegment]) -> List[PathSegment]:
    """
    "faq.cards.2.question" -> ["faq", "cards", 2, "question"].
    Segmentos puramente numéricos se convierten a int (índices de lista).
    Acepta también una secuencia ya parseada.
    """
    if not isinstance(path, str):
        segments = list(path)
        if not segments:
            raise PathError("Path must not be empty")
        return segments

    if not path or not path.strip():
        raise PathError("Path must be a non-empty string")
    parts = path.split(".")
    if any(p.strip() == "" for p in parts):
        raise PathError(f"Invalid path '{path}': empty segment")
    segments: List[PathSegment] = []
    for p in parts:
        if not p.isdigit():
            segments.append(p)
        elif p.isascii():
            segments.append(int(p))
        else:
            # "²", "٣": isdigit() pero int() no los acepta como índice
            raise PathError(f"Invalid path '{path}': '{p}' is not a valid index")
    return segments


def format_path(segments: Iterable[PathSegment]) -> str:
    return ".".join(str(s) for s in segments)


_MISSING = object()


def _get_child(container: Any, seg: PathSegment) -> Any:
    if isinstance(container, list):
        if not isinstance(seg, int):
            raise PathError(f"Cannot use key '{seg}' on a list")
        if 0 <= seg < len(container):
            return container[seg]
        return _MISSING
    if isinstance(container, dict):
        return container.get(str(seg), _MISSING)
    return _MISSING


def _set_child(container: Any, seg: PathSegment, value: Any) -> None:
    if isinstance(container, list):
        if not isinstance(seg, int):
            raise PathError(f"Cannot use key '{seg}' on a list")
        if seg < len(container):
            container[seg] = value
        elif seg == len(container):
            container.append(value)
        else:
            raise PathError(f"Index {seg} out of range (list has {len(container)} items)")
        return
    # dict: los segmentos numéricos son claves string (semántica JSON)
    container[str(seg)] = value


def get_nested_value(doc: Any, path: str | Sequence[PathSegment], default: Any = None) -> Any:
    current = doc
    for seg in parse_path(path):
        if isinstance(current, list) and not isinstance(seg, int):
            return default
        current = _get_child(current, seg)
        if current is _MISSING:
            return default
    return current


def set_nested_value(doc: dict | None, path: str | Sequence[PathSegment], value: Any) -> dict:
    """
    Devuelve una copia profunda de `doc` con `value` asignado en `path`.
    No muta `doc`. Los intermedios ausentes, nulos o escalares se reemplazan por {}.
    En listas: índice < len sobrescribe, índice == len agrega, índice > len es error.
    """
    segments = parse_path(path)
    result: dict = copy.deepcopy(doc) if isinstance(doc, dict) else {}

    current: Any = result
    for seg in segments[:-1]:
        child = _get_child(current, seg)
        if not isinstance(child, (dict, list)):
            child = {}
            _set_child(current, seg, child)
        current = child

    _set_child(current, segments[-1], copy.deepcopy(value))
    return result
