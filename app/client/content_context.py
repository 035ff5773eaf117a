# app/client/content_context.py
# Caché de contenido de UNA página: mapa plano dot-path -> ContentItem, con
# escritura optimista y rollback. Una instancia por página montada.
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.content_registry import ContentType, PageType, coerce_page_type, field_content_type
from app.models.auth import MemberRole
from app.services.content_paths import PathSegment, format_path, parse_path, set_nested_value

logger = logging.getLogger(__name__)

# writer(path, value) -> secciones mergeadas frescas (o None). Lanza si falla.
ContentWriter = Callable[[str, Any], Optional[Mapping[str, Any]]]
ContentLoader = Callable[[], Mapping[str, Any]]


class ContextState(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATED = "hydrated"
    WRITING = "writing"


class ContentContextError(Exception):
    pass


@dataclass
class ContentItem:
    value: Any
    type: ContentType = ContentType.text
    metadata: Dict[str, Any] = field(default_factory=dict)


def infer_content_type(value: Any) -> ContentType:
    # bool antes que int: bool es subclase de int
    if isinstance(value, bool):
        return ContentType.boolean
    if isinstance(value, (int, float)):
        return ContentType.number
    if isinstance(value, list):
        return ContentType.array
    if isinstance(value, str) and value.startswith("http"):
        return ContentType.image
    return ContentType.text


class PageContentContext:
    """
    Estados: UNINITIALIZED -> HYDRATED <-> WRITING.

    - get_content(path, fallback) lee del mapa local.
    - update_content(path, value) escribe local primero, llama al writer y,
      si falla, restaura el mapa previo y re-lanza el error.
    - can_edit / can_edit_any dependen solo del rol (el servidor vuelve a verificar).
    """

    def __init__(
        self,
        page_type: PageType | str,
        *,
        role: MemberRole | str | None = None,
        writer: Optional[ContentWriter] = None,
        loader: Optional[ContentLoader] = None,
        initial_sections: Optional[Mapping[str, Any]] = None,
    ):
        self.page_type = coerce_page_type(page_type)
        self.role = MemberRole(role) if role else None
        self._writer = writer
        self._loader = loader
        self._items: Dict[str, ContentItem] = {}
        self._state = ContextState.UNINITIALIZED
        self.is_edit_mode = False
        self.is_edit_panel_open = False
        if initial_sections is not None:
            self.hydrate(initial_sections)

    # -------- estado --------
    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def content(self) -> Mapping[str, ContentItem]:
        return MappingProxyType(self._items)

    def _type_for(self, segments: List[PathSegment], value: Any) -> ContentType:
        # el registry manda; la heurística solo cubre lo que no conoce
        return field_content_type(self.page_type, segments) or infer_content_type(value)

    def _flatten(self, value: Any, prefix: List[PathSegment], out: Dict[str, ContentItem]) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                self._flatten(child, [*prefix, key], out)
            return
        path = format_path(prefix)
        previous = self._items.get(path)
        ctype = previous.type if previous is not None else self._type_for(prefix, value)
        out[path] = ContentItem(value=copy.deepcopy(value), type=ctype)

    def hydrate(self, sections: Mapping[str, Any]) -> None:
        """Reemplaza el mapa con las secciones mergeadas (una entrada por leaf; las listas son leaf)."""
        items: Dict[str, ContentItem] = {}
        for key, section in sections.items():
            self._flatten(section, [key], items)
        self._items = items
        self._state = ContextState.HYDRATED

    # -------- lectura --------
    def get_content(self, path: str, fallback: Any = "") -> Any:
        item = self._items.get(path)
        return item.value if item is not None else fallback

    def set_content(self, path: str, item: ContentItem) -> None:
        """Solo local: no persiste."""
        self._items[path] = item

    def is_section_visible(self, path: str) -> bool:
        # sin entrada explícita se considera visible
        value = self.get_content(f"{path}.visible", True)
        return value if isinstance(value, bool) else True

    # -------- permisos --------
    def can_edit(self, path: Optional[str] = None) -> bool:
        return self.role == MemberRole.parent

    def can_edit_any(self) -> bool:
        return self.role == MemberRole.parent

    # -------- escritura --------
    def _drop_subtree(self, path: str) -> None:
        prefix = path + "."
        for key in [k for k in self._items if k == path or k.startswith(prefix)]:
            del self._items[key]

    def _apply_local(self, path: str, value: Any) -> None:
        segments = parse_path(path)

        # dentro de una lista ya cacheada ("faq.cards.0.answer"): se parcha la lista
        for i in range(len(segments) - 1, 0, -1):
            holder = self._items.get(format_path(segments[:i]))
            if holder is not None and isinstance(holder.value, list):
                patched = set_nested_value({"v": holder.value}, ["v", *segments[i:]], value)["v"]
                self._items[format_path(segments[:i])] = ContentItem(patched, holder.type, holder.metadata)
                return

        existing = self._items.get(path)
        if isinstance(value, dict):
            self._drop_subtree(path)
            fresh: Dict[str, ContentItem] = {}
            self._flatten(value, segments, fresh)
            self._items.update(fresh)
            return

        self._drop_subtree(path)
        ctype = existing.type if existing is not None else self._type_for(segments, value)
        metadata = existing.metadata if existing is not None else {}
        self._items[path] = ContentItem(copy.deepcopy(value), ctype, metadata)

    def update_content(self, path: str, value: Any) -> None:
        if self._writer is None:
            raise ContentContextError("No content writer configured")

        snapshot = dict(self._items)
        previous_state = self._state
        self._state = ContextState.WRITING
        try:
            self._apply_local(path, value)
            fresh = self._writer(path, value)
        except Exception:
            self._items = snapshot
            self._state = previous_state
            logger.exception("content update failed page=%s path=%s", self.page_type.value, path)
            raise

        if isinstance(fresh, Mapping):
            self.hydrate(fresh)
        else:
            self._state = ContextState.HYDRATED

    def toggle_section_visibility(self, path: str) -> None:
        self.update_content(f"{path}.visible", not self.is_section_visible(path))

    def refresh_content(self) -> None:
        """Re-lee las secciones mergeadas del servidor y re-hidrata."""
        if self._loader is None:
            raise ContentContextError("No content loader configured")
        try:
            sections = self._loader()
        except Exception:
            logger.exception("content refresh failed page=%s", self.page_type.value)
            raise
        self.hydrate(sections)

    # -------- modo edición --------
    def toggle_edit_mode(self) -> None:
        if self.is_edit_mode:
            self.is_edit_panel_open = False
        self.is_edit_mode = not self.is_edit_mode

    def toggle_edit_panel(self) -> None:
        if not self.is_edit_mode:
            self.is_edit_mode = True
            self.is_edit_panel_open = True
        else:
            self.is_edit_panel_open = not self.is_edit_panel_open

    def set_edit_mode(self, enabled: bool) -> None:
        self.is_edit_mode = enabled
        if not enabled:
            self.is_edit_panel_open = False

    # -------- listas editables --------
    def _list_at(self, path: str) -> List[Any]:
        current = self.get_content(path, [])
        if not isinstance(current, list):
            raise ContentContextError(f"Content at '{path}' is not a list")
        return copy.deepcopy(current)

    def add_item(self, path: str, item: Any) -> None:
        items = self._list_at(path)
        items.append(item)
        self.update_content(path, items)

    def remove_item(self, path: str, index: int) -> None:
        items = self._list_at(path)
        if not 0 <= index < len(items):
            raise IndexError(f"Index {index} out of range for '{path}'")
        del items[index]
        self.update_content(path, items)

    def move_item(self, path: str, from_index: int, to_index: int) -> None:
        items = self._list_at(path)
        if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
            raise IndexError(f"Cannot move item {from_index} -> {to_index} in '{path}'")
        items.insert(to_index, items.pop(from_index))
        self.update_content(path, items)

    def duplicate_item(self, path: str, index: int) -> None:
        items = self._list_at(path)
        if not 0 <= index < len(items):
            raise IndexError(f"Index {index} out of range for '{path}'")
        items.insert(index + 1, copy.deepcopy(items[index]))
        self.update_content(path, items)
