# app/content_registry.py
# Registry estático de páginas y secciones: claves válidas, defaults y tipos de campo.
# Es la única fuente de verdad de "cómo se ve una sección sin personalizar".
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence


class PageType(str, Enum):
    home = "home"
    help = "help"
    gallery = "gallery"
    vault = "vault"
    faq = "faq"
    admin = "admin"


class ContentType(str, Enum):
    text = "text"
    textarea = "textarea"
    image = "image"
    boolean = "boolean"
    array = "array"
    number = "number"


@dataclass(frozen=True)
class SectionDefinition:
    key: str
    label: str
    # Debe incluir siempre `visible: bool`
    defaults: Dict[str, Any]
    # Tipos explícitos por sub-path relativo a la sección ("imageUrl", "cards.*.answer").
    # Lo que no aparezca aquí se infiere del tipo del valor por defecto.
    field_types: Dict[str, ContentType] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "defaults": self.defaults,
            "field_types": {k: v.value for k, v in self.field_types.items()},
        }


def _page(*sections: SectionDefinition) -> Mapping[str, SectionDefinition]:
    return MappingProxyType({s.key: s for s in sections})


PAGE_REGISTRY: Mapping[PageType, Mapping[str, SectionDefinition]] = MappingProxyType({
    PageType.home: _page(
        SectionDefinition(
            key="hero",
            label="Hero",
            defaults={
                "visible": True,
                "imageUrl": None,
                "title": "Welcome to Our Journey",
                "subtitle": "Following our adventure",
                "babyName": "",
                "showDueDate": True,
            },
            field_types={"imageUrl": ContentType.image},
        ),
        SectionDefinition(
            key="navigation",
            label="Navigation",
            defaults={
                "visible": True,
                "title": "Explore",
                "subtitle": "Everything about our little one, in one place",
                "cards": ["gallery", "help", "vault", "faq", "admin"],
            },
        ),
        SectionDefinition(
            key="stats",
            label="Stats",
            defaults={
                "visible": False,
                "title": "By the Numbers",
                "showPhotoCount": True,
                "showCommentCount": True,
                "showMemberCount": True,
            },
        ),
    ),
    PageType.help: _page(
        SectionDefinition(
            key="registry",
            label="Registry",
            defaults={"visible": True, "title": "Our Registry", "links": []},
        ),
        SectionDefinition(
            key="plan529",
            label="529 Plan",
            defaults={
                "visible": False,
                "title": "529 College Savings Plan",
                "description": "",
                "accountInfo": "",
            },
            field_types={"description": ContentType.textarea, "accountInfo": ContentType.textarea},
        ),
        SectionDefinition(
            key="counters",
            label="Counters",
            defaults={"visible": True, "title": "What We're Collecting", "items": []},
        ),
        SectionDefinition(
            key="giftIdeas",
            label="Gift Ideas",
            defaults={"visible": True, "title": "Gift Ideas", "description": "Things we'd love help with"},
            field_types={"description": ContentType.textarea},
        ),
        SectionDefinition(
            key="giftsForParents",
            label="Gifts for Parents",
            defaults={"visible": False, "title": "For the Parents", "description": "Ways to support us directly"},
            field_types={"description": ContentType.textarea},
        ),
        SectionDefinition(
            key="whatWeNeed",
            label="What We Need",
            defaults={"visible": True, "items": []},
        ),
        SectionDefinition(
            key="whatWeDontNeed",
            label="What We Don't Need",
            defaults={"visible": True, "items": []},
        ),
    ),
    PageType.gallery: _page(
        SectionDefinition(
            key="header",
            label="Header",
            defaults={"visible": True, "title": "Our Gallery", "subtitle": "Capturing every moment"},
        ),
        SectionDefinition(
            key="layout",
            label="Layout",
            defaults={"visible": True, "style": "grid", "columns": 3},
        ),
        SectionDefinition(
            key="filters",
            label="Filters",
            defaults={"visible": True, "showDateFilter": True, "showTypeFilter": True},
        ),
    ),
    PageType.vault: _page(
        SectionDefinition(
            key="header",
            label="Header",
            defaults={
                "visible": True,
                "title": "Memory Vault",
                "description": "Letters and memories for the future",
            },
            field_types={"description": ContentType.textarea},
        ),
        SectionDefinition(
            key="letters",
            label="Letters",
            defaults={"visible": True, "allowAnonymous": False},
        ),
        SectionDefinition(
            key="photos",
            label="Photos",
            defaults={"visible": True},
        ),
        SectionDefinition(
            key="recommendations",
            label="Recommendations",
            defaults={"visible": True, "categories": ["restaurants", "books", "movies", "places"]},
        ),
    ),
    PageType.faq: _page(
        SectionDefinition(
            key="intro",
            label="Intro",
            defaults={
                "visible": True,
                "title": "FAQ & Information",
                "subtitle": "Everything you need to know about our journey",
            },
        ),
        SectionDefinition(
            key="faq",
            label="Questions",
            defaults={
                "visible": True,
                "title": "Frequently Asked Questions",
                "description": "Everything you need to know",
                "cards": [
                    {"question": "When is the baby due?", "answer": "We'll share the date here as it gets closer."},
                    {"question": "Can we visit?", "answer": "Please check the visitation guidelines below."},
                    {"question": "How can we help?", "answer": "Take a look at our help page for ideas."},
                ],
            },
            field_types={"cards.*.answer": ContentType.textarea},
        ),
        SectionDefinition(
            key="communication",
            label="Communication",
            defaults={
                "visible": True,
                "title": "Communication Guidelines",
                "description": "How we'd love to stay connected",
                "guidelines": [],
            },
            field_types={"guidelines.*.description": ContentType.textarea},
        ),
        SectionDefinition(
            key="timeline",
            label="Timeline",
            defaults={
                "visible": True,
                "title": "Important Dates",
                "description": "Key milestones and dates to remember",
                "items": [],
            },
        ),
        SectionDefinition(
            key="hospital",
            label="Hospital",
            defaults={"visible": True, "title": "Hospital Information", "items": []},
        ),
        SectionDefinition(
            key="visitation",
            label="Visitation",
            defaults={"visible": True, "title": "Visitation Guidelines", "items": []},
        ),
        SectionDefinition(
            key="parenting",
            label="Parenting",
            defaults={"visible": True, "title": "Our Parenting Choices", "items": []},
        ),
        SectionDefinition(
            key="general",
            label="General",
            defaults={"visible": False, "title": "General Questions", "items": []},
        ),
    ),
    PageType.admin: _page(
        SectionDefinition(
            key="header",
            label="Header",
            defaults={"visible": True, "title": "Logbook Settings", "subtitle": "Manage your family logbook"},
        ),
        SectionDefinition(
            key="members",
            label="Members",
            defaults={"visible": True, "title": "Family & Friends"},
        ),
        SectionDefinition(
            key="invites",
            label="Invites",
            defaults={"visible": True, "title": "Invite Codes", "defaultRole": "friend", "defaultMaxUses": 1},
        ),
        SectionDefinition(
            key="settings",
            label="Settings",
            defaults={"visible": True, "title": "Settings", "allowComments": True},
        ),
    ),
})


# Vista "plana" estilo JSON: {page: {section: defaults}}
DEFAULT_SECTIONS: Dict[str, Dict[str, Dict[str, Any]]] = {
    page.value: {key: sd.defaults for key, sd in sections.items()}
    for page, sections in PAGE_REGISTRY.items()
}


# -------- Helpers --------
def coerce_page_type(value: PageType | str) -> PageType:
    """Acepta PageType o su string; lanza ValueError si no existe."""
    if isinstance(value, PageType):
        return value
    try:
        return PageType(str(value))
    except ValueError:
        raise ValueError(f"Unknown page type: {value!r}")


def section_keys(page_type: PageType | str) -> list[str]:
    return list(PAGE_REGISTRY[coerce_page_type(page_type)].keys())


def get_section_definition(page_type: PageType | str, section_key: str) -> Optional[SectionDefinition]:
    return PAGE_REGISTRY[coerce_page_type(page_type)].get(section_key)


def page_json_schema(page_type: PageType | str) -> Dict[str, Any]:
    """
    JSON Schema (draft 2020-12) mínimo para una página mergeada:
    todas las secciones del registry presentes, cada una objeto con `visible` booleano.
    Campos extra permitidos (contenido abierto).
    """
    keys = section_keys(page_type)
    section_schema = {
        "type": "object",
        "properties": {"visible": {"type": "boolean"}},
        "required": ["visible"],
    }
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {k: section_schema for k in keys},
        "required": keys,
    }


def _infer_from_default(value: Any) -> Optional[ContentType]:
    # bool antes que int: bool es subclase de int
    if isinstance(value, bool):
        return ContentType.boolean
    if isinstance(value, (int, float)):
        return ContentType.number
    if isinstance(value, list):
        return ContentType.array
    if isinstance(value, dict):
        return None
    return ContentType.text


_MISSING = object()


def field_content_type(page_type: PageType | str, segments: Sequence[str | int]) -> Optional[ContentType]:
    """
    Tipo de un leaf según el registry. `segments` incluye la sección
    (["hero", "imageUrl"], ["faq", "cards", 0, "answer"]).
    Devuelve None si el registry no lo conoce; el caller decide el fallback.
    """
    if len(segments) < 2:
        return None
    definition = get_section_definition(page_type, str(segments[0]))
    if definition is None:
        return None

    rel = [("*" if isinstance(s, int) else str(s)) for s in segments[1:]]
    hint = definition.field_types.get(".".join(rel))
    if hint is not None:
        return hint

    current: Any = definition.defaults
    for seg in segments[1:]:
        if isinstance(current, dict):
            current = current.get(str(seg), _MISSING)
        elif isinstance(current, list) and isinstance(seg, int) and 0 <= seg < len(current):
            current = current[seg]
        else:
            return None
        if current is _MISSING:
            return None
    return _infer_from_default(current)
