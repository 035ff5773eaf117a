# tests/test_page_content.py
from __future__ import annotations
import copy

import pytest

from app.content_registry import DEFAULT_SECTIONS, PageType
from app.services.page_content import (
    deep_merge,
    get_page_sections,
    get_section_differences,
    get_section_value,
    is_section_visible,
    update_section_in_sections,
    validate_page_sections,
)

ALL_PAGES = [p.value for p in PageType]

OVERRIDE_SAMPLES = [
    None,
    {},
    {"home": None},
    {"home": {}},
    {"home": {"hero": {"title": "Our Story"}}},
    {"home": {"hero": "not-an-object"}},
    {"home": {"hero": {"visible": "yes"}}},
    {"faq": {"faq": {"cards": []}}, "help": {"registry": {"links": [{"url": "https://x"}]}}},
    {"gallery": {"layout": {"columns": 4}, "extraSection": {"visible": True}}},
]


@pytest.mark.parametrize("page", ALL_PAGES)
@pytest.mark.parametrize("overrides", OVERRIDE_SAMPLES)
def test_merge_is_always_complete(page, overrides):
    assert validate_page_sections(get_page_sections(overrides, page), page) is True


def test_missing_page_returns_defaults():
    merged = get_page_sections({"help": {"registry": {"title": "X"}}}, "home")
    assert merged == DEFAULT_SECTIONS["home"]
    # copia: mutar el resultado no toca los defaults
    merged["hero"]["title"] = "mutated"
    assert DEFAULT_SECTIONS["home"]["hero"]["title"] == "Welcome to Our Journey"


def test_override_wins_over_default():
    merged = get_page_sections({"home": {"hero": {"title": "Our Story", "visible": False}}}, PageType.home)
    assert merged["hero"]["title"] == "Our Story"
    assert merged["hero"]["visible"] is False
    # el resto del default sigue ahí
    assert merged["hero"]["subtitle"] == DEFAULT_SECTIONS["home"]["hero"]["subtitle"]
    assert merged["navigation"] == DEFAULT_SECTIONS["home"]["navigation"]


def test_arrays_are_replaced_not_merged():
    cards = [{"question": "X?", "answer": "Y"}]
    merged = get_page_sections({"faq": {"faq": {"cards": cards}}}, "faq")
    assert merged["faq"]["cards"] == cards


def test_non_object_section_override_is_ignored():
    merged = get_page_sections({"home": {"hero": ["bad"]}}, "home")
    assert merged["hero"] == DEFAULT_SECTIONS["home"]["hero"]


def test_non_bool_visible_falls_back_to_default():
    merged = get_page_sections({"home": {"stats": {"visible": "true", "title": "Numbers"}}}, "home")
    assert merged["stats"]["visible"] is False
    assert merged["stats"]["title"] == "Numbers"


def test_unknown_sections_round_trip():
    merged = get_page_sections({"home": {"custom": {"visible": True, "x": 1}}}, "home")
    assert merged["custom"] == {"visible": True, "x": 1}
    assert list(merged)[:3] == ["hero", "navigation", "stats"]


def test_deep_merge_does_not_mutate_inputs():
    base = {"a": {"b": 1, "c": [1, 2]}}
    override = {"a": {"c": [3]}}
    snapshot = (copy.deepcopy(base), copy.deepcopy(override))
    assert deep_merge(base, override) == {"a": {"b": 1, "c": [3]}}
    assert (base, override) == snapshot


@pytest.mark.parametrize("page", ALL_PAGES)
def test_defaults_produce_empty_diff(page):
    assert get_section_differences(DEFAULT_SECTIONS[page], page) == {}


@pytest.mark.parametrize("overrides", [
    {"hero": {"title": "Our Story"}},
    {"hero": {"visible": False}, "stats": {"visible": True, "title": "Numbers"}},
    {"navigation": {"cards": ["gallery"]}},
    {"custom": {}},
])
def test_diff_then_merge_is_idempotent(overrides):
    merged = get_page_sections({"home": overrides}, "home")
    diff = get_section_differences(merged, "home")
    assert get_page_sections({"home": diff}, "home") == merged


def test_diff_keeps_only_changed_fields():
    merged = get_page_sections({"home": {"hero": {"title": "Our Story", "subtitle": "Following our adventure"}}}, "home")
    assert get_section_differences(merged, "home") == {"hero": {"title": "Our Story"}}


def test_diff_ignores_key_order_but_not_bool_vs_int():
    merged = copy.deepcopy(DEFAULT_SECTIONS["faq"])
    merged["faq"]["cards"] = [{"answer": c["answer"], "question": c["question"]} for c in merged["faq"]["cards"]]
    assert get_section_differences(merged, "faq") == {}

    merged = copy.deepcopy(DEFAULT_SECTIONS["home"])
    merged["hero"]["showDueDate"] = 1
    assert get_section_differences(merged, "home") == {"hero": {"showDueDate": 1}}


def test_validate_rejects_incomplete_or_bad_visible():
    sections = copy.deepcopy(DEFAULT_SECTIONS["home"])
    del sections["stats"]
    assert validate_page_sections(sections, "home") is False

    sections = copy.deepcopy(DEFAULT_SECTIONS["home"])
    sections["hero"]["visible"] = "yes"
    assert validate_page_sections(sections, "home") is False

    assert validate_page_sections(DEFAULT_SECTIONS["home"], "nope") is False


def test_visibility_follows_merged_section():
    merged = get_page_sections(None, "home")
    assert is_section_visible(merged, "hero") is True
    # el default de stats es visible: False
    assert is_section_visible(merged, "stats") is False
    assert is_section_visible(merged, "missing") is False


def test_section_helpers():
    merged = get_page_sections(None, "home")
    assert get_section_value(merged, "hero", "title") == "Welcome to Our Journey"
    assert get_section_value(merged, "nope", "title") is None

    updated = update_section_in_sections(merged, "hero", {"title": "New"})
    assert updated["hero"]["title"] == "New"
    assert merged["hero"]["title"] == "Welcome to Our Journey"
