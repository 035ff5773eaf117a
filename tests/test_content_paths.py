# tests/test_content_paths.py
from __future__ import annotations
import copy

import pytest

from app.services.content_paths import (
    PathError, format_path, get_nested_value, parse_path, set_nested_value,
)


def test_parse_path_turns_digits_into_indices():
    assert parse_path("faq.cards.2.question") == ["faq", "cards", 2, "question"]
    assert format_path(["faq", "cards", 2, "question"]) == "faq.cards.2.question"


@pytest.mark.parametrize("bad", ["", "   ", "hero..title", ".hero", "hero."])
def test_parse_path_rejects_empty_segments(bad):
    with pytest.raises(PathError):
        parse_path(bad)


@pytest.mark.parametrize("bad", ["hero.²", "faq.cards.٣.answer"])
def test_parse_path_rejects_non_ascii_digits(bad):
    with pytest.raises(PathError):
        parse_path(bad)


def test_set_is_pure():
    doc = {"hero": {"title": "A", "tags": ["x"]}}
    snapshot = copy.deepcopy(doc)
    result = set_nested_value(doc, "hero.title", "B")
    assert doc == snapshot
    assert result["hero"]["title"] == "B"
    # sin aliasing entre copia y original
    result["hero"]["tags"].append("y")
    assert doc["hero"]["tags"] == ["x"]


def test_set_creates_intermediate_objects():
    assert set_nested_value({}, "a.b.c", 5) == {"a": {"b": {"c": 5}}}


def test_set_replaces_null_and_scalar_intermediates():
    assert set_nested_value({"a": None}, "a.b", 1) == {"a": {"b": 1}}
    assert set_nested_value({"a": "text"}, "a.b", 1) == {"a": {"b": 1}}


def test_set_indexes_lists():
    doc = {"faq": {"cards": [{"question": "Q1"}, {"question": "Q2"}]}}
    result = set_nested_value(doc, "faq.cards.1.question", "New?")
    assert result["faq"]["cards"] == [{"question": "Q1"}, {"question": "New?"}]


def test_set_appends_at_list_length():
    result = set_nested_value({"items": ["a"]}, "items.1", "b")
    assert result == {"items": ["a", "b"]}


def test_set_rejects_index_past_end():
    with pytest.raises(PathError):
        set_nested_value({"items": ["a"]}, "items.5", "z")


def test_numeric_segment_on_dict_is_a_key():
    assert set_nested_value({"a": {}}, "a.0", "x") == {"a": {"0": "x"}}


def test_get_nested_value():
    doc = {"faq": {"cards": [{"answer": "A"}]}}
    assert get_nested_value(doc, "faq.cards.0.answer") == "A"
    assert get_nested_value(doc, "faq.cards.3.answer", "fallback") == "fallback"
    assert get_nested_value(doc, "faq.cards.x", None) is None
    assert get_nested_value(doc, "nope.deeper") is None
