"""Tests for the annotation model and its wire shape."""

import json
import logging

import pytest

from pdfoverlay.core.annotations.models import (
    Annotation,
    TextAlign,
    VerticalAlign,
    coerce_changes,
    normalize_font_size,
)

WIRE = {
    "id": "a1",
    "x": 10,
    "y": 20,
    "width": 200,
    "height": 60,
    "text": "Hello\nWorld",
    "fontSize": 18,
    "fontFamily": "Times New Roman",
    "color": "#112233",
    "backgroundColor": "transparent",
    "textAlign": "center",
    "verticalAlign": "bottom",
    "page": 2,
}


def test_from_dict_reads_wire_shape() -> None:
    ann = Annotation.from_dict(WIRE)
    assert ann.font_size == 18
    assert ann.font_family == "Times New Roman"
    assert ann.text_align is TextAlign.CENTER
    assert ann.vertical_align is VerticalAlign.BOTTOM
    assert ann.page == 2
    assert not ann.has_background


def test_to_dict_has_exactly_the_wire_fields() -> None:
    data = Annotation.from_dict(WIRE).to_dict()
    assert data == WIRE
    # Flat and JSON serializable
    assert json.loads(json.dumps(data)) == WIRE


def test_from_dict_ignores_type_key() -> None:
    ann = Annotation.from_dict(dict(WIRE, type="textbox"))
    assert ann.id == "a1"


def test_from_dict_requires_geometry() -> None:
    data = dict(WIRE)
    del data["width"]
    with pytest.raises(KeyError):
        Annotation.from_dict(data)


def test_from_dict_rejects_bad_alignment() -> None:
    with pytest.raises(ValueError):
        Annotation.from_dict(dict(WIRE, textAlign="justify"))


@pytest.mark.parametrize("size, expected", [
    (6, 6), (14, 14), (32, 32), (14.0, 14), (13, 14), (7, 14), (40, 14), ("12", 14), (None, 14),
])
def test_normalize_font_size(size, expected) -> None:
    assert normalize_font_size(size) == expected


def test_coerce_changes_accepts_both_namings() -> None:
    changes = coerce_changes({"fontSize": 20, "background_color": "#ffffff",
                              "verticalAlign": "middle"})
    assert changes == {"font_size": 20, "background_color": "#ffffff",
                       "vertical_align": VerticalAlign.MIDDLE}


def test_coerce_changes_drops_bad_values(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        changes = coerce_changes({"x": "left", "bogus": 1, "width": True, "y": 5,
                                  "textAlign": "sideways"})
    assert changes == {"y": 5}
    assert "bogus" in caplog.text


def test_coerce_changes_keeps_id_immutable() -> None:
    assert coerce_changes({"id": "other", "x": 1}, allow_id=False) == {"x": 1}


@pytest.mark.parametrize("background, expected", [
    ("#ffffff", True), ("transparent", False), ("TRANSPARENT", False), ("", False),
])
def test_has_background(background, expected) -> None:
    ann = Annotation.from_dict(dict(WIRE, backgroundColor=background))
    assert ann.has_background is expected


def test_contains_point() -> None:
    ann = Annotation.from_dict(WIRE)
    assert ann.contains_point(10, 20)
    assert ann.contains_point(210, 80)
    assert not ann.contains_point(211, 50)
