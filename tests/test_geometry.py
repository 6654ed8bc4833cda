"""Tests for document/view coordinate conversion."""

import pytest

from pdfoverlay.core.geometry import (
    DocPoint,
    ViewPoint,
    clamp_zoom,
    delta_to_doc,
    rect_to_doc,
    rect_to_view,
    to_doc,
    to_view,
)


def test_to_view_scales_both_axes() -> None:
    assert to_view(DocPoint(100, 50), 2.0) == ViewPoint(200, 100)


def test_to_doc_divides_both_axes() -> None:
    assert to_doc(ViewPoint(150, 75), 1.5) == DocPoint(100, 50)


@pytest.mark.parametrize("scale", [0.5, 0.75, 1.0, 1.25, 1.7, 2.2, 3.0])
@pytest.mark.parametrize("point", [(0, 0), (100, 100), (33.3, 712.9), (611.99, 0.01)])
def test_round_trip_returns_original_point(point, scale) -> None:
    result = to_doc(to_view(DocPoint(*point), scale), scale)
    assert result.x == pytest.approx(point[0])
    assert result.y == pytest.approx(point[1])


def test_delta_uses_scale() -> None:
    assert delta_to_doc(30, -15, 1.5) == (20, -10)


def test_rect_conversion_round_trip() -> None:
    rect = (10.0, 20.0, 200.0, 60.0)
    view = rect_to_view(rect, 2.5)
    assert view == (25.0, 50.0, 500.0, 150.0)
    assert rect_to_doc(view, 2.5) == pytest.approx(rect)


@pytest.mark.parametrize("factor, expected", [
    (0.1, 0.5),
    (0.5, 0.5),
    (1.75, 1.75),
    (3.0, 3.0),
    (5.0, 3.0),
])
def test_clamp_zoom(factor, expected) -> None:
    assert clamp_zoom(factor) == expected
